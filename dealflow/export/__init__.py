"""Export module for cashflow reports."""

from .cashflow_report import (
    CashflowReportConfig,
    format_currency_cell,
    generate_cashflow_excel,
)

__all__ = [
    "CashflowReportConfig",
    "format_currency_cell",
    "generate_cashflow_excel",
]
