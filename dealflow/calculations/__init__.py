"""Calculation modules for the cashflow projection engine."""

from .periods import (
    PeriodLabel,
    clamp_period,
    build_period_calendar,
    resolve_lease_up_offsets,
)
from .schedule import allocate_schedule, build_cost_allocations
from .recurring import (
    build_interval_expense_values,
    build_recurring_line_values,
    build_contribution_values,
    calculate_recurring_average,
)
from .debt import (
    LoanSchedule,
    LoanPreview,
    amortize_loan,
    calculate_level_payment,
    calculate_loan_balance,
    calculate_loan_preview,
)
from .revenue import (
    calculate_net_revenue,
    build_ramped_revenue_values,
    build_revenue_row_values,
)
from .aggregation import (
    SeriesKind,
    Series,
    build_expense_series,
    build_carrying_series,
    build_revenue_series,
    build_turnover_rows,
    build_cashflow_rows,
)
from .views import (
    AggregationColumn,
    CashflowView,
    build_columns,
    column_value,
)

# Engine entry point
from .cashflow import (
    CashflowProjection,
    calculate_cashflow,
    generate_cashflow_rows,
)
from .trace import TraceContext, TracedValue, trace
from .formula_registry import FormulaRegistry, FormulaCategory, FormulaDefinition

__all__ = [
    "PeriodLabel",
    "clamp_period",
    "build_period_calendar",
    "resolve_lease_up_offsets",
    "allocate_schedule",
    "build_cost_allocations",
    "build_interval_expense_values",
    "build_recurring_line_values",
    "build_contribution_values",
    "calculate_recurring_average",
    "LoanSchedule",
    "LoanPreview",
    "amortize_loan",
    "calculate_level_payment",
    "calculate_loan_balance",
    "calculate_loan_preview",
    "calculate_net_revenue",
    "build_ramped_revenue_values",
    "build_revenue_row_values",
    "SeriesKind",
    "Series",
    "build_expense_series",
    "build_carrying_series",
    "build_revenue_series",
    "build_turnover_rows",
    "build_cashflow_rows",
    "AggregationColumn",
    "CashflowView",
    "build_columns",
    "column_value",
    "CashflowProjection",
    "calculate_cashflow",
    "generate_cashflow_rows",
    "TraceContext",
    "TracedValue",
    "trace",
    "FormulaRegistry",
    "FormulaCategory",
    "FormulaDefinition",
]
