"""UI components for the cashflow app."""

from .cashflow_grid import render_cashflow_grid
from .charts import render_cashflow_chart, render_category_chart
from .calculation_trace_view import render_trace_summary

__all__ = [
    "render_cashflow_grid",
    "render_cashflow_chart",
    "render_category_chart",
    "render_trace_summary",
]
