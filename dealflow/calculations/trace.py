"""Calculation tracing for transparent audit trails.

This module provides runtime tracing of calculations, capturing
the actual values used in each formula for debugging and auditing.
"""

from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from .formula_registry import FormulaRegistry, FormulaDefinition

_current_context: ContextVar[Optional["TraceContext"]] = ContextVar(
    "dealflow_trace_context", default=None
)


@dataclass
class TracedValue:
    """A single traced calculation.

    Captures the formula definition, actual input values,
    computed result, and formatted formula string.
    """
    field_path: str
    value: float
    formula_def: Optional[FormulaDefinition]
    input_values: Dict[str, float]
    computed_formula: str  # Formula with values substituted
    timestamp: datetime = field(default_factory=datetime.now)
    period: Optional[int] = None
    notes: str = ""
    item_id: str = ""


def _format_value(value: float) -> str:
    """Format a value for display."""
    if abs(value) >= 1_000_000:
        return f"${value/1_000_000:,.2f}M"
    elif abs(value) >= 1_000:
        return f"${value/1_000:,.1f}K"
    elif abs(value) < 1 and value != 0:
        return f"{value:.2%}"
    elif value == 0:
        return "$0"
    else:
        return f"${value:,.0f}"


class TraceContext:
    """Context manager for capturing calculation traces.

    Usage:
        with TraceContext() as ctx:
            projection = calculate_cashflow(project)
            # ctx.traces now contains all traced calculations

    The active context lives in a context variable, so trace() calls can
    reach it from anywhere in the call stack while concurrent projections
    each keep their own.
    """

    def __init__(self, enabled: bool = True):
        """Initialize trace context.

        Args:
            enabled: If False, trace() calls are no-ops.
        """
        self.enabled = enabled
        self.traces: Dict[str, TracedValue] = {}
        self._token = None

    def __enter__(self) -> "TraceContext":
        self._token = _current_context.set(self)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        _current_context.reset(self._token)
        self._token = None

    def trace(
        self,
        field_path: str,
        value: float,
        input_values: Dict[str, float],
        period: Optional[int] = None,
        notes: str = "",
        item_id: str = "",
    ) -> None:
        """Record a traced calculation.

        Args:
            field_path: The formula field path (e.g., "loan.level_payment")
            value: The calculated result
            input_values: Dict of input name -> value used in calculation
            period: Optional period number for period-specific values
            notes: Optional notes about this specific calculation
            item_id: Id of the line item a per-item trace belongs to
        """
        if not self.enabled:
            return

        formula_def = FormulaRegistry.get(field_path)
        computed_formula = self._substitute_values(
            formula_def.formula if formula_def else field_path,
            input_values,
            value,
        )

        trace_key = self._key(field_path, period, notes, item_id)

        self.traces[trace_key] = TracedValue(
            field_path=field_path,
            value=value,
            formula_def=formula_def,
            input_values=dict(input_values),
            computed_formula=computed_formula,
            period=period,
            notes=notes,
            item_id=item_id,
        )

    @staticmethod
    def _key(field_path: str, period: Optional[int], notes: str = "", item_id: str = "") -> str:
        # Per-item traces (e.g. one payment per loan) are keyed by item id, label as fallback
        item = item_id or notes
        key = f"{field_path}[{item}]" if item else field_path
        return f"{key}:{period}" if period is not None else key

    def _substitute_values(
        self,
        formula: str,
        input_values: Dict[str, float],
        result: float,
    ) -> str:
        """Substitute actual values into a formula string.

        Returns:
            Formatted string like "principal x r = $1.2M, 0.50% = $6.0K"
        """
        if not input_values:
            return f"{formula} = {_format_value(result)}"

        values_str = ", ".join(_format_value(val) for val in input_values.values())
        return f"{formula} = {values_str} = {_format_value(result)}"

    def get_trace(
        self,
        field_path: str,
        period: Optional[int] = None,
        notes: str = "",
        item_id: str = "",
    ) -> Optional[TracedValue]:
        """Get a specific trace by field path, optional period and item."""
        return self.traces.get(self._key(field_path, period, notes, item_id))

    def get_traces_by_category(self, category: str) -> Dict[str, TracedValue]:
        """Get all traces in a specific category."""
        return {
            k: v for k, v in self.traces.items()
            if v.formula_def and v.formula_def.category.value == category
        }

    def summary(self) -> str:
        """Generate a summary of all traces."""
        lines = [f"Trace Summary ({len(self.traces)} calculations traced)", ""]

        by_category: Dict[str, List[TracedValue]] = {}
        for traced in self.traces.values():
            cat = traced.formula_def.category.value if traced.formula_def else "Unknown"
            by_category.setdefault(cat, []).append(traced)

        for category, traces in sorted(by_category.items()):
            lines.append(f"=== {category} ({len(traces)} traces) ===")
            for traced in traces[:5]:
                lines.append(f"  {traced.field_path}: {traced.computed_formula}")
            if len(traces) > 5:
                lines.append(f"  ... and {len(traces) - 5} more")
            lines.append("")

        return "\n".join(lines)

    @staticmethod
    def current() -> Optional["TraceContext"]:
        """Get the current active trace context."""
        return _current_context.get()


def trace(
    field_path: str,
    value: float,
    input_values: Dict[str, float],
    period: Optional[int] = None,
    notes: str = "",
    item_id: str = "",
) -> float:
    """Trace a calculation and return the value.

    This can be used inline in calculations:
        payment = trace("loan.level_payment", pmt, {"loan.principal": p})

    Returns:
        The value (unchanged), allowing inline usage
    """
    ctx = TraceContext.current()
    if ctx:
        ctx.trace(field_path, value, input_values, period, notes, item_id)
    return value
