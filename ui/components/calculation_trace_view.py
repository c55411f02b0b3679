"""Calculation trace view: the formulas and values behind the grid totals."""

from typing import Dict, List, Optional

import streamlit as st

from dealflow.calculations.trace import TraceContext, TracedValue


def _format_value(value: float) -> str:
    """Format a value for display."""
    if abs(value) >= 1_000_000:
        return f"${value/1_000_000:,.2f}M"
    elif abs(value) >= 1_000:
        return f"${value/1_000:,.1f}K"
    elif value == 0:
        return "$0"
    else:
        return f"${value:,.2f}"


def render_trace_summary(trace_context: Optional[TraceContext]) -> None:
    """Render traced calculations grouped by formula category.

    Args:
        trace_context: The TraceContext captured during the projection.
    """
    if trace_context is None or not trace_context.traces:
        st.warning("No calculation traces available.")
        return

    st.subheader("Calculation Trace")
    st.caption(f"{len(trace_context.traces)} calculations traced")

    by_category: Dict[str, List[TracedValue]] = {}
    for traced in trace_context.traces.values():
        category = traced.formula_def.category.value if traced.formula_def else "Uncategorized"
        by_category.setdefault(category, []).append(traced)

    for category, traces in sorted(by_category.items()):
        with st.expander(f"{category} ({len(traces)} calculations)", expanded=False):
            for traced in traces:
                col1, col2 = st.columns([2, 3])
                with col1:
                    name = traced.formula_def.name if traced.formula_def else traced.field_path
                    if traced.notes:
                        name = f"{name} ({traced.notes})"
                    st.markdown(f"**{name}**")
                    st.write(f"= {_format_value(traced.value)}")
                with col2:
                    if traced.formula_def:
                        st.code(traced.formula_def.formula, language=None)
                    st.caption(traced.computed_formula)
