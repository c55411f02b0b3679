"""Cashflow grid: category rows with expandable line items."""

from typing import List

import pandas as pd
import streamlit as st

from dealflow.calculations.aggregation import Series
from dealflow.calculations.views import CashflowView
from dealflow.export import format_currency_cell


def _row_frame(view: CashflowView, rows: List[Series]) -> pd.DataFrame:
    values = [view.column_values(row) for row in rows]
    data = {"Category": [row.label for row in rows]}
    for index, column in enumerate(view.columns):
        data[column.label] = [format_currency_cell(row_values[index]) for row_values in values]
    data["Total"] = [format_currency_cell(row.total) for row in rows]
    return pd.DataFrame(data)


def render_cashflow_grid(view: CashflowView) -> None:
    """Render the grid: summary rows on top, one expander per category.

    Args:
        view: Cashflow view to display.
    """
    st.dataframe(_row_frame(view, view.rows), use_container_width=True, hide_index=True)

    for row in view.rows:
        if not row.line_items:
            continue
        with st.expander(f"{row.label} ({len(row.line_items)} line items)", expanded=False):
            st.dataframe(
                _row_frame(view, row.line_items),
                use_container_width=True,
                hide_index=True,
            )

    calendar_hints = [c for c in view.columns if c.calendar_label]
    if calendar_hints:
        st.caption(
            " | ".join(f"{c.label}: {c.calendar_label}" for c in calendar_hints[:6])
            + (" | ..." if len(calendar_hints) > 6 else "")
        )
