"""Chart components for the Streamlit UI."""

import streamlit as st
import plotly.graph_objects as go

from dealflow.calculations.views import CashflowView


def render_cashflow_chart(view: CashflowView) -> None:
    """Render per-column Total as bars with the running Balance as a line.

    Args:
        view: Grouped cashflow view; one bar per column.
    """
    labels = [column.label for column in view.columns]
    total = view.column_values(view.get_row("total"))
    # Balance at the end of each column is the cumulative total so far
    balance = []
    running = 0.0
    for value in total:
        running += value
        balance.append(running)

    fig = go.Figure()

    fig.add_trace(go.Bar(
        x=labels,
        y=total,
        name='Total',
        marker_color=['#2ca02c' if value >= 0 else '#d62728' for value in total],
    ))

    fig.add_trace(go.Scatter(
        x=labels,
        y=balance,
        mode='lines+markers',
        name='Balance',
        line=dict(color='#1f77b4', width=2)
    ))

    fig.update_layout(
        title="Net Cash Flow and Running Balance",
        xaxis_title="Period",
        yaxis_title="Cash Flow ($)",
        yaxis_tickformat="$,.0f",
        legend=dict(
            yanchor="top",
            y=0.99,
            xanchor="left",
            x=0.01
        ),
        height=400,
        hovermode="x unified",
    )

    st.plotly_chart(fig, use_container_width=True)


def render_category_chart(view: CashflowView) -> None:
    """Render category totals as a horizontal bar chart."""
    categories = [row for row in view.rows if row.id not in ("total", "balance")]

    fig = go.Figure(data=[go.Bar(
        x=[row.total for row in categories],
        y=[row.label for row in categories],
        orientation='h',
        marker_color=['#2ca02c' if row.total >= 0 else '#d62728' for row in categories],
    )])

    fig.update_layout(
        title="Totals by Category",
        xaxis_tickformat="$,.0f",
        height=300,
    )

    st.plotly_chart(fig, use_container_width=True)
