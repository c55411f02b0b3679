"""Main Streamlit application for the deal cashflow projection."""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import streamlit as st

from dealflow.calculations.cashflow import calculate_cashflow
from dealflow.export import CashflowReportConfig, generate_cashflow_excel
from dealflow.models.cashflow_config import CashflowConfig, ViewMode
from dealflow.sample import get_sample_project
from ui.components import (
    render_cashflow_chart,
    render_cashflow_grid,
    render_category_chart,
    render_trace_summary,
)

# Page configuration
st.set_page_config(
    page_title="Deal Cashflow",
    page_icon="🏗️",
    layout="wide",
    initial_sidebar_state="expanded",
)

VIEW_LABELS = {
    "Monthly": ViewMode.MONTHLY,
    "Annual": ViewMode.ANNUAL,
    "Tax Year": ViewMode.TAX_YEAR,
}


def render_sidebar(project) -> CashflowConfig:
    """Projection settings from the sidebar."""
    st.sidebar.header("Projection")

    closing_date = st.sidebar.date_input("Closing date", value=project.closing_date)
    horizon = st.sidebar.slider("Horizon (months)", min_value=12, max_value=120, value=60, step=12)
    view_label = st.sidebar.radio("View", list(VIEW_LABELS), index=1)

    st.sidebar.divider()
    st.sidebar.metric("Apartment units", f"{project.total_apartment_units():,.0f}")
    st.sidebar.metric("Loans", len(project.loans))

    return CashflowConfig(
        horizon=horizon,
        view_mode=VIEW_LABELS[view_label],
        closing_date=closing_date,
    )


def main():
    project = get_sample_project()
    st.title(project.name)

    config = render_sidebar(project)
    projection = calculate_cashflow(project, config)

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Revenues", f"${projection.get_row('revenues').total:,.0f}")
    costs = sum(projection.get_row(row_id).total for row_id in ("soft", "hard", "leaseup"))
    col2.metric("Development Costs", f"${-costs:,.0f}")
    col3.metric("Carrying Costs", f"${-projection.get_row('carrying').total:,.0f}")
    col4.metric("Ending Balance", f"${projection.ending_balance:,.0f}")

    if projection.leasing_start_offset is not None:
        st.caption(
            f"Leasing starts M{projection.leasing_start_offset + 1}, "
            f"stabilized M{projection.stabilized_offset + 1}"
        )

    tab_grid, tab_charts, tab_trace = st.tabs(["Cashflow", "Charts", "Calculation Trace"])

    with tab_grid:
        render_cashflow_grid(projection.view)
        st.download_button(
            "Download Excel",
            data=generate_cashflow_excel(
                projection, CashflowReportConfig(project_name=project.name)
            ),
            file_name=f"{project.name.lower().replace(' ', '_')}_cashflow.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )

    with tab_charts:
        render_cashflow_chart(projection.view)
        render_category_chart(projection.view)

    with tab_trace:
        render_trace_summary(projection.trace_context)


main()
