"""Cashflow projection engine.

Builds the full cashflow grid for a project:
- Revenues (ramped rental revenue and GP contributions)
- Soft, hard and lease-up costs (scheduled lump costs)
- Carrying costs (loans, property tax, management, automatic turnover)
- Total and running Balance

and groups it into monthly, annual or tax-year columns.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from ..models.cashflow_config import CashflowConfig, ViewMode
from ..models.project import ProjectInputs
from .aggregation import (
    Series,
    build_carrying_series,
    build_cashflow_rows,
    build_expense_series,
    build_revenue_series,
    build_turnover_rows,
)
from .periods import PeriodLabel, build_period_calendar, month_start, resolve_lease_up_offsets
from .trace import TraceContext, trace
from .views import CashflowView, build_columns

logger = logging.getLogger(__name__)


@dataclass
class CashflowProjection:
    """Result of a projection: the per-period rows plus the requested view."""
    rows: List[Series]
    view: CashflowView
    calendar: List[PeriodLabel]
    horizon: int
    leasing_start_offset: Optional[int]
    stabilized_offset: Optional[int]
    trace_context: Optional[TraceContext] = None

    def get_row(self, row_id: str) -> Series:
        return self.view.get_row(row_id)

    @property
    def ending_balance(self) -> float:
        balance = self.get_row("balance").period_values
        return balance[-1] if balance else 0.0

    def regroup(
        self,
        view_mode: ViewMode,
        period_years: Optional[List[int]] = None,
    ) -> CashflowView:
        """Group the same rows into a different view without recomputing them."""
        columns = build_columns(view_mode, self.horizon, self.calendar, period_years)
        return CashflowView(rows=self.rows, columns=columns, view_mode=ViewMode(view_mode))


def _resolve_closing_date(project: ProjectInputs, config: CashflowConfig) -> date:
    anchor = config.closing_date or project.closing_date
    if anchor is None:
        # Projects without a closing date are shown from the current month
        anchor = date.today()
    return month_start(anchor)


def generate_cashflow_rows(
    project: ProjectInputs,
    horizon: int,
    leasing_start: Optional[int],
    stabilized: Optional[int],
) -> List[Series]:
    """Build category rows plus Total and Balance for a project.

    Args:
        project: Project records.
        horizon: Number of periods.
        leasing_start: Project leasing-start offset (None if unknown).
        stabilized: Project stabilization offset (None if unknown).

    Returns:
        Rows in display order: revenues, soft, hard, lease-up, carrying,
        total, balance.
    """
    revenue = build_revenue_series(
        project.revenue_rows,
        project.gp_contributions,
        horizon,
        leasing_start=leasing_start,
        stabilized=stabilized,
    )
    soft = build_expense_series(project.soft_costs, "Soft Costs", horizon, series_id="soft")
    hard = build_expense_series(project.hard_costs, "Hard Costs", horizon, series_id="hard")
    leaseup = build_expense_series(project.leaseup_costs, "Lease-Up Costs", horizon, series_id="leaseup")

    turnover_rows = build_turnover_rows(
        project.apartment_turnover,
        project.total_apartment_units(),
        project.retail_turnover,
        project.total_retail_units(),
        leasing_start,
    )
    carrying = build_carrying_series(
        project.loans,
        [*project.recurring_costs, *turnover_rows],
        horizon,
    )

    trace("revenue.total", revenue.total, {})
    trace("costs.soft_total", soft.total, {})
    trace("costs.hard_total", hard.total, {})
    trace("costs.leaseup_total", leaseup.total, {})
    trace("carrying.total", carrying.total, {})

    rows = build_cashflow_rows([revenue, soft, hard, leaseup, carrying], horizon)

    total = rows[-2].total
    trace("cashflow.total", total, {
        "revenue.total": revenue.total,
        "costs.soft_total": soft.total,
        "costs.hard_total": hard.total,
        "costs.leaseup_total": leaseup.total,
        "carrying.total": carrying.total,
    })
    balance = rows[-1].period_values
    trace("cashflow.ending_balance", balance[-1] if balance else 0.0, {"cashflow.total": total})
    return rows


def calculate_cashflow(
    project: ProjectInputs,
    config: Optional[CashflowConfig] = None,
) -> CashflowProjection:
    """Project a deal's cashflow over the configured horizon.

    This is the engine's entry point. It is a pure function of its inputs:
    the same project and config always produce identical series.

    Args:
        project: Validated project records.
        config: Horizon, view mode and calendar anchor (defaults: 60 months,
            monthly view, project closing date).

    Returns:
        CashflowProjection with rows, grouped view, period calendar and the
        calculation trace.

    Raises:
        ValueError: Non-positive horizon, or tax-year view with bad year tags.
    """
    if config is None:
        config = CashflowConfig()
    horizon = config.horizon
    if horizon < 1:
        raise ValueError(f"Horizon must be at least 1 period, got {horizon}")

    closing = _resolve_closing_date(project, config)
    calendar = build_period_calendar(closing, horizon)
    leasing_start, stabilized = resolve_lease_up_offsets(
        closing, project.start_leasing_date, project.stabilized_date
    )

    with TraceContext() as ctx:
        rows = generate_cashflow_rows(project, horizon, leasing_start, stabilized)

    columns = build_columns(config.view_mode, horizon, calendar, config.period_years)
    view = CashflowView(rows=rows, columns=columns, view_mode=ViewMode(config.view_mode))

    projection = CashflowProjection(
        rows=rows,
        view=view,
        calendar=calendar,
        horizon=horizon,
        leasing_start_offset=leasing_start,
        stabilized_offset=stabilized,
        trace_context=ctx,
    )
    logger.info(
        "Projected %s over %d periods (%s view): ending balance %.2f",
        project.name,
        horizon,
        view.view_mode.value,
        projection.ending_balance,
    )
    return projection
