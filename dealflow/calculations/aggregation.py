"""Series aggregation: line items -> category rows -> Total and Balance.

Sign convention: revenue and loan funding are positive, costs, interest and
principal repayments are negative.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional, Sequence

import numpy as np

from ..models.line_items import (
    ContributionItem,
    IntervalUnit,
    LoanItem,
    RecurringLineItem,
    RevenueRow,
    ScheduledLineItem,
    TurnoverAssumption,
)
from ..models.project import revenue_label
from .debt import amortize_loan
from .periods import has_magnitude, zeros
from .recurring import build_contribution_values, build_interval_expense_values
from .revenue import build_ramped_revenue_values, calculate_net_revenue
from .schedule import build_cost_allocations
from .trace import trace

GP_PARTNER_LABELS = {
    "darmon": "Darmon",
    "sherman": "Sherman",
}


class SeriesKind(str, Enum):
    """Role of a row on the cashflow grid."""
    REVENUE = "revenue"
    EXPENSE = "expense"
    TOTAL = "total"


@dataclass
class Series:
    """A row of the cashflow grid and its line-item breakdown.

    `period_values` and every line item's `period_values` share the same
    period indexing.
    """
    id: str
    label: str
    kind: SeriesKind
    period_values: List[float]
    line_items: List["Series"] = field(default_factory=list)

    @property
    def total(self) -> float:
        return float(sum(self.period_values))


def _sum_series(line_items: Sequence[Series], horizon: int) -> List[float]:
    if not line_items:
        return zeros(horizon)
    return np.sum([item.period_values for item in line_items], axis=0, dtype=float).tolist()


def _line_item(item_id: str, label: str, kind: SeriesKind, values: List[float]) -> Series:
    return Series(id=item_id, label=label, kind=kind, period_values=values)


def build_expense_series(
    items: Sequence[ScheduledLineItem],
    label: str,
    horizon: int,
    series_id: Optional[str] = None,
) -> Series:
    """Schedule every cost of a category and negate it into an expense row.

    Args:
        items: Scheduled line items of one category (soft, hard, lease-up).
        label: Category label, also used to name unlabeled items.
        horizon: Number of periods.
        series_id: Row id (defaults to the lowercased label).

    Returns:
        Expense Series with one line item per cost.
    """
    line_items = []
    for index, item in enumerate(items):
        allocations = build_cost_allocations(item, horizon)
        line_items.append(_line_item(
            item.id or f"{label}-{index}",
            item.label or f"{label} {index + 1}",
            SeriesKind.EXPENSE,
            [-value for value in allocations],
        ))

    return Series(
        id=series_id or label.lower().replace(" ", "_"),
        label=label,
        kind=SeriesKind.EXPENSE,
        period_values=_sum_series(line_items, horizon),
        line_items=line_items,
    )


def build_loan_line_items(loan: LoanItem, index: int, horizon: int) -> List[Series]:
    """Funding (+), interest (-) and principal (-) line items of one loan.

    Line items without any magnitude are omitted.
    """
    base_id = loan.id or f"loan-{index}"
    schedule = amortize_loan(replace(loan, id=base_id), horizon)
    name = loan.label or "Loan"
    candidates = [
        (f"{base_id}-funding", f"{name} • Funding", list(schedule.funding)),
        (f"{base_id}-interest", f"{name} • Interest", [-v for v in schedule.interest]),
        (f"{base_id}-principal", f"{name} • Principal", [-v for v in schedule.principal]),
    ]
    return [
        _line_item(item_id, item_label, SeriesKind.EXPENSE, values)
        for item_id, item_label, values in candidates
        if has_magnitude(values)
    ]


def build_turnover_rows(
    apartment_turnover: TurnoverAssumption,
    apartment_units: float,
    retail_turnover: TurnoverAssumption,
    retail_units: float,
    start_month: Optional[int],
) -> List[RecurringLineItem]:
    """Monthly management charges covering annual unit turnover.

    Annual cost = turnover % x units x cost per turn, charged as 1/12 every
    month from `start_month` (normally leasing start) onward.
    """
    rows = []
    candidates = [
        ("turnover-apartments", "Apartment Turnover (auto)", apartment_turnover, apartment_units),
        ("turnover-retail", "Retail Turnover (auto)", retail_turnover, retail_units),
    ]
    for row_id, label, assumption, units in candidates:
        monthly = assumption.annual_cost(units) / 12
        if not monthly:
            continue
        trace(
            "carrying.turnover_monthly",
            monthly,
            {"turnover_pct": assumption.turnover_pct, "units": units,
             "turnover_cost_usd": assumption.turnover_cost_usd},
            notes=label,
            item_id=row_id,
        )
        rows.append(RecurringLineItem(
            id=row_id,
            label=label,
            amount_usd=monthly,
            interval_unit=IntervalUnit.MONTHLY,
            start_month=start_month or 0,
            end_month=None,
        ))
    return rows


def build_carrying_series(
    loans: Sequence[LoanItem],
    recurring: Sequence[RecurringLineItem],
    horizon: int,
) -> Series:
    """Combine loans and recurring charges into the carrying-cost row.

    Args:
        loans: Loans (funding, interest and principal line items each).
        recurring: Property tax, management and turnover charges.
        horizon: Number of periods.

    Returns:
        Expense Series; line items with no magnitude are left out.
    """
    line_items: List[Series] = []
    for index, loan in enumerate(loans):
        line_items.extend(build_loan_line_items(loan, index, horizon))

    for index, item in enumerate(recurring):
        values = build_interval_expense_values(item, horizon)
        if not has_magnitude(values):
            continue
        line_items.append(_line_item(
            item.id or f"carrying-{index}",
            item.label or "Carrying Cost",
            SeriesKind.EXPENSE,
            values,
        ))

    return Series(
        id="carrying",
        label="Carrying Costs",
        kind=SeriesKind.EXPENSE,
        period_values=_sum_series(line_items, horizon),
        line_items=line_items,
    )


def build_revenue_series(
    rows: Sequence[RevenueRow],
    contributions: Sequence[ContributionItem],
    horizon: int,
    leasing_start: Optional[int] = None,
    stabilized: Optional[int] = None,
) -> Series:
    """Ramped rental revenue plus GP contributions.

    Each row ramps between its own milestones when set, otherwise between
    the project-level `leasing_start` and `stabilized` offsets.
    """
    line_items = []
    for index, row in enumerate(rows):
        row_id = row.id or f"{row.kind.value}-{index}"
        label = revenue_label(row)
        net = trace(
            "revenue.net_monthly",
            calculate_net_revenue(row),
            {"unit_count": row.unit_count or 0.0, "rent": row.monthly_rent_per_unit or 0.0},
            notes=label,
            item_id=row_id,
        )
        row_leasing = row.leasing_start_month if row.leasing_start_month is not None else leasing_start
        row_stabilized = row.stabilized_month if row.stabilized_month is not None else stabilized
        line_items.append(_line_item(
            row_id,
            label,
            SeriesKind.REVENUE,
            build_ramped_revenue_values(net, row.start_month, row_leasing, row_stabilized, horizon),
        ))

    for index, contribution in enumerate(contributions):
        partner = GP_PARTNER_LABELS.get(contribution.partner, contribution.partner or "GP")
        line_items.append(_line_item(
            contribution.id or f"gp-{index}",
            f"GP • {partner}",
            SeriesKind.REVENUE,
            build_contribution_values(contribution.amount_usd, contribution.contribution_month, horizon),
        ))

    return Series(
        id="revenues",
        label="Revenues",
        kind=SeriesKind.REVENUE,
        period_values=_sum_series(line_items, horizon),
        line_items=line_items,
    )


def build_cashflow_rows(categories: Sequence[Series], horizon: int) -> List[Series]:
    """Append the Total and Balance rows to the category rows.

    Total is the per-period sum of every category; Balance is the running
    cumulative sum of Total.

    Args:
        categories: Category rows (revenues, cost categories, carrying).
        horizon: Number of periods.

    Returns:
        The category rows followed by Total and Balance.
    """
    total_values = _sum_series(categories, horizon)
    balance_values = np.cumsum(np.asarray(total_values, dtype=float)).tolist() if horizon > 0 else []

    rows = list(categories)
    rows.append(Series(id="total", label="Total", kind=SeriesKind.TOTAL, period_values=total_values))
    rows.append(Series(id="balance", label="Balance", kind=SeriesKind.TOTAL, period_values=balance_values))
    return rows
