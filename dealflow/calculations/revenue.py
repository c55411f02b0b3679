"""Revenue calculations: net monthly revenue and lease-up ramps."""

from typing import List, Optional

from ..models.line_items import RevenueRow
from .periods import clamp_period, zeros
from .recurring import build_recurring_line_values

DEFAULT_VACANCY_PCT = 5.0


def calculate_net_revenue(row: RevenueRow) -> float:
    """Calculate monthly net revenue for a rentable row.

    Net revenue = units x monthly rent x (1 - vacancy %)

    Args:
        row: Revenue row. A missing vacancy defaults to 5%.

    Returns:
        Monthly net revenue.
    """
    rent = row.monthly_rent_per_unit or 0.0
    units = row.unit_count or 0.0
    vacancy = DEFAULT_VACANCY_PCT if row.vacancy_pct is None else row.vacancy_pct
    return rent * units * (1 - vacancy / 100)


def build_ramped_revenue_values(
    net_amount: float,
    row_start_month: Optional[int],
    leasing_start: Optional[int],
    stabilized: Optional[int],
    horizon: int,
) -> List[float]:
    """Build a monthly revenue series that ramps up during lease-up.

    Revenue grows linearly from 0 at leasing start to `net_amount` at
    stabilization, then stays flat:

        progress = (period - ramp_start) / (ramp_end - ramp_start)

    Without usable milestones (either missing, or stabilization not after
    leasing start) the row earns the full amount from its own start month.

    Args:
        net_amount: Stabilized monthly net revenue.
        row_start_month: First period the row can earn revenue.
        leasing_start: Leasing start offset, or None.
        stabilized: Stabilization offset, or None.
        horizon: Number of periods.

    Returns:
        Per-period revenue.

    Example:
        net 1000, leasing at 3, stabilized at 6, horizon 8:
        [0, 0, 0, 0, 333.33, 666.67, 1000, 1000]
    """
    if not net_amount:
        return zeros(horizon)
    if leasing_start is None or stabilized is None or stabilized <= leasing_start:
        return build_recurring_line_values(net_amount, row_start_month, horizon)
    if horizon <= 0:
        return zeros(horizon)

    ramp_start = clamp_period(max(row_start_month or 0, leasing_start), horizon)
    ramp_end = clamp_period(max(stabilized, ramp_start), horizon)
    if ramp_end <= ramp_start:
        return build_recurring_line_values(net_amount, ramp_start, horizon)

    values = zeros(horizon)
    duration = ramp_end - ramp_start
    for period in range(ramp_start, horizon):
        if period <= ramp_end:
            progress = (period - ramp_start) / duration
            values[period] = net_amount * max(0.0, min(1.0, progress))
        else:
            values[period] = net_amount
    return values


def build_revenue_row_values(
    row: RevenueRow,
    horizon: int,
    net_amount: Optional[float] = None,
) -> List[float]:
    """Ramped revenue series for a row, using its own lease-up milestones.

    Args:
        row: Revenue row.
        horizon: Number of periods.
        net_amount: Override for the monthly amount (defaults to the row's
            net revenue).
    """
    amount = calculate_net_revenue(row) if net_amount is None else net_amount
    return build_ramped_revenue_values(
        amount,
        row.start_month,
        row.leasing_start_month,
        row.stabilized_month,
        horizon,
    )
