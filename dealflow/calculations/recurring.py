"""Recurring series: interval carrying costs, flat lines and one-off contributions."""

from typing import List, Optional

from ..models.line_items import INTERVAL_STEPS, IntervalUnit, RecurringLineItem
from .periods import clamp_period, zeros


def _interval_step(interval_unit) -> Optional[int]:
    try:
        return INTERVAL_STEPS[IntervalUnit(interval_unit)]
    except ValueError:
        return None


def build_interval_expense_values(item: RecurringLineItem, horizon: int) -> List[float]:
    """Expand a recurring carrying cost over the grid.

    The full amount is charged at every step between the start and end
    periods (inclusive); nothing is pro-rated across the interval. Values
    are negative, following the expense sign convention.

    Args:
        item: Recurring line item.
        horizon: Number of periods.

    Returns:
        Per-period values; all zero for a zero amount or unknown interval.
    """
    values = zeros(horizon)
    amount = item.amount_usd or 0.0
    if not amount or horizon <= 0:
        return values

    step = _interval_step(item.interval_unit)
    if step is None:
        return values

    start = clamp_period(item.start_month, horizon)
    end = horizon - 1 if item.end_month is None else clamp_period(item.end_month, horizon)
    if end < start:
        return values

    for month in range(start, end + 1, step):
        values[month] -= amount
    return values


def build_recurring_line_values(amount: float, start_month, horizon: int) -> List[float]:
    """Flat series: `amount` in every period from `start_month` to the end of the grid."""
    values = zeros(horizon)
    if horizon <= 0:
        return values
    for month in range(clamp_period(start_month, horizon), horizon):
        values[month] = amount
    return values


def build_contribution_values(amount: float, month, horizon: int) -> List[float]:
    """One-off amount placed in a single (clamped) period."""
    values = zeros(horizon)
    if horizon <= 0:
        return values
    values[clamp_period(month, horizon)] = amount or 0.0
    return values


def calculate_recurring_average(item: RecurringLineItem) -> float:
    """Monthly equivalent of a recurring charge (e.g. quarterly / 3)."""
    amount = item.amount_usd or 0.0
    if not amount:
        return 0.0
    step = _interval_step(item.interval_unit)
    if step is None:
        return amount
    return amount / step
