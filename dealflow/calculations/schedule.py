"""Payment scheduler: spreads lump costs over the period grid.

Each payment mode places the amount differently:
- Single: the entire amount in one period.
- Range: an even share in every period of an inclusive range.
- Multi: a share in each listed period, by percentage when one is given
  for every listed period, evenly otherwise (also when any percentage is
  NaN or infinite).

Shares use plain float division. Nothing is rounded and no remainder is
redistributed, so percentages that do not sum to 100 over- or
under-allocate the amount.
"""

import math
from typing import List

from ..models.line_items import (
    MultiSchedule,
    PaymentSchedule,
    RangeSchedule,
    ScheduledLineItem,
    SingleSchedule,
)
from .periods import clamp_period, parse_period, zeros


def _add_share(allocations: List[float], month, share: float, horizon: int) -> None:
    allocations[clamp_period(month, horizon)] += share


def _allocate_single(schedule: SingleSchedule, amount: float, horizon: int) -> List[float]:
    allocations = zeros(horizon)
    _add_share(allocations, schedule.month, amount, horizon)
    return allocations


def _allocate_range(schedule: RangeSchedule, amount: float, horizon: int) -> List[float]:
    allocations = zeros(horizon)
    start = clamp_period(schedule.start_month, horizon)
    end_month = schedule.end_month if schedule.end_month is not None else start
    end = clamp_period(end_month, horizon)
    if end < start:
        start, end = end, start

    span = end - start + 1
    share = amount / span if span > 0 else amount
    for month in range(start, end + 1):
        allocations[month] += share
    return allocations


def _is_finite(value) -> bool:
    return isinstance(value, (int, float)) and math.isfinite(value)


def _allocate_multi(schedule: MultiSchedule, amount: float, horizon: int) -> List[float]:
    allocations = zeros(horizon)
    months = [
        clamp_period(parsed, horizon)
        for parsed in (parse_period(entry) for entry in schedule.months)
        if parsed is not None
    ]
    if not months:
        allocations[0] += amount
        return allocations

    percentages = list(schedule.percentages or [])
    if len(percentages) == len(months) and all(_is_finite(pct) for pct in percentages):
        for month, pct in zip(months, percentages):
            allocations[month] += amount * pct / 100
    else:
        even_share = amount / len(months)
        for month in months:
            allocations[month] += even_share
    return allocations


def allocate_schedule(schedule: PaymentSchedule, amount: float, horizon: int) -> List[float]:
    """Spread `amount` over the grid according to a payment schedule.

    Args:
        schedule: SingleSchedule, RangeSchedule or MultiSchedule.
        amount: Amount to distribute (USD).
        horizon: Number of periods.

    Returns:
        Per-period allocations (positive magnitudes).
    """
    if not amount or horizon <= 0:
        return zeros(horizon)

    if isinstance(schedule, RangeSchedule):
        return _allocate_range(schedule, amount, horizon)
    if isinstance(schedule, MultiSchedule):
        return _allocate_multi(schedule, amount, horizon)
    if isinstance(schedule, SingleSchedule):
        return _allocate_single(schedule, amount, horizon)
    raise TypeError(f"Unsupported payment schedule: {type(schedule).__name__}")


def build_cost_allocations(item: ScheduledLineItem, horizon: int) -> List[float]:
    """Allocate a scheduled cost over the period grid.

    The allocations sum to `amount_usd` (up to float rounding). Periods
    outside the grid are clamped onto its edges.

    Example:
        >>> item = ScheduledLineItem("c1", "Permits", 300, RangeSchedule(2, 4))
        >>> build_cost_allocations(item, 60)[2:5]
        [100.0, 100.0, 100.0]
    """
    return allocate_schedule(item.schedule, item.amount_usd or 0.0, horizon)
