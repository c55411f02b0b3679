"""Period grid helpers: offset clamping and the calendar behind each period."""

import math
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence, Tuple

from dateutil.relativedelta import relativedelta

MAGNITUDE_EPSILON = 0.0001


@dataclass(frozen=True)
class PeriodLabel:
    """Calendar metadata for one period of the grid."""
    index: int  # 0-indexed period
    label: str  # "M1", "M2", ...
    calendar_label: str  # "Jan 2026"
    year: int  # Calendar year, used for tax-year grouping


def parse_period(value) -> Optional[int]:
    """Interpret a period offset, truncating toward zero.

    Returns None when the value is missing or cannot be read as a number.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return math.trunc(number)


def clamp_period(value, horizon: int) -> int:
    """Clamp an offset to [0, horizon - 1]; missing or unparseable offsets map to 0."""
    parsed = parse_period(value)
    if parsed is None:
        return 0
    return max(0, min(horizon - 1, parsed))


def zeros(horizon: int) -> List[float]:
    """An all-zero period series."""
    return [0.0] * max(horizon, 0)


def has_magnitude(values: Sequence[float]) -> bool:
    """True when any period carries a non-negligible amount."""
    return any(abs(value) > MAGNITUDE_EPSILON for value in values)


def month_start(value: date) -> date:
    """First day of the month containing `value`."""
    return date(value.year, value.month, 1)


def month_offset(base: date, target: Optional[date]) -> Optional[int]:
    """Number of whole calendar months from `base` to `target` (may be negative)."""
    if target is None:
        return None
    return (target.year - base.year) * 12 + (target.month - base.month)


def build_period_calendar(closing_date: date, horizon: int) -> List[PeriodLabel]:
    """Label every period of the grid, period 0 being the closing month.

    Args:
        closing_date: Deal closing date; only its month matters.
        horizon: Number of periods.

    Returns:
        One PeriodLabel per period.
    """
    base = month_start(closing_date)
    calendar = []
    for index in range(horizon):
        period_date = base + relativedelta(months=index)
        calendar.append(PeriodLabel(
            index=index,
            label=f"M{index + 1}",
            calendar_label=period_date.strftime("%b %Y"),
            year=period_date.year,
        ))
    return calendar


def resolve_lease_up_offsets(
    closing_date: date,
    start_leasing_date: Optional[date],
    stabilized_date: Optional[date],
) -> Tuple[Optional[int], Optional[int]]:
    """Convert lease-up milestone dates into period offsets.

    - Offsets before closing are floored at 0.
    - A missing stabilization date defaults to 12 months after leasing starts.
    - A stabilization date earlier than leasing start is raised to leasing start.

    Returns:
        Tuple of (leasing_start_offset, stabilized_offset); either may be None.
    """
    base = month_start(closing_date)

    leasing_start = month_offset(base, start_leasing_date)
    if leasing_start is not None:
        leasing_start = max(0, leasing_start)

    stabilized = month_offset(base, stabilized_date)
    if stabilized is not None:
        stabilized = max(0, stabilized)

    if stabilized is None:
        stabilized = leasing_start + 12 if leasing_start is not None else None
    elif leasing_start is not None and stabilized < leasing_start:
        stabilized = leasing_start

    return leasing_start, stabilized
