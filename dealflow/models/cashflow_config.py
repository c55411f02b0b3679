"""Configuration for a cashflow projection request."""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional, Sequence

from .line_items import DEFAULT_HORIZON


class ViewMode(str, Enum):
    """How periods are grouped into presentation columns."""
    MONTHLY = "monthly"
    ANNUAL = "annual"
    TAX_YEAR = "tax_year"


@dataclass(frozen=True)
class CashflowConfig:
    """Projection settings.

    Attributes:
        horizon: Number of monthly periods projected.
        view_mode: Column grouping of the returned view.
        closing_date: Calendar anchor for period 0. Defaults to the project's
            closing date, then to the current month.
        period_years: Explicit calendar-year tag per period for the tax-year
            view. Overrides the years derived from the closing date.
    """
    horizon: int = DEFAULT_HORIZON
    view_mode: ViewMode = ViewMode.MONTHLY
    closing_date: Optional[date] = None
    period_years: Optional[Sequence[int]] = None
