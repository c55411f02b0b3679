"""View grouping: regroups the period grid into monthly, annual or tax-year columns.

Grouping is a read-only projection. Columns only list period indices; the
value shown in a column is the sum of a series over those indices, so any
grouping can be derived from the same series without recomputation.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import pandas as pd

from ..models.cashflow_config import ViewMode
from .aggregation import Series
from .periods import PeriodLabel


@dataclass(frozen=True)
class AggregationColumn:
    """A named group of period indices."""
    id: str
    label: str
    period_indices: tuple
    calendar_label: str = ""


def column_value(values: Sequence[float], column: AggregationColumn) -> float:
    """Sum a series over the periods of a column."""
    total = 0.0
    for index in column.period_indices:
        if 0 <= index < len(values):
            total += values[index]
    return total


def monthly_columns(
    horizon: int,
    calendar: Optional[Sequence[PeriodLabel]] = None,
) -> List[AggregationColumn]:
    """One column per period."""
    columns = []
    for index in range(horizon):
        period = calendar[index] if calendar else None
        columns.append(AggregationColumn(
            id=f"m-{index}",
            label=period.label if period else f"M{index + 1}",
            period_indices=(index,),
            calendar_label=period.calendar_label if period else "",
        ))
    return columns


def annual_columns(
    horizon: int,
    calendar: Optional[Sequence[PeriodLabel]] = None,
) -> List[AggregationColumn]:
    """Consecutive 12-period buckets counted from period 0.

    With a calendar the label is the calendar year(s) the bucket spans
    ("2026" or "2026-2027"); without one it is "Year N".
    """
    columns = []
    for start in range(0, horizon, 12):
        indices = tuple(range(start, min(start + 12, horizon)))
        year_number = start // 12 + 1
        label = f"Year {year_number}"
        calendar_label = ""
        if calendar:
            first, last = calendar[indices[0]], calendar[indices[-1]]
            label = str(first.year) if first.year == last.year else f"{first.year}-{last.year}"
            calendar_label = f"{first.calendar_label} - {last.calendar_label}"
        columns.append(AggregationColumn(
            id=f"y-{year_number}",
            label=label,
            period_indices=indices,
            calendar_label=calendar_label,
        ))
    return columns


def tax_year_columns(
    period_years: Sequence[int],
    calendar: Optional[Sequence[PeriodLabel]] = None,
) -> List[AggregationColumn]:
    """Bucket periods by the calendar year tagged on each period.

    Periods need not align with calendar-year boundaries; the first and
    last buckets are usually partial years.

    Args:
        period_years: Calendar year of each period, in period order.
        calendar: Optional labels for the calendar range shown per column.
    """
    by_year: Dict[int, List[int]] = {}
    for index, year in enumerate(period_years):
        by_year.setdefault(int(year), []).append(index)

    columns = []
    for year in sorted(by_year):
        indices = tuple(by_year[year])
        calendar_label = ""
        if calendar:
            calendar_label = (
                f"{calendar[indices[0]].calendar_label} - {calendar[indices[-1]].calendar_label}"
            )
        columns.append(AggregationColumn(
            id=f"tax-{year}",
            label=str(year),
            period_indices=indices,
            calendar_label=calendar_label,
        ))
    return columns


def build_columns(
    view_mode: ViewMode,
    horizon: int,
    calendar: Optional[Sequence[PeriodLabel]] = None,
    period_years: Optional[Sequence[int]] = None,
) -> List[AggregationColumn]:
    """Build presentation columns for a view mode.

    Args:
        view_mode: MONTHLY, ANNUAL or TAX_YEAR.
        horizon: Number of periods.
        calendar: Optional period calendar used for labels.
        period_years: Calendar year per period for the tax-year view.
            Defaults to the years in `calendar`.

    Returns:
        Columns covering every period exactly once.

    Raises:
        ValueError: Tax-year view without a year tag for every period.
    """
    view_mode = ViewMode(view_mode)
    if view_mode == ViewMode.MONTHLY:
        return monthly_columns(horizon, calendar)
    if view_mode == ViewMode.ANNUAL:
        return annual_columns(horizon, calendar)

    if period_years is None and calendar:
        period_years = [period.year for period in calendar]
    if period_years is None:
        raise ValueError("Tax-year view requires a calendar year for each period")
    if len(period_years) != horizon:
        raise ValueError(
            f"Expected {horizon} period year tags, got {len(period_years)}"
        )
    return tax_year_columns(period_years, calendar)


@dataclass
class CashflowView:
    """Rows of the grid together with the columns they are shown in."""
    rows: List[Series]
    columns: List[AggregationColumn]
    view_mode: ViewMode = ViewMode.MONTHLY

    def get_row(self, row_id: str) -> Series:
        """Get a row by id."""
        for row in self.rows:
            if row.id == row_id:
                return row
        raise KeyError(f"No row with id {row_id!r}")

    def column_values(self, series: Series) -> List[float]:
        """Values of a series in each column of this view."""
        return [column_value(series.period_values, column) for column in self.columns]

    def to_dataframe(self, expanded: Sequence[str] = ()) -> pd.DataFrame:
        """Render the grid as a DataFrame.

        Args:
            expanded: Ids of category rows whose line items are listed
                beneath them.

        Returns:
            DataFrame indexed by row label, one column per view column.
        """
        records = []
        labels = []
        for row in self.rows:
            labels.append(row.label)
            records.append(self.column_values(row))
            if row.id in expanded:
                for item in row.line_items:
                    labels.append(f"  {item.label}")
                    records.append(self.column_values(item))

        return pd.DataFrame(
            records,
            index=pd.Index(labels, name="Category"),
            columns=[column.label for column in self.columns],
        )
