"""Project data model containing every line item feeding a cashflow projection."""

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from .line_items import (
    ContributionItem,
    LoanItem,
    RecurringLineItem,
    RevenueKind,
    RevenueRow,
    ScheduledLineItem,
    TurnoverAssumption,
)


@dataclass
class ProjectInputs:
    """Complete set of records for one development deal.

    The persistence layer owns these records; the engine only reads them.
    Milestone dates are converted to period offsets relative to the
    closing month (see `resolve_lease_up_offsets`).
    """

    name: str = "Development Project"

    # === Timing ===
    closing_date: Optional[date] = None  # Period 0 is the closing month
    start_leasing_date: Optional[date] = None
    stabilized_date: Optional[date] = None
    target_units: int = 0  # Used for turnover when no apartment rows carry units

    # === Revenue ===
    apartment_revenue: List[RevenueRow] = field(default_factory=list)
    retail_revenue: List[RevenueRow] = field(default_factory=list)
    parking_revenue: List[RevenueRow] = field(default_factory=list)
    gp_contributions: List[ContributionItem] = field(default_factory=list)

    # === Costs ===
    soft_costs: List[ScheduledLineItem] = field(default_factory=list)
    hard_costs: List[ScheduledLineItem] = field(default_factory=list)
    leaseup_costs: List[ScheduledLineItem] = field(default_factory=list)

    # === Carrying costs ===
    loans: List[LoanItem] = field(default_factory=list)
    recurring_costs: List[RecurringLineItem] = field(default_factory=list)
    apartment_turnover: TurnoverAssumption = field(default_factory=TurnoverAssumption)
    retail_turnover: TurnoverAssumption = field(default_factory=TurnoverAssumption)

    @property
    def revenue_rows(self) -> List[RevenueRow]:
        """All rentable rows in display order (apartments, retail, parking)."""
        return [*self.apartment_revenue, *self.retail_revenue, *self.parking_revenue]

    def total_apartment_units(self) -> float:
        """Apartment units from revenue rows, falling back to the target unit count."""
        explicit = sum(row.unit_count or 0 for row in self.apartment_revenue)
        if explicit > 0:
            return explicit
        return self.target_units or 0

    def total_retail_units(self) -> float:
        """Retail units; a row without a unit count counts as one space."""
        total = 0.0
        for row in self.retail_revenue:
            total += row.unit_count if row.unit_count and row.unit_count > 0 else 1
        return total


def revenue_label(row: RevenueRow) -> str:
    """Display label for a revenue line item."""
    prefix = {
        RevenueKind.APARTMENT: "Apartment",
        RevenueKind.RETAIL: "Retail",
        RevenueKind.PARKING: "Parking",
    }[row.kind]
    default = "Unit type" if row.kind == RevenueKind.APARTMENT else prefix
    return f"{prefix} • {row.label or default}"
