"""Line item data models consumed by the cashflow projection engine.

All line items are immutable. They are built from persisted records (after
validation) for each projection request and discarded afterwards.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union


DEFAULT_HORIZON = 60  # Months projected on the cashflow grid


class PaymentMode(str, Enum):
    """How a lump cost is distributed over time."""
    SINGLE = "single"
    RANGE = "range"
    MULTI = "multi"


class IntervalUnit(str, Enum):
    """Cadence of a recurring carrying cost."""
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"

    @property
    def step_months(self) -> int:
        """Number of periods between two charges."""
        return INTERVAL_STEPS[self]


INTERVAL_STEPS = {
    IntervalUnit.MONTHLY: 1,
    IntervalUnit.QUARTERLY: 3,
    IntervalUnit.YEARLY: 12,
}


class LoanMode(str, Enum):
    """Repayment structure of a loan."""
    INTEREST_ONLY = "interest_only"
    AMORTIZING = "amortizing"


class CarryingType(str, Enum):
    """Discriminator for carrying cost payloads."""
    LOAN = "loan"
    PROPERTY_TAX = "property_tax"
    MANAGEMENT = "management"


class PropertyTaxPhase(str, Enum):
    """Which phase of the deal a property tax row belongs to."""
    CONSTRUCTION = "construction"
    STABILIZED = "stabilized"


class MeasurementUnit(str, Enum):
    """Unit a measured hard cost is priced in."""
    NONE = "none"
    SQFT = "sqft"
    LINEAR_FEET = "linear_feet"
    APARTMENT = "apartment"
    BUILDING = "building"


class RevenueKind(str, Enum):
    """Source of a revenue row."""
    APARTMENT = "apartment"
    RETAIL = "retail"
    PARKING = "parking"


# =============================================================================
# Payment schedules (one variant per payment mode)
# =============================================================================

@dataclass(frozen=True)
class SingleSchedule:
    """Entire amount paid in one period."""
    month: Optional[int] = 0

    @property
    def mode(self) -> PaymentMode:
        return PaymentMode.SINGLE


@dataclass(frozen=True)
class RangeSchedule:
    """Amount spread evenly over an inclusive month range."""
    start_month: Optional[int] = 0
    end_month: Optional[int] = None

    @property
    def mode(self) -> PaymentMode:
        return PaymentMode.RANGE


@dataclass(frozen=True)
class MultiSchedule:
    """Amount split across a list of months, optionally by percentage.

    Percentages are only honoured when there is one per month; otherwise the
    amount is split evenly.
    """
    months: Tuple[Optional[int], ...] = ()
    percentages: Optional[Tuple[float, ...]] = None

    @property
    def mode(self) -> PaymentMode:
        return PaymentMode.MULTI


PaymentSchedule = Union[SingleSchedule, RangeSchedule, MultiSchedule]


@dataclass(frozen=True)
class ScheduledLineItem:
    """A lump cost (soft, hard or lease-up) with a payment schedule.

    Measured hard costs also carry their unit price and unit count;
    `amount_usd` is then their product.
    """
    id: str
    label: str
    amount_usd: float
    schedule: PaymentSchedule = SingleSchedule()
    cost_group: Optional[str] = None
    measurement_unit: MeasurementUnit = MeasurementUnit.NONE
    price_per_unit: Optional[float] = None
    units_count: Optional[float] = None

    @property
    def payment_mode(self) -> PaymentMode:
        return self.schedule.mode


@dataclass(frozen=True)
class RecurringLineItem:
    """A carrying cost charged at a fixed cadence.

    `end_month` of None means "through the end of the horizon".
    """
    id: str
    label: str
    amount_usd: float
    interval_unit: IntervalUnit = IntervalUnit.MONTHLY
    start_month: int = 0
    end_month: Optional[int] = None
    carrying_type: CarryingType = CarryingType.MANAGEMENT
    property_tax_phase: Optional[PropertyTaxPhase] = None


@dataclass(frozen=True)
class LoanItem:
    """A loan funded in one period and repaid from `repayment_start_month`."""
    id: str
    label: str
    principal: float
    annual_rate_pct: float
    term_months: int
    funding_month: int = 0
    repayment_start_month: int = 0
    mode: LoanMode = LoanMode.INTEREST_ONLY

    @property
    def monthly_rate(self) -> float:
        return self.annual_rate_pct / 100 / 12


@dataclass(frozen=True)
class RevenueRow:
    """A rentable line (unit type, retail space, parking) producing monthly revenue."""
    id: str
    label: str
    unit_count: float
    monthly_rent_per_unit: float
    vacancy_pct: float = 5.0
    start_month: int = 0
    leasing_start_month: Optional[int] = None
    stabilized_month: Optional[int] = None
    kind: RevenueKind = RevenueKind.APARTMENT


@dataclass(frozen=True)
class ContributionItem:
    """A GP equity contribution received in a single period."""
    id: str
    partner: str
    amount_usd: float
    contribution_month: int = 0


@dataclass(frozen=True)
class TurnoverAssumption:
    """Annual unit turnover: share of units turning over and cost per turn."""
    turnover_pct: float = 0.0
    turnover_cost_usd: float = 0.0

    def annual_cost(self, unit_count: float) -> float:
        """Annual turnover cost for a given number of units."""
        if not self.turnover_pct or not self.turnover_cost_usd or not unit_count:
            return 0.0
        return (self.turnover_pct / 100) * unit_count * self.turnover_cost_usd
