"""Input validation for raw line-item payloads.

Every string -> number conversion happens here. Payloads coming from forms
or the persistence layer are checked field by field and turned into typed
line items; the calculation modules never see raw strings.

A payload either normalizes completely or raises a `ValidationError`
naming the offending field.
"""

import logging
import math
from dataclasses import replace
from typing import Any, List, Mapping, Optional, Union

from .models.line_items import (
    CarryingType,
    ContributionItem,
    IntervalUnit,
    LoanItem,
    LoanMode,
    MeasurementUnit,
    MultiSchedule,
    PaymentMode,
    PropertyTaxPhase,
    RangeSchedule,
    RecurringLineItem,
    RevenueKind,
    RevenueRow,
    ScheduledLineItem,
    SingleSchedule,
)

logger = logging.getLogger(__name__)

PROPERTY_TAX_PREFIX = "property_tax_"
PERCENTAGE_TOLERANCE = 0.25

SOFT_COST_CATEGORIES = ("architect", "legal", "permits", "consulting", "marketing", "other")
LEASEUP_COST_CATEGORIES = (
    "marketing", "staging", "leasing_agent", "tenant_improvements", "legal", "other",
)
HARD_COST_CATEGORIES = (
    "structure", "framing", "roof", "windows", "fasade", "rough_plumbing",
    "rough_electric", "rough_havac", "fire_supresion", "insulation", "drywall",
    "tiles", "paint", "flooring", "molding_doors", "kitchen", "finished_plumbing",
    "finished_electric", "appliances", "gym", "study_lounge", "roof_top",
)

# Payload field holding the cost category -> its allowed values
COST_CATEGORIES = {
    "softCategory": SOFT_COST_CATEGORIES,
    "hardCategory": HARD_COST_CATEGORIES,
    "leaseupCategory": LEASEUP_COST_CATEGORIES,
}

DEFAULT_CARRYING_TITLES = {
    CarryingType.LOAN: "Loan",
    CarryingType.PROPERTY_TAX: "Property Tax",
    CarryingType.MANAGEMENT: "Management Fee",
}

PROPERTY_TAX_TITLES = {
    PropertyTaxPhase.CONSTRUCTION: "Construction RE Tax",
    PropertyTaxPhase.STABILIZED: "Stabilized RE Tax",
}


# =============================================================================
# Errors
# =============================================================================

class ValidationError(ValueError):
    """A payload field failed validation."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message

    def to_dict(self) -> dict:
        return {"field": self.field, "error": self.message}


class InvalidCarryingType(ValidationError):
    pass


class RepaymentBeforeFunding(ValidationError):
    pass


class EndBeforeStart(ValidationError):
    pass


class InvalidIntervalUnit(ValidationError):
    pass


class InvalidLoanMode(ValidationError):
    pass


class MissingRequiredField(ValidationError):
    pass


class InvalidPercentages(ValidationError):
    pass


class InvalidCategory(ValidationError):
    pass


class InvalidMeasurementUnit(ValidationError):
    pass


# =============================================================================
# Coercion
# =============================================================================

def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def coerce_number(value: Any) -> Optional[float]:
    """Parse a number; blank, unparseable or non-finite input gives None."""
    if _is_blank(value) or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def coerce_int(value: Any) -> Optional[int]:
    """Parse an integer, truncating toward zero; blank or unparseable gives None."""
    number = coerce_number(value)
    if number is None:
        return None
    return math.trunc(number)


def coerce_number_list(value: Any) -> List[float]:
    """Parse a list or comma-separated string of numbers, dropping bad entries."""
    if not value:
        return []
    raw = value if isinstance(value, (list, tuple)) else str(value).split(",")
    numbers = []
    for entry in raw:
        number = coerce_number(entry.strip() if isinstance(entry, str) else entry)
        if number is not None:
            numbers.append(number)
    return numbers


def _text(body: Mapping[str, Any], *keys: str) -> str:
    for key in keys:
        value = body.get(key)
        if value is None:
            continue
        text = str(value).strip()
        if text:
            return text
    return ""


def _require_number(body: Mapping[str, Any], key: str) -> float:
    number = coerce_number(body.get(key))
    if number is None:
        raise MissingRequiredField(key, f"{key} is required")
    return number


def _require_int(body: Mapping[str, Any], key: str, message: Optional[str] = None) -> int:
    number = coerce_int(body.get(key))
    if number is None:
        raise MissingRequiredField(key, message or f"{key} is required")
    return number


# =============================================================================
# Property tax cost groups
# =============================================================================

def encode_property_tax_group(phase: Optional[str]) -> str:
    """Cost-group code persisted for a property tax row."""
    try:
        return f"{PROPERTY_TAX_PREFIX}{PropertyTaxPhase(phase).value}"
    except ValueError:
        return CarryingType.PROPERTY_TAX.value


def decode_property_tax_phase(cost_group: Optional[str]) -> Optional[PropertyTaxPhase]:
    """Phase encoded in a cost-group code, or None."""
    if not cost_group or not isinstance(cost_group, str):
        return None
    if not cost_group.startswith(PROPERTY_TAX_PREFIX):
        return None
    try:
        return PropertyTaxPhase(cost_group[len(PROPERTY_TAX_PREFIX):])
    except ValueError:
        return None


def default_carrying_title(
    carrying_type: CarryingType,
    phase: Optional[PropertyTaxPhase] = None,
) -> str:
    """Title used when a carrying cost payload has none."""
    if carrying_type == CarryingType.PROPERTY_TAX and phase in PROPERTY_TAX_TITLES:
        return PROPERTY_TAX_TITLES[phase]
    return DEFAULT_CARRYING_TITLES.get(carrying_type, "Carrying Cost")


# =============================================================================
# Carrying costs
# =============================================================================

def _normalize_loan(body: Mapping[str, Any], item_id: str, title: str) -> LoanItem:
    try:
        mode = LoanMode(_text(body, "loanMode").lower())
    except ValueError:
        raise InvalidLoanMode("loanMode", "loanMode is invalid") from None

    principal = _require_number(body, "loanAmountUsd")
    rate_pct = _require_number(body, "interestRatePct")

    term = coerce_int(body.get("loanTermMonths"))
    if term is None or term <= 0:
        raise MissingRequiredField("loanTermMonths", "loanTermMonths must be greater than 0")

    funding_month = _require_int(body, "fundingMonth")
    repayment_start = _require_int(body, "repaymentStartMonth")
    if repayment_start < funding_month:
        raise RepaymentBeforeFunding(
            "repaymentStartMonth", "repaymentStartMonth cannot be before fundingMonth"
        )

    return LoanItem(
        id=item_id,
        label=title,
        principal=principal,
        annual_rate_pct=rate_pct,
        term_months=term,
        funding_month=funding_month,
        repayment_start_month=repayment_start,
        mode=mode,
    )


def _normalize_recurring(
    body: Mapping[str, Any],
    item_id: str,
    title: str,
    carrying_type: CarryingType,
    phase: Optional[PropertyTaxPhase],
) -> RecurringLineItem:
    amount = _require_number(body, "amountUsd")
    start_month = _require_int(body, "startMonth")

    end_month = None
    if not _is_blank(body.get("endMonth")):
        end_month = _require_int(body, "endMonth", "endMonth is invalid")
        if end_month < start_month:
            raise EndBeforeStart("endMonth", "endMonth cannot be before startMonth")

    try:
        interval = IntervalUnit((_text(body, "intervalUnit", "interval") or "monthly").lower())
    except ValueError:
        raise InvalidIntervalUnit("intervalUnit", "intervalUnit is invalid") from None

    return RecurringLineItem(
        id=item_id,
        label=title,
        amount_usd=amount,
        interval_unit=interval,
        start_month=start_month,
        end_month=end_month,
        carrying_type=carrying_type,
        property_tax_phase=phase,
    )


def normalize_carrying_payload(
    body: Mapping[str, Any],
    carrying_type: Optional[str] = None,
) -> Union[LoanItem, RecurringLineItem]:
    """Validate a carrying-cost payload and build the matching line item.

    Args:
        body: Raw payload (camelCase keys, values may be strings).
        carrying_type: Discriminator; read from `carryingType` / `type` in
            the payload when omitted.

    Returns:
        LoanItem for loans, RecurringLineItem for property tax and
        management rows.

    Raises:
        ValidationError: A subclass naming the failing field.
    """
    raw_type = carrying_type or _text(body, "carryingType", "type")
    try:
        kind = CarryingType(raw_type.lower())
    except ValueError:
        logger.debug("Rejected carrying payload with type %r", raw_type)
        raise InvalidCarryingType("carryingType", "carryingType is invalid") from None

    phase = None
    if kind == CarryingType.PROPERTY_TAX:
        try:
            phase = PropertyTaxPhase(_text(body, "propertyTaxPhase", "taxPhase", "phase").lower())
        except ValueError:
            raise MissingRequiredField(
                "propertyTaxPhase", "taxPhase is required for property tax rows"
            ) from None

    title = _text(body, "costName", "title") or default_carrying_title(kind, phase)
    item_id = _text(body, "id")

    if kind == CarryingType.LOAN:
        return _normalize_loan(body, item_id, title)
    return _normalize_recurring(body, item_id, title, kind, phase)


# =============================================================================
# Scheduled costs, revenue and contributions
# =============================================================================

def normalize_scheduled_cost_payload(
    body: Mapping[str, Any],
    category_field: str = "softCategory",
) -> ScheduledLineItem:
    """Validate a soft, hard or lease-up cost payload.

    `category_field` names the payload key holding the cost category
    (`softCategory`, `hardCategory` or `leaseupCategory`); its value must be
    one of that field's allowed categories. An unrecognised payment mode
    falls back to a single payment. Multi-month percentages are optional;
    when given there must be one finite value per month and they must add
    up to 100%.

    Raises:
        ValidationError: A subclass naming the failing field.
    """
    title = _text(body, "costName")
    if not title:
        raise MissingRequiredField("costName", "costName is required")
    amount = _require_number(body, "amountUsd")

    category = _text(body, category_field).lower()
    if category not in COST_CATEGORIES.get(category_field, ()):
        logger.debug("Rejected cost payload with %s %r", category_field, category)
        raise InvalidCategory(category_field, f"{category_field} is invalid")

    try:
        mode = PaymentMode(body.get("paymentMode"))
    except ValueError:
        mode = PaymentMode.SINGLE

    if mode == PaymentMode.RANGE:
        start = coerce_int(body.get("rangeStartMonth"))
        end = coerce_int(body.get("rangeEndMonth"))
        if start is None or end is None:
            field = "rangeStartMonth" if start is None else "rangeEndMonth"
            raise MissingRequiredField(
                field, "rangeStartMonth and rangeEndMonth are required for range mode"
            )
        if end < start:
            raise EndBeforeStart("rangeEndMonth", "rangeEndMonth cannot be before rangeStartMonth")
        schedule = RangeSchedule(start_month=start, end_month=end)

    elif mode == PaymentMode.MULTI:
        months = tuple(math.trunc(value) for value in coerce_number_list(body.get("monthList")))
        if not months:
            raise MissingRequiredField(
                "monthList", "monthList must include at least one month for multi mode"
            )
        percentages = None
        if body.get("monthPercentages"):
            percentages = tuple(coerce_number_list(body.get("monthPercentages")))
            if len(percentages) != len(months):
                raise InvalidPercentages(
                    "monthPercentages", "monthPercentages length must match monthList length"
                )
            total = sum(percentages)
            if not math.isfinite(total) or abs(total - 100) > PERCENTAGE_TOLERANCE:
                raise InvalidPercentages("monthPercentages", "monthPercentages must add up to 100%")
        schedule = MultiSchedule(months=months, percentages=percentages)

    else:
        month = _require_int(
            body, "paymentMonth", "paymentMonth is required for single payment mode"
        )
        schedule = SingleSchedule(month=month)

    return ScheduledLineItem(
        id=_text(body, "id"),
        label=title,
        amount_usd=amount,
        schedule=schedule,
        cost_group=category,
    )


def normalize_hard_cost_payload(body: Mapping[str, Any]) -> ScheduledLineItem:
    """Validate a hard cost payload, deriving the amount of measured costs.

    With a measurement unit other than "none", `pricePerUnit` and
    `unitsCount` are required and replace `amountUsd`:

        amount = price per unit x units count
    """
    try:
        unit = MeasurementUnit(_text(body, "measurementUnit").lower() or MeasurementUnit.NONE.value)
    except ValueError:
        logger.debug("Rejected hard cost payload with unit %r", body.get("measurementUnit"))
        raise InvalidMeasurementUnit("measurementUnit", "measurementUnit is invalid") from None

    if unit == MeasurementUnit.NONE:
        return normalize_scheduled_cost_payload(body, "hardCategory")

    price = coerce_number(body.get("pricePerUnit"))
    if price is None:
        raise MissingRequiredField("pricePerUnit", "pricePerUnit is required for measured hard costs")
    units = coerce_number(body.get("unitsCount"))
    if units is None:
        raise MissingRequiredField("unitsCount", "unitsCount is required for measured hard costs")

    item = normalize_scheduled_cost_payload({**body, "amountUsd": price * units}, "hardCategory")
    return replace(item, measurement_unit=unit, price_per_unit=price, units_count=units)


def normalize_revenue_payload(
    body: Mapping[str, Any],
    kind: RevenueKind = RevenueKind.APARTMENT,
) -> RevenueRow:
    """Validate a revenue row payload (apartment, retail or parking).

    Parking rows may use `spaceCount` / `monthlyRentUsd` in place of
    `unitCount` / `rentBudget`. Vacancy defaults to 5%.
    """
    units = coerce_number(body.get("unitCount", body.get("spaceCount")))
    rent = coerce_number(body.get("rentBudget", body.get("monthlyRentUsd")))
    vacancy = coerce_number(body.get("vacancyPct"))
    start_month = coerce_int(body.get("startMonth"))

    return RevenueRow(
        id=_text(body, "id"),
        label=_text(body, "typeLabel"),
        unit_count=units or 0.0,
        monthly_rent_per_unit=rent or 0.0,
        vacancy_pct=5.0 if vacancy is None else vacancy,
        start_month=start_month or 0,
        leasing_start_month=coerce_int(body.get("leasingStartMonth")),
        stabilized_month=coerce_int(body.get("stabilizedMonth")),
        kind=RevenueKind(kind),
    )


def normalize_contribution_payload(body: Mapping[str, Any]) -> ContributionItem:
    """Validate a GP contribution payload."""
    amount = _require_number(body, "amountUsd")
    month = _require_int(body, "contributionMonth")
    partner = _text(body, "partner")
    if not partner:
        raise MissingRequiredField("partner", "partner is required")
    return ContributionItem(
        id=_text(body, "id"),
        partner=partner.lower(),
        amount_usd=amount,
        contribution_month=month,
    )
