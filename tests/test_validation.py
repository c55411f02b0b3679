"""Tests for payload validation and normalization."""

import pytest

from dealflow.models.line_items import (
    CarryingType,
    IntervalUnit,
    LoanItem,
    LoanMode,
    MeasurementUnit,
    MultiSchedule,
    PropertyTaxPhase,
    RangeSchedule,
    RecurringLineItem,
    RevenueKind,
    SingleSchedule,
)
from dealflow.validation import (
    EndBeforeStart,
    InvalidCarryingType,
    InvalidCategory,
    InvalidIntervalUnit,
    InvalidLoanMode,
    InvalidMeasurementUnit,
    InvalidPercentages,
    MissingRequiredField,
    RepaymentBeforeFunding,
    ValidationError,
    coerce_int,
    coerce_number,
    coerce_number_list,
    decode_property_tax_phase,
    encode_property_tax_group,
    normalize_carrying_payload,
    normalize_contribution_payload,
    normalize_hard_cost_payload,
    normalize_revenue_payload,
    normalize_scheduled_cost_payload,
)


def _loan_body(**overrides):
    body = {
        "carryingType": "loan",
        "costName": "Construction Loan",
        "loanMode": "amortizing",
        "loanAmountUsd": "1000000",
        "interestRatePct": "6.5",
        "loanTermMonths": "360",
        "fundingMonth": "2",
        "repaymentStartMonth": "3",
    }
    body.update(overrides)
    return body


class TestCoercion:
    """String -> number conversion."""

    @pytest.mark.parametrize("value,expected", [
        ("12.5", 12.5),
        (7, 7.0),
        ("", None),
        ("  ", None),
        (None, None),
        ("abc", None),
        ("NaN", None),
        ("inf", None),
        ("Infinity", None),
        (float("-inf"), None),
        (True, None),
    ])
    def test_coerce_number(self, value, expected):
        assert coerce_number(value) == expected

    def test_coerce_int_truncates(self):
        assert coerce_int("7.9") == 7
        assert coerce_int("-2.5") == -2
        assert coerce_int("inf") is None

    def test_coerce_number_list(self):
        assert coerce_number_list("1, 2, x, 4") == [1.0, 2.0, 4.0]
        assert coerce_number_list([3, "5", None]) == [3.0, 5.0]
        assert coerce_number_list(None) == []


class TestLoanPayload:
    """Loan validation."""

    def test_valid_loan(self):
        item = normalize_carrying_payload(_loan_body())

        assert isinstance(item, LoanItem)
        assert item.label == "Construction Loan"
        assert item.principal == 1_000_000
        assert item.annual_rate_pct == 6.5
        assert item.term_months == 360
        assert (item.funding_month, item.repayment_start_month) == (2, 3)
        assert item.mode == LoanMode.AMORTIZING

    def test_repayment_before_funding(self):
        with pytest.raises(RepaymentBeforeFunding) as exc_info:
            normalize_carrying_payload(_loan_body(fundingMonth="5", repaymentStartMonth="4"))
        assert exc_info.value.field == "repaymentStartMonth"

    def test_repayment_in_funding_month_is_allowed(self):
        item = normalize_carrying_payload(_loan_body(fundingMonth="4", repaymentStartMonth="4"))
        assert item.repayment_start_month == 4

    @pytest.mark.parametrize("mode", ["", "balloon", None])
    def test_invalid_loan_mode(self, mode):
        with pytest.raises(InvalidLoanMode):
            normalize_carrying_payload(_loan_body(loanMode=mode))

    @pytest.mark.parametrize("term", ["0", "-3", "", "abc"])
    def test_term_must_be_positive(self, term):
        with pytest.raises(MissingRequiredField) as exc_info:
            normalize_carrying_payload(_loan_body(loanTermMonths=term))
        assert exc_info.value.field == "loanTermMonths"

    @pytest.mark.parametrize("field", [
        "loanAmountUsd", "interestRatePct", "fundingMonth", "repaymentStartMonth",
    ])
    def test_missing_numbers(self, field):
        with pytest.raises(MissingRequiredField) as exc_info:
            normalize_carrying_payload(_loan_body(**{field: ""}))
        assert exc_info.value.field == field

    @pytest.mark.parametrize("amount", ["Infinity", "-inf", float("inf")])
    def test_non_finite_amount_is_missing(self, amount):
        with pytest.raises(MissingRequiredField) as exc_info:
            normalize_carrying_payload(_loan_body(loanAmountUsd=amount))
        assert exc_info.value.field == "loanAmountUsd"

    def test_default_title(self):
        item = normalize_carrying_payload(_loan_body(costName=""))
        assert item.label == "Loan"


class TestRecurringPayload:
    """Property tax and management rows."""

    def test_property_tax(self):
        item = normalize_carrying_payload({
            "amountUsd": "18000",
            "startMonth": "0",
            "endMonth": "17",
            "intervalUnit": "Quarterly",
            "propertyTaxPhase": "construction",
        }, carrying_type="property_tax")

        assert isinstance(item, RecurringLineItem)
        assert item.label == "Construction RE Tax"
        assert item.interval_unit == IntervalUnit.QUARTERLY
        assert item.end_month == 17
        assert item.carrying_type == CarryingType.PROPERTY_TAX
        assert item.property_tax_phase == PropertyTaxPhase.CONSTRUCTION

    def test_property_tax_requires_phase(self):
        with pytest.raises(MissingRequiredField) as exc_info:
            normalize_carrying_payload({"amountUsd": "1", "startMonth": "0"}, "property_tax")
        assert exc_info.value.field == "propertyTaxPhase"

    def test_management_defaults(self):
        item = normalize_carrying_payload({
            "type": "management", "amountUsd": 4500, "startMonth": 18,
        })

        assert item.label == "Management Fee"
        assert item.interval_unit == IntervalUnit.MONTHLY
        assert item.end_month is None

    def test_end_before_start(self):
        with pytest.raises(EndBeforeStart):
            normalize_carrying_payload(
                {"amountUsd": "1", "startMonth": "5", "endMonth": "4"}, "management"
            )

    def test_invalid_interval(self):
        with pytest.raises(InvalidIntervalUnit):
            normalize_carrying_payload(
                {"amountUsd": "1", "startMonth": "0", "intervalUnit": "weekly"}, "management"
            )

    def test_invalid_carrying_type(self):
        with pytest.raises(InvalidCarryingType) as exc_info:
            normalize_carrying_payload({"carryingType": "insurance"})
        assert exc_info.value.to_dict() == {
            "field": "carryingType", "error": "carryingType is invalid",
        }

    def test_errors_are_value_errors(self):
        assert issubclass(ValidationError, ValueError)
        assert issubclass(EndBeforeStart, ValidationError)


class TestPropertyTaxGroups:
    """Cost-group codes for property tax phases."""

    def test_encode(self):
        assert encode_property_tax_group("stabilized") == "property_tax_stabilized"
        assert encode_property_tax_group("bogus") == "property_tax"

    def test_decode(self):
        assert decode_property_tax_phase("property_tax_construction") == PropertyTaxPhase.CONSTRUCTION
        assert decode_property_tax_phase("property_tax") is None
        assert decode_property_tax_phase("management") is None
        assert decode_property_tax_phase(None) is None


def _cost_body(**overrides):
    body = {"costName": "Permits", "amountUsd": "95000", "softCategory": "permits"}
    body.update(overrides)
    return body


class TestScheduledCostPayload:
    """Soft, hard and lease-up cost payloads."""

    def test_single(self):
        item = normalize_scheduled_cost_payload(_cost_body(paymentMode="single", paymentMonth="2"))
        assert item.schedule == SingleSchedule(month=2)
        assert item.amount_usd == 95_000
        assert item.cost_group == "permits"

    def test_unknown_mode_falls_back_to_single(self):
        item = normalize_scheduled_cost_payload(_cost_body(paymentMode="weird", paymentMonth=1))
        assert isinstance(item.schedule, SingleSchedule)

    def test_single_requires_month(self):
        with pytest.raises(MissingRequiredField):
            normalize_scheduled_cost_payload(_cost_body())

    def test_range(self):
        item = normalize_scheduled_cost_payload(_cost_body(
            paymentMode="range", rangeStartMonth="0", rangeEndMonth="11",
        ))
        assert item.schedule == RangeSchedule(start_month=0, end_month=11)

    def test_range_requires_both_bounds(self):
        with pytest.raises(MissingRequiredField) as exc_info:
            normalize_scheduled_cost_payload(_cost_body(paymentMode="range", rangeStartMonth=0))
        assert exc_info.value.field == "rangeEndMonth"

    def test_range_end_before_start(self):
        with pytest.raises(EndBeforeStart):
            normalize_scheduled_cost_payload(_cost_body(
                paymentMode="range", rangeStartMonth=5, rangeEndMonth=2,
            ))

    def test_multi_with_percentages(self):
        item = normalize_scheduled_cost_payload(_cost_body(
            paymentMode="multi", monthList="0, 6, 17", monthPercentages="50, 25, 24.9",
        ))
        assert item.schedule == MultiSchedule(months=(0, 6, 17), percentages=(50.0, 25.0, 24.9))

    def test_multi_percentages_must_total_one_hundred(self):
        with pytest.raises(InvalidPercentages):
            normalize_scheduled_cost_payload(_cost_body(
                paymentMode="multi", monthList=[0, 1], monthPercentages=[50, 40],
            ))

    @pytest.mark.parametrize("percentages", ["inf,-inf", [float("inf"), float("-inf")],
                                             [float("nan"), 100]])
    def test_multi_rejects_non_finite_percentages(self, percentages):
        with pytest.raises(InvalidPercentages):
            normalize_scheduled_cost_payload(_cost_body(
                paymentMode="multi", monthList="1,2", monthPercentages=percentages,
            ))

    def test_multi_percentage_count_must_match(self):
        with pytest.raises(InvalidPercentages):
            normalize_scheduled_cost_payload(_cost_body(
                paymentMode="multi", monthList=[0, 1], monthPercentages=[100],
            ))

    def test_multi_requires_months(self):
        with pytest.raises(MissingRequiredField):
            normalize_scheduled_cost_payload(_cost_body(paymentMode="multi", monthList="x"))

    def test_requires_name(self):
        with pytest.raises(MissingRequiredField) as exc_info:
            normalize_scheduled_cost_payload({"amountUsd": 1, "paymentMonth": 0})
        assert exc_info.value.field == "costName"

    def test_numeric_zero_id_is_kept(self):
        item = normalize_scheduled_cost_payload(_cost_body(id=0, paymentMonth=0))
        assert item.id == "0"


class TestCostCategories:
    """Each cost kind accepts only its own categories."""

    def test_category_is_case_insensitive(self):
        item = normalize_scheduled_cost_payload(_cost_body(softCategory="Legal", paymentMonth=0))
        assert item.cost_group == "legal"

    @pytest.mark.parametrize("category", ["", "framing", "bribes"])
    def test_invalid_soft_category(self, category):
        with pytest.raises(InvalidCategory) as exc_info:
            normalize_scheduled_cost_payload(_cost_body(softCategory=category, paymentMonth=0))
        assert exc_info.value.field == "softCategory"
        assert exc_info.value.message == "softCategory is invalid"

    def test_leaseup_category(self):
        body = {"costName": "Staging", "amountUsd": 5000, "leaseupCategory": "staging",
                "paymentMonth": 20}
        item = normalize_scheduled_cost_payload(body, "leaseupCategory")
        assert item.cost_group == "staging"

        with pytest.raises(InvalidCategory):
            normalize_scheduled_cost_payload({**body, "leaseupCategory": "permits"}, "leaseupCategory")

    def test_category_checked_against_requested_field(self):
        with pytest.raises(InvalidCategory) as exc_info:
            normalize_scheduled_cost_payload(_cost_body(paymentMonth=0), "hardCategory")
        assert exc_info.value.field == "hardCategory"


def _hard_body(**overrides):
    body = {"costName": "Drywall", "hardCategory": "drywall", "paymentMode": "single",
            "paymentMonth": "8"}
    body.update(overrides)
    return body


class TestHardCostPayload:
    """Hard costs, optionally priced per measured unit."""

    def test_unmeasured_uses_amount(self):
        item = normalize_hard_cost_payload(_hard_body(amountUsd="120000"))

        assert item.amount_usd == 120_000
        assert item.measurement_unit == MeasurementUnit.NONE
        assert item.price_per_unit is None
        assert item.cost_group == "drywall"

    def test_measured_amount_is_price_times_units(self):
        item = normalize_hard_cost_payload(_hard_body(
            measurementUnit="SQFT", pricePerUnit="12.5", unitsCount="8000", amountUsd="1",
        ))

        assert item.amount_usd == 100_000
        assert item.measurement_unit == MeasurementUnit.SQFT
        assert item.price_per_unit == 12.5
        assert item.units_count == 8_000
        assert item.schedule == SingleSchedule(month=8)

    def test_measured_cost_needs_no_amount(self):
        item = normalize_hard_cost_payload(_hard_body(
            measurementUnit="apartment", pricePerUnit=4000, unitsCount=30,
        ))
        assert item.amount_usd == 120_000

    def test_invalid_unit(self):
        with pytest.raises(InvalidMeasurementUnit) as exc_info:
            normalize_hard_cost_payload(_hard_body(measurementUnit="acre", amountUsd=1))
        assert exc_info.value.field == "measurementUnit"

    @pytest.mark.parametrize("overrides,field", [
        ({"unitsCount": 10}, "pricePerUnit"),
        ({"pricePerUnit": 10}, "unitsCount"),
        ({"pricePerUnit": "inf", "unitsCount": 10}, "pricePerUnit"),
    ])
    def test_measured_cost_requires_price_and_units(self, overrides, field):
        with pytest.raises(MissingRequiredField) as exc_info:
            normalize_hard_cost_payload(_hard_body(measurementUnit="linear_feet", **overrides))
        assert exc_info.value.field == field

    def test_invalid_hard_category(self):
        with pytest.raises(InvalidCategory):
            normalize_hard_cost_payload(_hard_body(hardCategory="permits", amountUsd=1))


class TestRevenueAndContributionPayloads:
    """Revenue rows and GP contributions."""

    def test_apartment_row(self):
        row = normalize_revenue_payload({
            "typeLabel": "1BR", "unitCount": "30", "rentBudget": "1850", "startMonth": "18",
        })
        assert row.unit_count == 30
        assert row.monthly_rent_per_unit == 1_850
        assert row.vacancy_pct == 5.0
        assert row.start_month == 18
        assert row.kind == RevenueKind.APARTMENT

    def test_parking_row(self):
        row = normalize_revenue_payload(
            {"typeLabel": "Garage", "spaceCount": 40, "monthlyRentUsd": 120, "vacancyPct": "10"},
            RevenueKind.PARKING,
        )
        assert row.unit_count == 40
        assert row.monthly_rent_per_unit == 120
        assert row.vacancy_pct == 10
        assert row.kind == RevenueKind.PARKING

    def test_contribution(self):
        item = normalize_contribution_payload({
            "partner": "Darmon", "amountUsd": "1500000", "contributionMonth": "0",
        })
        assert item.partner == "darmon"
        assert item.amount_usd == 1_500_000

    def test_contribution_keeps_numeric_zero_id(self):
        item = normalize_contribution_payload({
            "id": 0, "partner": "Darmon", "amountUsd": 1, "contributionMonth": 0,
        })
        assert item.id == "0"

    def test_contribution_requires_partner(self):
        with pytest.raises(MissingRequiredField):
            normalize_contribution_payload({"amountUsd": 1, "contributionMonth": 0})
