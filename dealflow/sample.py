"""Sample deal used by the example script and the Streamlit app."""

from datetime import date

from .models.line_items import (
    CarryingType,
    ContributionItem,
    IntervalUnit,
    LoanItem,
    LoanMode,
    MultiSchedule,
    PropertyTaxPhase,
    RangeSchedule,
    RecurringLineItem,
    RevenueKind,
    RevenueRow,
    ScheduledLineItem,
    SingleSchedule,
    TurnoverAssumption,
)
from .models.project import ProjectInputs


def get_sample_project() -> ProjectInputs:
    """A 48-unit mixed-use deal closing in January 2026.

    Leasing starts 18 months after closing and stabilizes a year later.
    """
    return ProjectInputs(
        name="Maple Street Apartments",
        closing_date=date(2026, 1, 15),
        start_leasing_date=date(2027, 7, 1),
        stabilized_date=date(2028, 7, 1),
        target_units=48,

        apartment_revenue=[
            RevenueRow("apt-1br", "1BR", unit_count=30, monthly_rent_per_unit=1_850),
            RevenueRow("apt-2br", "2BR", unit_count=18, monthly_rent_per_unit=2_400, vacancy_pct=6),
        ],
        retail_revenue=[
            RevenueRow("retail-1", "Corner Cafe", unit_count=1, monthly_rent_per_unit=6_500,
                       vacancy_pct=0, kind=RevenueKind.RETAIL),
        ],
        parking_revenue=[
            RevenueRow("parking-1", "Garage", unit_count=40, monthly_rent_per_unit=120,
                       vacancy_pct=10, kind=RevenueKind.PARKING),
        ],
        gp_contributions=[
            ContributionItem("gp-1", "darmon", 1_500_000, contribution_month=0),
            ContributionItem("gp-2", "sherman", 1_500_000, contribution_month=0),
        ],

        soft_costs=[
            ScheduledLineItem("soft-1", "Architecture", 420_000, RangeSchedule(0, 11)),
            ScheduledLineItem("soft-2", "Permits", 95_000, SingleSchedule(2)),
            ScheduledLineItem("soft-3", "Legal", 60_000, MultiSchedule((0, 6, 17), (50, 25, 25))),
        ],
        hard_costs=[
            ScheduledLineItem("hard-1", "Construction", 9_600_000, RangeSchedule(3, 17)),
            ScheduledLineItem("hard-2", "Contingency", 480_000, MultiSchedule((10, 14, 17))),
        ],
        leaseup_costs=[
            ScheduledLineItem("leaseup-1", "Marketing", 75_000, RangeSchedule(16, 21)),
        ],

        loans=[
            LoanItem("loan-1", "Construction Loan", principal=7_000_000, annual_rate_pct=7.5,
                     term_months=24, funding_month=3, repayment_start_month=4,
                     mode=LoanMode.INTEREST_ONLY),
            LoanItem("loan-2", "Permanent Loan", principal=7_500_000, annual_rate_pct=6.0,
                     term_months=360, funding_month=27, repayment_start_month=28,
                     mode=LoanMode.AMORTIZING),
        ],
        recurring_costs=[
            RecurringLineItem("tax-1", "Construction RE Tax", 18_000,
                              interval_unit=IntervalUnit.QUARTERLY, start_month=0, end_month=17,
                              carrying_type=CarryingType.PROPERTY_TAX,
                              property_tax_phase=PropertyTaxPhase.CONSTRUCTION),
            RecurringLineItem("tax-2", "Stabilized RE Tax", 145_000,
                              interval_unit=IntervalUnit.YEARLY, start_month=18,
                              carrying_type=CarryingType.PROPERTY_TAX,
                              property_tax_phase=PropertyTaxPhase.STABILIZED),
            RecurringLineItem("mgmt-1", "Management Fee", 4_500, start_month=18),
        ],
        apartment_turnover=TurnoverAssumption(turnover_pct=40, turnover_cost_usd=2_500),
        retail_turnover=TurnoverAssumption(turnover_pct=10, turnover_cost_usd=15_000),
    )
