"""Data models for the development deal cashflow engine."""

from .line_items import (
    DEFAULT_HORIZON,
    PaymentMode,
    IntervalUnit,
    LoanMode,
    CarryingType,
    PropertyTaxPhase,
    MeasurementUnit,
    RevenueKind,
    SingleSchedule,
    RangeSchedule,
    MultiSchedule,
    PaymentSchedule,
    ScheduledLineItem,
    RecurringLineItem,
    LoanItem,
    RevenueRow,
    ContributionItem,
    TurnoverAssumption,
)
from .project import ProjectInputs, revenue_label
from .cashflow_config import ViewMode, CashflowConfig

__all__ = [
    "DEFAULT_HORIZON",
    "PaymentMode",
    "IntervalUnit",
    "LoanMode",
    "CarryingType",
    "PropertyTaxPhase",
    "MeasurementUnit",
    "RevenueKind",
    "SingleSchedule",
    "RangeSchedule",
    "MultiSchedule",
    "PaymentSchedule",
    "ScheduledLineItem",
    "RecurringLineItem",
    "LoanItem",
    "RevenueRow",
    "ContributionItem",
    "TurnoverAssumption",
    "ProjectInputs",
    "revenue_label",
    "ViewMode",
    "CashflowConfig",
]
