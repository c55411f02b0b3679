"""Formula Registry for transparent calculation auditing.

This module provides a central registry of the cashflow formulas,
so that every traced value can be explained by its formula.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Set
from enum import Enum


class FormulaCategory(str, Enum):
    """Categories for organizing formulas."""
    SCHEDULING = "Scheduling"
    FINANCING = "Financing"
    REVENUE = "Revenue"
    CARRYING = "Carrying"
    AGGREGATION = "Aggregation"


@dataclass
class FormulaDefinition:
    """Definition of a single calculation formula.

    Attributes:
        field_path: Dot-notation path to the field (e.g., "loan.level_payment")
        name: Human-readable name (e.g., "Level Loan Payment")
        formula: Symbolic formula
        inputs: List of input field paths that feed into this formula
        category: Category for grouping formulas
        unit: Display unit (e.g., "$", "%")
        notes: Optional explanation or caveats
    """
    field_path: str
    name: str
    formula: str
    inputs: List[str]
    category: FormulaCategory
    unit: str = "$"
    notes: str = ""


class FormulaRegistry:
    """Central registry of all calculation formulas.

    Populated lazily on first lookup; the definitions never change at runtime.
    """
    _formulas: Dict[str, FormulaDefinition] = {}
    _initialized: bool = False

    @classmethod
    def register(cls, definition: FormulaDefinition) -> None:
        """Register a formula definition."""
        cls._formulas[definition.field_path] = definition

    @classmethod
    def get(cls, field_path: str) -> Optional[FormulaDefinition]:
        """Get formula definition by field path."""
        cls._ensure_initialized()
        return cls._formulas.get(field_path)

    @classmethod
    def get_all(cls) -> Dict[str, FormulaDefinition]:
        """Get all registered formulas."""
        cls._ensure_initialized()
        return cls._formulas.copy()

    @classmethod
    def get_by_category(cls, category: FormulaCategory) -> List[FormulaDefinition]:
        """Get all formulas in a category."""
        cls._ensure_initialized()
        return [f for f in cls._formulas.values() if f.category == category]

    @classmethod
    def get_inputs(cls, field_path: str) -> List[str]:
        """Get the input field paths for a formula."""
        formula = cls.get(field_path)
        return formula.inputs if formula else []

    @classmethod
    def get_dependents(cls, field_path: str) -> List[str]:
        """Get all formulas that use this field as an input."""
        cls._ensure_initialized()
        return [path for path, formula in cls._formulas.items() if field_path in formula.inputs]

    @classmethod
    def get_all_ancestors(cls, field_path: str) -> Set[str]:
        """Get all upstream dependencies recursively."""
        cls._ensure_initialized()
        ancestors = set()
        to_process = list(cls.get_inputs(field_path))

        while to_process:
            current = to_process.pop()
            if current not in ancestors:
                ancestors.add(current)
                to_process.extend(cls.get_inputs(current))

        return ancestors

    @classmethod
    def _ensure_initialized(cls) -> None:
        """Ensure the registry is populated with formulas."""
        if not cls._initialized:
            _populate_registry()
            cls._initialized = True

    @classmethod
    def reset(cls) -> None:
        """Reset the registry (mainly for testing)."""
        cls._formulas = {}
        cls._initialized = False


def _populate_registry() -> None:
    """Populate the registry with all calculation formulas."""

    scheduling = [
        FormulaDefinition(
            field_path="costs.soft_total",
            name="Soft Costs",
            formula="sum(scheduled soft cost allocations)",
            inputs=[],
            category=FormulaCategory.SCHEDULING,
        ),
        FormulaDefinition(
            field_path="costs.hard_total",
            name="Hard Costs",
            formula="sum(scheduled hard cost allocations)",
            inputs=[],
            category=FormulaCategory.SCHEDULING,
        ),
        FormulaDefinition(
            field_path="costs.leaseup_total",
            name="Lease-Up Costs",
            formula="sum(scheduled lease-up cost allocations)",
            inputs=[],
            category=FormulaCategory.SCHEDULING,
        ),
    ]

    financing = [
        FormulaDefinition(
            field_path="loan.monthly_rate",
            name="Monthly Rate",
            formula="annual_rate_pct / 100 / 12",
            inputs=[],
            category=FormulaCategory.FINANCING,
            unit="%",
        ),
        FormulaDefinition(
            field_path="loan.level_payment",
            name="Level Loan Payment",
            formula="principal x r x (1 + r)^n / ((1 + r)^n - 1)",
            inputs=["loan.principal", "loan.monthly_rate"],
            category=FormulaCategory.FINANCING,
            notes="principal / n when the rate is zero",
        ),
    ]

    revenue = [
        FormulaDefinition(
            field_path="revenue.net_monthly",
            name="Net Monthly Revenue",
            formula="unit_count x rent x (1 - vacancy_pct / 100)",
            inputs=[],
            category=FormulaCategory.REVENUE,
        ),
        FormulaDefinition(
            field_path="revenue.total",
            name="Revenues",
            formula="sum(ramped revenue + GP contributions)",
            inputs=["revenue.net_monthly"],
            category=FormulaCategory.REVENUE,
        ),
    ]

    carrying = [
        FormulaDefinition(
            field_path="carrying.turnover_monthly",
            name="Turnover Cost (monthly)",
            formula="turnover_pct / 100 x units x cost_per_turn / 12",
            inputs=[],
            category=FormulaCategory.CARRYING,
        ),
        FormulaDefinition(
            field_path="carrying.total",
            name="Carrying Costs",
            formula="loan funding - interest - principal - recurring charges",
            inputs=["loan.level_payment", "carrying.turnover_monthly"],
            category=FormulaCategory.CARRYING,
        ),
    ]

    aggregation = [
        FormulaDefinition(
            field_path="cashflow.total",
            name="Total",
            formula="revenues + soft + hard + lease-up + carrying",
            inputs=[
                "revenue.total",
                "costs.soft_total",
                "costs.hard_total",
                "costs.leaseup_total",
                "carrying.total",
            ],
            category=FormulaCategory.AGGREGATION,
        ),
        FormulaDefinition(
            field_path="cashflow.ending_balance",
            name="Ending Balance",
            formula="cumulative sum(total)",
            inputs=["cashflow.total"],
            category=FormulaCategory.AGGREGATION,
        ),
    ]

    for formula in scheduling + financing + revenue + carrying + aggregation:
        FormulaRegistry.register(formula)
