"""Tests for net revenue and lease-up ramps."""

import pytest

from dealflow.calculations.revenue import (
    build_ramped_revenue_values,
    build_revenue_row_values,
    calculate_net_revenue,
)
from dealflow.models.line_items import RevenueRow


class TestNetRevenue:
    """units x rent x (1 - vacancy)."""

    def test_applies_vacancy(self):
        row = RevenueRow("r1", "1BR", unit_count=10, monthly_rent_per_unit=2_000, vacancy_pct=10)
        assert calculate_net_revenue(row) == pytest.approx(18_000)

    def test_missing_vacancy_defaults_to_five_percent(self):
        row = RevenueRow("r1", "1BR", unit_count=10, monthly_rent_per_unit=1_000, vacancy_pct=None)
        assert calculate_net_revenue(row) == pytest.approx(9_500)

    def test_missing_units_or_rent(self):
        assert calculate_net_revenue(RevenueRow("r1", "", unit_count=None,
                                                monthly_rent_per_unit=1_000)) == 0
        assert calculate_net_revenue(RevenueRow("r1", "", unit_count=5,
                                                monthly_rent_per_unit=None)) == 0


class TestRamp:
    """Linear ramp from leasing start to stabilization."""

    def test_linear_ramp(self):
        values = build_ramped_revenue_values(1_000, 0, 3, 6, 8)

        assert values[:4] == [0.0, 0.0, 0.0, 0.0]
        assert values[4] == pytest.approx(1_000 / 3)
        assert values[5] == pytest.approx(2_000 / 3)
        assert values[6:] == [1_000, 1_000]

    def test_ramp_starts_at_row_start_when_later(self):
        values = build_ramped_revenue_values(900, 5, 3, 8, 12)

        assert values[5] == 0
        assert values[6] == pytest.approx(300)
        assert values[8] == 900
        assert sum(values[:5]) == 0

    def test_without_milestones_row_is_flat_from_start(self):
        assert build_ramped_revenue_values(500, 2, None, None, 5) == [0.0, 0.0, 500, 500, 500]

    def test_stabilized_not_after_leasing_is_flat(self):
        assert build_ramped_revenue_values(500, 0, 4, 4, 3) == [500, 500, 500]

    def test_ramp_past_horizon_collapses_onto_last_period(self):
        values = build_ramped_revenue_values(1_000, 0, 20, 40, 12)
        assert values == [0.0] * 11 + [1_000]

    def test_zero_net(self):
        assert build_ramped_revenue_values(0, 0, 1, 4, 6) == [0.0] * 6

    def test_ramp_is_monotonic_and_bounded(self):
        values = build_ramped_revenue_values(1_234, 0, 6, 18, 60)

        assert values == sorted(values)
        assert max(values) == 1_234
        assert min(values) == 0

    def test_row_values_use_row_milestones(self):
        row = RevenueRow("r1", "1BR", unit_count=1, monthly_rent_per_unit=1_000, vacancy_pct=0,
                         leasing_start_month=1, stabilized_month=3)
        values = build_revenue_row_values(row, 5)

        assert values == pytest.approx([0.0, 0.0, 500, 1_000, 1_000])
