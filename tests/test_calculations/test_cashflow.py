"""End-to-end tests for the cashflow projection engine."""

import logging
from datetime import date

import pytest

from dealflow.calculations.cashflow import calculate_cashflow
from dealflow.models.cashflow_config import CashflowConfig, ViewMode
from dealflow.models.project import ProjectInputs


class TestSimpleProject:
    """Hand-checked totals over 24 months (see fixtures)."""

    @pytest.fixture
    def projection(self, simple_project):
        return calculate_cashflow(simple_project, CashflowConfig(horizon=24))

    def test_row_order(self, projection):
        assert [row.id for row in projection.rows] == [
            "revenues", "soft", "hard", "leaseup", "carrying", "total", "balance",
        ]

    def test_category_totals(self, projection):
        assert projection.get_row("revenues").total == pytest.approx(660_000)
        assert projection.get_row("soft").total == pytest.approx(-120_000)
        assert projection.get_row("hard").total == pytest.approx(-300_000)
        assert projection.get_row("leaseup").total == 0
        assert projection.get_row("carrying").total == pytest.approx(-84_000)
        assert projection.get_row("total").total == pytest.approx(156_000)
        assert projection.ending_balance == pytest.approx(156_000)

    def test_lease_up_offsets(self, projection):
        assert projection.leasing_start_offset == 6
        assert projection.stabilized_offset == 9

        revenue = projection.get_row("revenues").line_items[0].period_values
        assert revenue[6] == 0
        assert revenue[7] == pytest.approx(10_000 / 3)
        assert revenue[9] == pytest.approx(10_000)

    def test_first_period(self, projection):
        # GP contribution + loan funding - design - property tax
        total = projection.get_row("total").period_values
        assert total[0] == pytest.approx(500_000 + 1_200_000 - 10_000 - 3_000)

    def test_every_series_spans_the_horizon(self, projection):
        for row in projection.rows:
            assert len(row.period_values) == 24
            for item in row.line_items:
                assert len(item.period_values) == 24

    def test_calendar(self, projection):
        assert projection.calendar[0].calendar_label == "Jan 2026"
        assert projection.calendar[-1].calendar_label == "Dec 2027"

    def test_traces(self, projection):
        ctx = projection.trace_context

        assert ctx.get_trace("cashflow.total").value == pytest.approx(156_000)
        assert ctx.get_trace("costs.hard_total").value == pytest.approx(-300_000)
        assert ctx.get_trace("revenue.net_monthly", item_id="apt-1").value == 10_000


class TestProjectionViews:
    """View selection and regrouping."""

    def test_annual_view(self, simple_project):
        projection = calculate_cashflow(
            simple_project, CashflowConfig(horizon=24, view_mode=ViewMode.ANNUAL)
        )
        view = projection.view

        assert view.view_mode == ViewMode.ANNUAL
        assert [c.label for c in view.columns] == ["2026", "2027"]
        total_by_year = view.column_values(view.get_row("total"))
        assert sum(total_by_year) == pytest.approx(156_000)

    def test_regroup_matches_direct_projection(self, sample_project):
        monthly = calculate_cashflow(sample_project, CashflowConfig(horizon=48))
        tax_year = calculate_cashflow(
            sample_project, CashflowConfig(horizon=48, view_mode=ViewMode.TAX_YEAR)
        )
        regrouped = monthly.regroup(ViewMode.TAX_YEAR)

        assert [c.id for c in regrouped.columns] == [c.id for c in tax_year.view.columns]
        assert regrouped.column_values(regrouped.get_row("total")) == pytest.approx(
            tax_year.view.column_values(tax_year.view.get_row("total"))
        )

    def test_config_closing_date_overrides_project(self, simple_project):
        projection = calculate_cashflow(
            simple_project, CashflowConfig(horizon=12, closing_date=date(2030, 6, 9))
        )
        assert projection.calendar[0].calendar_label == "Jun 2030"

    def test_explicit_period_years(self, simple_project):
        years = [2040] * 6 + [2041] * 6
        projection = calculate_cashflow(
            simple_project,
            CashflowConfig(horizon=12, view_mode=ViewMode.TAX_YEAR, period_years=years),
        )
        assert [c.label for c in projection.view.columns] == ["2040", "2041"]


class TestEngineProperties:
    """Determinism and input handling."""

    def test_idempotent(self, sample_project):
        first = calculate_cashflow(sample_project)
        second = calculate_cashflow(sample_project)

        for a, b in zip(first.rows, second.rows):
            assert a.period_values == b.period_values
            assert [i.period_values for i in a.line_items] == [i.period_values for i in b.line_items]

    def test_inputs_are_not_mutated(self, sample_project):
        before = repr(sample_project)
        calculate_cashflow(sample_project)
        assert repr(sample_project) == before

    def test_default_horizon(self, sample_project):
        projection = calculate_cashflow(sample_project)
        assert projection.horizon == 60
        assert len(projection.get_row("balance").period_values) == 60

    def test_empty_project(self):
        projection = calculate_cashflow(ProjectInputs(closing_date=date(2026, 1, 1)),
                                        CashflowConfig(horizon=6))

        assert projection.get_row("total").period_values == [0.0] * 6
        assert projection.ending_balance == 0
        assert projection.leasing_start_offset is None

    def test_project_without_closing_date_still_projects(self, simple_project):
        simple_project.closing_date = None
        projection = calculate_cashflow(simple_project, CashflowConfig(horizon=12))
        assert len(projection.calendar) == 12

    @pytest.mark.parametrize("horizon", [0, -5])
    def test_invalid_horizon(self, simple_project, horizon):
        with pytest.raises(ValueError):
            calculate_cashflow(simple_project, CashflowConfig(horizon=horizon))

    def test_logs_projection_summary(self, simple_project, caplog):
        caplog.set_level(logging.INFO, logger="dealflow")
        calculate_cashflow(simple_project, CashflowConfig(horizon=24))

        assert "Simple Deal" in caplog.text
        assert "24 periods" in caplog.text

    def test_turnover_reaches_carrying_costs(self, sample_project):
        projection = calculate_cashflow(sample_project)
        ids = [item.id for item in projection.get_row("carrying").line_items]

        assert "turnover-apartments" in ids
        assert "turnover-retail" in ids
