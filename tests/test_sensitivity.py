"""
Tests for MULTI and FLIP sensitivity analysis.
"""

import pytest

from dealcalc.calculations.errors import InvalidInputError
from dealcalc.calculations.sensitivity import (
    run_flip_sensitivity,
    run_sensitivity,
    with_expense_change,
    with_interest_rate_delta,
)


class TestMultiSensitivity:
    """Test one-at-a-time MULTI sweeps."""

    def test_base_point(self, sample_multi):
        report = run_sensitivity(sample_multi)
        assert report.base.cashflow == pytest.approx(25504.20663785361)
        assert report.base.change == 0

    def test_rate_sweep(self, sample_multi):
        """Higher rates lower cashflow and coverage."""
        report = run_sensitivity(sample_multi, interest_rate_deltas=[-1, 1])
        down, up = report.interest_rate
        assert down.cashflow == pytest.approx(30101.215935880624)
        assert up.cashflow == pytest.approx(20667.586479673322)
        assert up.dscr == pytest.approx(1.3960186770502916)
        assert down.cashflow > report.base.cashflow > up.cashflow

    def test_rate_monotonic(self, sample_multi):
        deltas = [-2, -1, -0.5, 0.5, 1, 2]
        report = run_sensitivity(sample_multi, interest_rate_deltas=deltas)
        cashflows = [p.cashflow for p in report.interest_rate]
        assert cashflows == sorted(cashflows, reverse=True)

    def test_rate_floor(self, sample_multi):
        """Rates never go below zero."""
        shifted = with_interest_rate_delta(sample_multi, -10)
        assert shifted.financing_sources[0].interest_rate == 0

    def test_perturbations_start_from_base(self, sample_multi):
        """Each point changes one parameter only."""
        report = run_sensitivity(sample_multi, vacancy_rates=[3], rent_changes=[0])
        assert report.vacancy_rate[0].cashflow == pytest.approx(report.base.cashflow)
        assert report.rent[0].cashflow == pytest.approx(report.base.cashflow)
        assert sample_multi.expenses.vacancy_rate == 3
        assert sample_multi.financing_sources[0].interest_rate == 5

    def test_cap_rate_ignores_financing(self, sample_multi):
        report = run_sensitivity(sample_multi)
        for point in report.interest_rate:
            assert point.cap_rate == pytest.approx(report.base.cap_rate)

    def test_expense_change_keeps_provisions(self, sample_multi):
        changed = with_expense_change(sample_multi, 10)
        assert changed.expenses.municipal_tax == pytest.approx(8250)
        assert changed.expenses.vacancy_rate == 3

    def test_price_sweep(self, sample_multi):
        """Price and borrowed amounts scale together."""
        report = run_sensitivity(sample_multi, price_changes=[10])
        (point,) = report.purchase_price
        assert point.cap_rate == pytest.approx(report.base.cap_rate / 1.1)
        assert point.cashflow < report.base.cashflow

    def test_combined_stress(self, sample_multi):
        report = run_sensitivity(sample_multi)
        stress = report.combined_stress
        assert stress.name == "Combined stress"
        assert stress.cashflow == pytest.approx(8410.586479673322)
        assert stress.cap_rate == pytest.approx(6.733222222222222)
        assert stress.dscr == pytest.approx(1.1611581175273227)

    def test_without_combined_stress(self, sample_multi):
        report = run_sensitivity(sample_multi, include_combined_stress=False)
        assert report.combined_stress is None

    def test_point_names(self, sample_multi):
        report = run_sensitivity(sample_multi, interest_rate_deltas=[0.5], rent_changes=[-5])
        assert report.interest_rate[0].name == "Interest rate +0.5 pts"
        assert report.rent[0].name == "Rents -5%"


class TestFlipSensitivity:
    """Test FLIP variable sweeps."""

    def test_default_steps(self, sample_flip):
        report = run_flip_sensitivity(sample_flip)
        changes = [p.change_percent for p in report.points["expected_sale_price"]]
        assert changes == [-10, -5, 5, 10]
        assert set(report.points) == {"expected_sale_price", "purchase_price", "renovation_costs"}

    def test_base(self, sample_flip):
        report = run_flip_sensitivity(sample_flip)
        assert report.base.net_profit == pytest.approx(-16332.223663284352)

    def test_sale_price_effect(self, sample_flip):
        """10% more on the sale price adds 45 000$ of profit."""
        report = run_flip_sensitivity(sample_flip, variables=["expected_sale_price"], steps=1)
        low, high = report.points["expected_sale_price"]
        assert high.value == pytest.approx(495000)
        assert high.net_profit == pytest.approx(-16332.223663284352 + 45000)
        assert low.net_profit == pytest.approx(-16332.223663284352 - 45000)

    def test_renovation_effect(self, sample_flip):
        report = run_flip_sensitivity(sample_flip, variables=["renovation_costs"], steps=1)
        low, high = report.points["renovation_costs"]
        assert low.value == pytest.approx(117000)
        assert low.net_profit > report.base.net_profit > high.net_profit

    def test_input_not_modified(self, sample_flip):
        run_flip_sensitivity(sample_flip)
        assert sample_flip.revenues.expected_sale_price == 450000

    def test_unknown_variable(self, sample_flip):
        with pytest.raises(InvalidInputError):
            run_flip_sensitivity(sample_flip, variables=["holding_costs"])

    def test_invalid_steps(self, sample_flip):
        with pytest.raises(InvalidInputError):
            run_flip_sensitivity(sample_flip, steps=0)
