"""
Tests for the MULTI income property engine.
"""

import math

import pytest
from pydantic import ValidationError

from dealcalc.calculations.errors import InvalidInputError
from dealcalc.calculations.multi import (
    FinancingSource,
    MultiExpenses,
    MultiProperty,
    MultiRevenues,
    analyze_financing,
    analyze_multi_property,
    assess_investment,
    calculate_operating_expenses,
    calculate_total_revenue,
    compare_multi_scenarios,
    multi_max_purchase_price,
)


class TestRevenueAndExpenses:
    """Test revenue and operating expense totals."""

    def test_total_revenue(self):
        revenues = MultiRevenues(base_rents=90000, parking=2400, laundry=1200)
        assert calculate_total_revenue(revenues) == 93600

    def test_operating_expenses_with_provisions(self):
        """Vacancy and bad debt are charged on total revenue."""
        expenses = MultiExpenses(municipal_tax=7500, insurance=2500, vacancy_rate=3, bad_debt_rate=1)
        assert calculate_operating_expenses(expenses, 100000) == pytest.approx(14000)

    def test_provisions_scale_with_revenue(self):
        """Vacancy and bad debt follow revenue; fixed items do not."""
        expenses = MultiExpenses(insurance=1000, vacancy_rate=5, bad_debt_rate=2)
        assert calculate_operating_expenses(expenses, 0) == 1000
        assert calculate_operating_expenses(expenses, 200000) == pytest.approx(15000)

    def test_vacancy_rate_bounds(self):
        with pytest.raises(ValidationError):
            MultiExpenses(vacancy_rate=101)
        with pytest.raises(ValidationError):
            MultiExpenses(bad_debt_rate=-1)

    def test_negative_amounts_rejected(self):
        with pytest.raises(ValidationError):
            MultiRevenues(base_rents=-100)


class TestFinancing:
    """Test debt service from financing sources."""

    def test_single_mortgage(self):
        sources = [FinancingSource(amount=675000, interest_rate=5, term=5, amortization=25)]
        result = analyze_financing(sources, 72856, 900000)
        assert result.monthly_debt_service == pytest.approx(3945.9827801788656)
        assert result.annual_debt_service == pytest.approx(47351.79336214639)
        assert result.total_debt == 675000
        assert result.total_equity == 225000
        assert result.loan_to_value_ratio == pytest.approx(75)
        assert result.weighted_average_interest_rate == pytest.approx(5)

    def test_fixed_payment_amount(self):
        """An explicit payment replaces the amortized one."""
        sources = [
            FinancingSource(amount=100000, interest_rate=5, amortization=25, payment_amount=800)
        ]
        result = analyze_financing(sources, 20000, 200000)
        assert result.monthly_debt_service == 800
        assert result.annual_debt_service == 9600

    def test_sources_grouped_by_type(self):
        """Breakdown sums sources of the same type."""
        sources = [
            FinancingSource(type="private_loan", amount=20000, interest_rate=10, amortization=5),
            FinancingSource(type="private_loan", amount=30000, interest_rate=8, amortization=5),
            FinancingSource(type="first_mortgage", amount=150000, interest_rate=5, amortization=25),
        ]
        result = analyze_financing(sources, 30000, 250000)
        assert result.debt_breakdown == {"private_loan": 50000, "first_mortgage": 150000}
        assert result.weighted_average_interest_rate == pytest.approx(
            (20000 * 10 + 30000 * 8 + 150000 * 5) / 200000
        )

    def test_no_debt(self):
        """Without debt the coverage ratio is infinite."""
        result = analyze_financing([], 50000, 500000)
        assert result.annual_debt_service == 0
        assert math.isinf(result.debt_service_coverage_ratio)
        assert result.loan_to_value_ratio == 0

    def test_infinite_dscr_serializes_to_null(self):
        result = analyze_financing([], 50000, 500000)
        assert result.model_dump(mode="json")["debt_service_coverage_ratio"] is None


class TestAnalysis:
    """Test the full property analysis."""

    def test_sample_property(self, sample_multi):
        result = analyze_multi_property(sample_multi)
        assert result.gross_revenue == 93600
        assert result.operating_expenses == pytest.approx(20744)
        assert result.net_operating_income == pytest.approx(72856)
        assert result.annual_debt_service == pytest.approx(47351.79336214639)
        assert result.cashflow == pytest.approx(25504.20663785361)
        assert result.cashflow_per_unit == pytest.approx(354.22509219241124)
        assert result.cap_rate == pytest.approx(8.09511111111111)
        assert result.cash_on_cash_return == pytest.approx(11.33520295015716)
        assert result.financing.debt_service_coverage_ratio == pytest.approx(1.5386112082978043)
        assert result.total_investment == 935000
        assert result.meets_cashflow_target is True
        assert result.global_assessment == "EXCELLENT"

    def test_ratios(self, sample_multi):
        result = analyze_multi_property(sample_multi)
        assert result.gross_rent_multiplier == pytest.approx(900000 / 93600)
        assert result.operating_expense_ratio == pytest.approx(20744 / 93600 * 100)
        assert result.break_even_ratio == pytest.approx(
            (20744 + 47351.79336214639) / 93600 * 100
        )
        assert result.monthly_cashflow == pytest.approx(25504.20663785361 / 12)

    def test_target_per_door(self, sample_multi):
        """The cashflow target is configurable."""
        assert analyze_multi_property(sample_multi, 400).meets_cashflow_target is False
        assert analyze_multi_property(sample_multi, 354).meets_cashflow_target is True

    def test_negative_cashflow(self, sample_multi_data):
        sample_multi_data["revenues"]["base_rents"] = 40000
        result = analyze_multi_property(MultiProperty.model_validate(sample_multi_data))
        assert result.cashflow < 0
        assert result.meets_cashflow_target is False
        assert result.global_assessment == "POOR"

    def test_all_cash_purchase(self, sample_multi_data):
        sample_multi_data["financing_sources"] = []
        result = analyze_multi_property(MultiProperty.model_validate(sample_multi_data))
        assert result.cashflow == pytest.approx(result.net_operating_income)
        assert result.cash_on_cash_return == pytest.approx(result.cap_rate)

    def test_no_revenue(self):
        """Ratios over revenue are zero without revenue."""
        result = analyze_multi_property(MultiProperty(purchase_price=100000, unit_count=2))
        assert result.gross_rent_multiplier == 0
        assert result.operating_expense_ratio == 0
        assert result.break_even_ratio == 0

    @pytest.mark.parametrize("field,value", [("purchase_price", 0), ("unit_count", 0)])
    def test_required_positive(self, sample_multi_data, field, value):
        sample_multi_data[field] = value
        with pytest.raises(ValidationError):
            MultiProperty.model_validate(sample_multi_data)

    @pytest.mark.parametrize(
        "cap,coc,rating",
        [
            (7, 10, "EXCELLENT"),
            (7, 9.99, "GOOD"),
            (6, 8, "GOOD"),
            (4.5, 6, "ACCEPTABLE"),
            (4.49, 20, "POOR"),
        ],
    )
    def test_assessment(self, cap, coc, rating):
        assert assess_investment(cap, coc) == rating


class TestComparison:
    """Test ranking several properties."""

    def test_rank_by_cashflow_per_unit(self, sample_multi_data):
        weak = dict(sample_multi_data, name="Weak", revenues={"base_rents": 70000})
        strong = dict(sample_multi_data, name="Strong", revenues={"base_rents": 110000})
        properties = [
            MultiProperty.model_validate(p) for p in (weak, sample_multi_data, strong)
        ]

        result = compare_multi_scenarios(properties)

        assert [r.index for r in result.ranking] == [2, 1, 0]
        assert [r.rank for r in result.ranking] == [1, 2, 3]
        assert result.best_index == 2
        assert result.ranking[0].name == "Strong"

    def test_ties_keep_input_order(self, sample_multi):
        result = compare_multi_scenarios([sample_multi, sample_multi], "cap_rate")
        assert [r.index for r in result.ranking] == [0, 1]
        assert result.best_index == 0

    def test_unknown_criterion(self, sample_multi):
        with pytest.raises(InvalidInputError):
            compare_multi_scenarios([sample_multi], "irr")

    def test_empty(self):
        with pytest.raises(InvalidInputError):
            compare_multi_scenarios([])


class TestMaxPurchasePrice:
    """Test the highest price meeting a cashflow target."""

    def test_amortized_mortgage(self, sample_multi):
        result = multi_max_purchase_price(
            6,
            sample_multi.revenues,
            sample_multi.expenses,
            interest_rate=5,
            amortization_years=25,
            down_payment_percent=25,
        )
        assert result.method == "amortization"
        assert result.net_operating_income == pytest.approx(72856)
        assert result.max_annual_debt_service == pytest.approx(67456)
        assert result.max_mortgage_amount == pytest.approx(961585.5444326104)
        assert result.max_purchase_price == pytest.approx(1282114.0592434804)
        assert result.down_payment == pytest.approx(320528.51481087005)
        assert result.is_feasible is True

    def test_round_trip(self, sample_multi_data, sample_multi):
        """Buying at the maximum price yields exactly the target per door."""
        result = multi_max_purchase_price(
            6,
            sample_multi.revenues,
            sample_multi.expenses,
            interest_rate=5,
            amortization_years=25,
            down_payment_percent=25,
            target_cashflow_per_door=90,
        )
        sample_multi_data["purchase_price"] = result.max_purchase_price
        sample_multi_data["financing_sources"] = [
            {
                "amount": result.max_mortgage_amount,
                "interest_rate": 5,
                "amortization": 25,
            }
        ]

        analysis = analyze_multi_property(MultiProperty.model_validate(sample_multi_data))

        assert analysis.cashflow_per_unit == pytest.approx(90)
        assert analysis.financing.total_equity == pytest.approx(result.down_payment)

    def test_high5_without_rate(self, sample_multi):
        """Without loan terms the mortgage is estimated with HIGH-5."""
        result = multi_max_purchase_price(6, sample_multi.revenues, sample_multi.expenses)
        assert result.method == "high5"
        assert result.max_mortgage_amount == pytest.approx(1124266.6666666667)
        assert result.max_purchase_price == pytest.approx(1405333.3333333333)

    def test_infeasible(self):
        result = multi_max_purchase_price(
            6, MultiRevenues(base_rents=5000), MultiExpenses(), 5, 25
        )
        assert result.is_feasible is False
        assert result.max_purchase_price == 0

    @pytest.mark.parametrize(
        "units,down_payment", [(0, 20), (2.5, 20), (True, 20), (6, 100), (6, -1)]
    )
    def test_invalid_inputs(self, sample_multi, units, down_payment):
        with pytest.raises(InvalidInputError):
            multi_max_purchase_price(
                units,
                sample_multi.revenues,
                sample_multi.expenses,
                down_payment_percent=down_payment,
            )
