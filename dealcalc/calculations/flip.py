"""
FLIP Profitability Engine

Turns a FlipScenario into its category totals, financing derivations and
profitability metrics. Each step returns a new scenario; inputs are never
mutated. Steps run in dependency order: aggregation, then amortization,
then profitability.
"""

import logging
from typing import Callable, Dict, List, Tuple

from pydantic import BaseModel

from dealcalc.calculations.aggregation import FLIP_CATEGORIES, resolve_holding_period
from dealcalc.calculations.amortization import LoanTerms, amortize
from dealcalc.calculations.errors import CalculationError
from dealcalc.calculations.flip_model import FlipScenario, ProfitabilityAnalysis

logger = logging.getLogger(__name__)


def holding_period_months(scenario: FlipScenario) -> float:
    """Holding period of a scenario, 6 months when not set."""
    return resolve_holding_period(scenario.actions.holding_period_months)


def _with_section(scenario: FlipScenario, section_name: str, **values) -> FlipScenario:
    section = getattr(scenario, section_name).model_copy(update=values)
    return scenario.model_copy(update={section_name: section})


def _category_step(section_name: str) -> Callable[[FlipScenario], FlipScenario]:
    schema = FLIP_CATEGORIES[section_name]

    def step(scenario: FlipScenario) -> FlipScenario:
        items = getattr(scenario, section_name).model_dump()
        total = schema.total(items, scenario.actions.holding_period_months)
        return _with_section(scenario, section_name, **{schema.total_field: total})

    step.__name__ = f"calculate_{section_name}"
    step.__doc__ = f"Compute {schema.total_field} from the {section_name} items."
    return step


calculate_acquisition_costs = _category_step("acquisition_costs")
calculate_renovation_costs = _category_step("renovation_costs")
calculate_selling_costs = _category_step("selling_costs")
calculate_revenues = _category_step("revenues")
calculate_holding_costs = _category_step("holding_costs")
calculate_maintenance_costs = _category_step("maintenance_costs")


def calculate_property_financing(scenario: FlipScenario) -> FlipScenario:
    """
    Derive purchase financing payments and holding-period interest.

    Mortgages amortize over their amortization period; the private loan
    and the vendor take-back amortize over their term.
    """
    pf = scenario.property_financing
    structure = amortize(
        [
            (
                "first_mortgage",
                LoanTerms(
                    pf.first_mortgage_amount,
                    pf.first_mortgage_rate,
                    pf.first_mortgage_amortization,
                ),
            ),
            (
                "second_mortgage",
                LoanTerms(
                    pf.second_mortgage_amount,
                    pf.second_mortgage_rate,
                    pf.second_mortgage_amortization,
                ),
            ),
            (
                "private_loan",
                LoanTerms(pf.private_loan_amount, pf.private_loan_rate, pf.private_loan_term),
            ),
            (
                "vendor_take_back",
                LoanTerms(
                    pf.vendor_take_back_amount,
                    pf.vendor_take_back_rate,
                    pf.vendor_take_back_term,
                ),
            ),
        ],
        months=holding_period_months(scenario),
    )

    return _with_section(
        scenario,
        "property_financing",
        monthly_payment_first_mortgage=structure.payment("first_mortgage"),
        monthly_payment_second_mortgage=structure.payment("second_mortgage"),
        monthly_payment_private_loan=structure.payment("private_loan"),
        monthly_payment_vendor_take_back=structure.payment("vendor_take_back"),
        total_monthly_payment=structure.total_monthly_payment,
        total_interest_paid=structure.total_interest_paid,
    )


def calculate_renovation_financing(scenario: FlipScenario) -> FlipScenario:
    """
    Derive renovation financing payments and interest.

    The credit line and the renovation loan are amortized over the renovation
    loan term, falling back to the holding period; that count is applied as
    years of amortization. Interest accrues over the shorter of the holding
    period and the renovation loan term.
    """
    rf = scenario.renovation_financing
    holding_months = holding_period_months(scenario)
    payment_term = rf.renovation_loan_term or holding_months

    structure = amortize(
        [
            ("credit_line", LoanTerms(rf.credit_line_amount, rf.credit_line_rate, payment_term)),
            (
                "renovation_loan",
                LoanTerms(rf.renovation_loan_amount, rf.renovation_loan_rate, payment_term),
            ),
        ],
        months=min(holding_months, payment_term),
    )

    return _with_section(
        scenario,
        "renovation_financing",
        monthly_payment_credit_line=structure.payment("credit_line"),
        monthly_payment_renovation_loan=structure.payment("renovation_loan"),
        total_monthly_payment_renovation=structure.total_monthly_payment,
        total_interest_paid_renovation=structure.total_interest_paid,
    )


def annualize_roi(roi: float, holding_months: float) -> float:
    """
    Convert a holding-period ROI into a compound annual rate.

    A loss of 100% or more has no real annualized equivalent; it is
    reported as -100.
    """
    holding_years = holding_months / 12
    if holding_years <= 0:
        return roi

    growth = 1 + roi / 100
    if growth <= 0:
        logger.warning(
            f"ROI of {roi:.2f}% wipes out the invested cash; annualized ROI clamped to -100%"
        )
        return -100.0

    return (growth ** (1 / holding_years) - 1) * 100


_REQUIRED_TOTALS: Tuple[Tuple[str, str], ...] = (
    ("acquisition_costs", "total_acquisition_costs"),
    ("renovation_costs", "total_renovation_costs"),
    ("selling_costs", "total_selling_costs"),
    ("revenues", "total_revenues"),
    ("holding_costs", "total_holding_costs"),
    ("maintenance_costs", "total_maintenance_costs"),
    ("property_financing", "total_interest_paid"),
    ("renovation_financing", "total_interest_paid_renovation"),
)


def calculate_profitability(scenario: FlipScenario) -> ProfitabilityAnalysis:
    """
    Compute profitability metrics from already-derived totals.

    Performs no aggregation itself; every category total and financing
    interest total must have been computed first.

    Raises:
        CalculationError: if a required total has not been computed
    """
    missing = [
        f"{section}.{field}"
        for section, field in _REQUIRED_TOTALS
        if getattr(getattr(scenario, section), field) is None
    ]
    if missing:
        raise CalculationError(f"Totals not computed: {', '.join(missing)}")

    acquisition_cost = scenario.acquisition_costs.total_acquisition_costs
    renovation_cost = scenario.renovation_costs.total_renovation_costs
    total_revenue = scenario.revenues.total_revenues
    selling_costs = scenario.selling_costs.total_selling_costs

    total_investment = acquisition_cost + renovation_cost
    total_cash_invested = (
        scenario.property_financing.down_payment
        + scenario.renovation_financing.personal_funds
    )
    gross_profit = total_revenue - acquisition_cost - renovation_cost
    holding_costs = (
        scenario.holding_costs.total_holding_costs
        + scenario.maintenance_costs.total_maintenance_costs
    )
    financing_costs = (
        scenario.property_financing.total_interest_paid
        + scenario.renovation_financing.total_interest_paid_renovation
    )
    net_profit = gross_profit - holding_costs - selling_costs - financing_costs

    roi = (net_profit / total_cash_invested) * 100 if total_cash_invested > 0 else 0.0
    # Same formula as roi
    cash_on_cash = (
        (net_profit / total_cash_invested) * 100 if total_cash_invested > 0 else 0.0
    )

    return ProfitabilityAnalysis(
        acquisition_cost=acquisition_cost,
        renovation_cost=renovation_cost,
        total_investment=total_investment,
        total_revenue=total_revenue,
        gross_profit=gross_profit,
        holding_costs=holding_costs,
        selling_costs=selling_costs,
        financing_costs=financing_costs,
        net_profit=net_profit,
        roi=roi,
        annualized_roi=annualize_roi(roi, holding_period_months(scenario)),
        cash_on_cash=cash_on_cash,
        total_cash_invested=total_cash_invested,
    )


def calculate_profitability_analysis(scenario: FlipScenario) -> FlipScenario:
    """Attach a fresh ProfitabilityAnalysis to the scenario."""
    return scenario.model_copy(
        update={"profitability_analysis": calculate_profitability(scenario)}
    )


CALCULATION_STEPS: Tuple[Callable[[FlipScenario], FlipScenario], ...] = (
    calculate_acquisition_costs,
    calculate_renovation_costs,
    calculate_selling_costs,
    calculate_revenues,
    calculate_holding_costs,
    calculate_maintenance_costs,
    calculate_property_financing,
    calculate_renovation_financing,
    calculate_profitability_analysis,
)


def compute_scenario(scenario: FlipScenario) -> FlipScenario:
    """Run every calculation step and return the fully derived scenario."""
    for step in CALCULATION_STEPS:
        scenario = step(scenario)
    return scenario


def calculate_all(scenario: FlipScenario) -> ProfitabilityAnalysis:
    """Profitability metrics of a scenario, computed from its raw inputs."""
    return compute_scenario(scenario).profitability_analysis


class ScenarioTriple(BaseModel):
    scenario1: float
    scenario2: float
    scenario3: float


class ProfitabilityComparison(BaseModel):
    net_profit: ScenarioTriple
    roi: ScenarioTriple
    annualized_roi: ScenarioTriple
    cash_on_cash: ScenarioTriple
    total_investment: ScenarioTriple
    holding_period_months: ScenarioTriple


class CostComparison(BaseModel):
    acquisition_costs: ScenarioTriple
    renovation_costs: ScenarioTriple
    selling_costs: ScenarioTriple
    holding_costs: ScenarioTriple


class RevenueComparison(BaseModel):
    expected_sale_price: ScenarioTriple
    total_revenues: ScenarioTriple


class FinancingComparison(BaseModel):
    down_payment: ScenarioTriple
    total_interest_paid: ScenarioTriple


class Comparison(BaseModel):
    profitability: ProfitabilityComparison
    costs: CostComparison
    revenues: RevenueComparison
    financing: FinancingComparison


class ScenarioComparison(BaseModel):
    """Three computed scenarios side by side, with the best one by annualized ROI."""

    scenario1: FlipScenario
    scenario2: FlipScenario
    scenario3: FlipScenario
    comparison: Comparison
    best_scenario: int


def _triple(values: List[float]) -> ScenarioTriple:
    return ScenarioTriple(scenario1=values[0], scenario2=values[1], scenario3=values[2])


def select_best_scenario(annualized_rois: List[float]) -> int:
    """
    Index (1-based) of the highest annualized ROI.

    Ties go to the first scenario holding the maximum.
    """
    ranked = sorted(
        range(len(annualized_rois)), key=lambda i: annualized_rois[i], reverse=True
    )
    # sorted() is stable and reverse=True keeps equal keys in input order
    return ranked[0] + 1


def compare_scenarios(
    scenario1: FlipScenario, scenario2: FlipScenario, scenario3: FlipScenario
) -> ScenarioComparison:
    """
    Compute three scenarios independently and compare them.

    Args:
        scenario1: First scenario inputs
        scenario2: Second scenario inputs
        scenario3: Third scenario inputs

    Returns:
        ScenarioComparison with per-metric triples and the best scenario
    """
    computed = [compute_scenario(s) for s in (scenario1, scenario2, scenario3)]
    results = [s.profitability_analysis for s in computed]

    def metric(getter: Callable[[FlipScenario], float]) -> ScenarioTriple:
        return _triple([getter(s) for s in computed])

    comparison = Comparison(
        profitability=ProfitabilityComparison(
            net_profit=_triple([r.net_profit for r in results]),
            roi=_triple([r.roi for r in results]),
            annualized_roi=_triple([r.annualized_roi for r in results]),
            cash_on_cash=_triple([r.cash_on_cash for r in results]),
            total_investment=_triple([r.total_investment for r in results]),
            holding_period_months=metric(holding_period_months),
        ),
        costs=CostComparison(
            acquisition_costs=metric(lambda s: s.acquisition_costs.total_acquisition_costs),
            renovation_costs=metric(lambda s: s.renovation_costs.total_renovation_costs),
            selling_costs=metric(lambda s: s.selling_costs.total_selling_costs),
            holding_costs=_triple([r.holding_costs for r in results]),
        ),
        revenues=RevenueComparison(
            expected_sale_price=metric(lambda s: s.revenues.expected_sale_price),
            total_revenues=metric(lambda s: s.revenues.total_revenues),
        ),
        financing=FinancingComparison(
            down_payment=metric(lambda s: s.property_financing.down_payment),
            total_interest_paid=_triple([r.financing_costs for r in results]),
        ),
    )

    best = select_best_scenario([r.annualized_roi for r in results])
    logger.debug(
        f"Compared scenarios, annualized ROI "
        f"{[round(r.annualized_roi, 2) for r in results]}, best scenario {best}"
    )

    return ScenarioComparison(
        scenario1=computed[0],
        scenario2=computed[1],
        scenario3=computed[2],
        comparison=comparison,
        best_scenario=best,
    )
