"""
Sensitivity Analysis

Re-runs the full engine under one-at-a-time parameter perturbations.
Each perturbation starts from the base inputs; only the named
combined-stress point changes several parameters at once.
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence

from pydantic import BaseModel

from dealcalc.calculations.aggregation import FLIP_CATEGORIES, MULTI_CATEGORIES
from dealcalc.calculations.errors import InvalidInputError
from dealcalc.calculations.flip import calculate_all
from dealcalc.calculations.flip_model import FlipScenario
from dealcalc.calculations.multi import MultiProperty, Ratio, analyze_multi_property

logger = logging.getLogger(__name__)

COMBINED_STRESS = {
    "interest_rate_delta": 1.0,
    "vacancy_rate": 10.0,
    "rent_change": -5.0,
    "expense_change": 10.0,
}


class SensitivityPoint(BaseModel):
    name: str
    parameter: str
    change: float
    cashflow: float
    cashflow_per_unit: float
    cap_rate: float
    dscr: Ratio


class SensitivityReport(BaseModel):
    """MULTI sensitivity results, one list per swept parameter."""

    base: SensitivityPoint
    interest_rate: List[SensitivityPoint]
    vacancy_rate: List[SensitivityPoint]
    expenses: List[SensitivityPoint]
    rent: List[SensitivityPoint]
    purchase_price: List[SensitivityPoint]
    combined_stress: Optional[SensitivityPoint] = None


def _signed(value: float) -> str:
    return f"+{value:g}" if value > 0 else f"{value:g}"


def _point(prop: MultiProperty, name: str, parameter: str, change: float) -> SensitivityPoint:
    analysis = analyze_multi_property(prop)
    return SensitivityPoint(
        name=name,
        parameter=parameter,
        change=change,
        cashflow=analysis.cashflow,
        cashflow_per_unit=analysis.cashflow_per_unit,
        cap_rate=analysis.cap_rate,
        dscr=analysis.financing.debt_service_coverage_ratio,
    )


def with_interest_rate_delta(prop: MultiProperty, delta: float) -> MultiProperty:
    """Shift every source's rate by delta points, floored at 0; payments are re-amortized."""
    sources = [
        s.model_copy(
            update={"interest_rate": max(0.0, s.interest_rate + delta), "payment_amount": None}
        )
        for s in prop.financing_sources
    ]
    return prop.model_copy(update={"financing_sources": sources})


def with_vacancy_rate(prop: MultiProperty, rate: float) -> MultiProperty:
    expenses = prop.expenses.model_copy(update={"vacancy_rate": rate})
    return prop.model_copy(update={"expenses": expenses})


def with_expense_change(prop: MultiProperty, percent: float) -> MultiProperty:
    """Scale the fixed expense items; revenue-based provisions are left alone."""
    factor = 1 + percent / 100
    items = {
        name: getattr(prop.expenses, name) * factor
        for name in MULTI_CATEGORIES["expenses"].fields
    }
    return prop.model_copy(update={"expenses": prop.expenses.model_copy(update=items)})


def with_rent_change(prop: MultiProperty, percent: float) -> MultiProperty:
    revenues = prop.revenues.model_copy(
        update={"base_rents": prop.revenues.base_rents * (1 + percent / 100)}
    )
    return prop.model_copy(update={"revenues": revenues})


def with_price_change(prop: MultiProperty, percent: float) -> MultiProperty:
    """Scale the purchase price and the borrowed amounts together."""
    factor = 1 + percent / 100
    sources = [
        s.model_copy(update={"amount": s.amount * factor, "payment_amount": None})
        for s in prop.financing_sources
    ]
    return prop.model_copy(
        update={"purchase_price": prop.purchase_price * factor, "financing_sources": sources}
    )


def run_sensitivity(
    prop: MultiProperty,
    interest_rate_deltas: Sequence[float] = (-1.0, -0.5, 0.5, 1.0),
    vacancy_rates: Sequence[float] = (0.0, 5.0, 10.0),
    expense_changes: Sequence[float] = (-10.0, 10.0),
    rent_changes: Sequence[float] = (-10.0, -5.0, 5.0, 10.0),
    price_changes: Sequence[float] = (-5.0, 5.0),
    include_combined_stress: bool = True,
) -> SensitivityReport:
    """
    Sweep a MULTI property's inputs and report cashflow, cap rate and DSCR.

    Args:
        prop: Base property
        interest_rate_deltas: Rate shifts in percentage points
        vacancy_rates: Vacancy rates (percent) to substitute
        expense_changes: Percent changes of fixed expenses
        rent_changes: Percent changes of base rents
        price_changes: Percent changes of price and loan amounts
        include_combined_stress: Add the combined stress point

    Returns:
        SensitivityReport, points in the order given
    """
    report = SensitivityReport(
        base=_point(prop, "Base case", "base", 0.0),
        interest_rate=[
            _point(with_interest_rate_delta(prop, d), f"Interest rate {_signed(d)} pts", "interest_rate", d)
            for d in interest_rate_deltas
        ],
        vacancy_rate=[
            _point(with_vacancy_rate(prop, v), f"Vacancy {v:g}%", "vacancy_rate", v)
            for v in vacancy_rates
        ],
        expenses=[
            _point(with_expense_change(prop, c), f"Expenses {_signed(c)}%", "expenses", c)
            for c in expense_changes
        ],
        rent=[
            _point(with_rent_change(prop, c), f"Rents {_signed(c)}%", "rent", c)
            for c in rent_changes
        ],
        purchase_price=[
            _point(with_price_change(prop, c), f"Purchase price {_signed(c)}%", "purchase_price", c)
            for c in price_changes
        ],
    )

    if include_combined_stress:
        stressed = with_interest_rate_delta(prop, COMBINED_STRESS["interest_rate_delta"])
        stressed = with_vacancy_rate(stressed, COMBINED_STRESS["vacancy_rate"])
        stressed = with_rent_change(stressed, COMBINED_STRESS["rent_change"])
        stressed = with_expense_change(stressed, COMBINED_STRESS["expense_change"])
        report.combined_stress = _point(stressed, "Combined stress", "combined", 0.0)

    logger.debug(f"Sensitivity analysis for {prop.name or 'property'} complete")
    return report


class FlipSensitivityPoint(BaseModel):
    name: str
    variable: str
    change_percent: float
    value: float
    net_profit: float
    roi: float
    annualized_roi: float


class FlipSensitivityReport(BaseModel):
    variation_percent: float
    steps: int
    base: FlipSensitivityPoint
    points: Dict[str, List[FlipSensitivityPoint]]


def _scale_section(scenario: FlipScenario, section: str, fields: Sequence[str], factor: float) -> FlipScenario:
    current = getattr(scenario, section)
    updated = current.model_copy(
        update={name: getattr(current, name) * factor for name in fields}
    )
    return scenario.model_copy(update={section: updated})


FLIP_VARIABLES: Dict[str, Callable[[FlipScenario, float], FlipScenario]] = {
    "expected_sale_price": lambda s, f: _scale_section(
        s, "revenues", ("expected_sale_price",), f
    ),
    "purchase_price": lambda s, f: _scale_section(
        s, "acquisition_costs", ("purchase_price",), f
    ),
    "renovation_costs": lambda s, f: _scale_section(
        s, "renovation_costs", FLIP_CATEGORIES["renovation_costs"].fields, f
    ),
}

FLIP_BASE_VALUES: Dict[str, Callable[[FlipScenario], float]] = {
    "expected_sale_price": lambda s: s.revenues.expected_sale_price,
    "purchase_price": lambda s: s.acquisition_costs.purchase_price,
    "renovation_costs": lambda s: sum(
        getattr(s.renovation_costs, name) for name in FLIP_CATEGORIES["renovation_costs"].fields
    ),
}


def _flip_point(scenario: FlipScenario, variable: str, change: float, name: str) -> FlipSensitivityPoint:
    result = calculate_all(scenario)
    return FlipSensitivityPoint(
        name=name,
        variable=variable,
        change_percent=change,
        value=FLIP_BASE_VALUES[variable](scenario) if variable in FLIP_BASE_VALUES else 0.0,
        net_profit=result.net_profit,
        roi=result.roi,
        annualized_roi=result.annualized_roi,
    )


def run_flip_sensitivity(
    scenario: FlipScenario,
    variables: Sequence[str] = tuple(FLIP_VARIABLES),
    variation_percent: float = 10.0,
    steps: int = 2,
) -> FlipSensitivityReport:
    """
    Vary FLIP inputs by up to +/- variation_percent in equal steps.

    For steps=2 and variation_percent=10 each variable is evaluated at
    -10%, -5%, +5% and +10%.
    """
    if steps < 1:
        raise InvalidInputError("steps", steps, "Steps must be at least 1")
    unknown = [v for v in variables if v not in FLIP_VARIABLES]
    if unknown:
        raise InvalidInputError("variables", unknown, "Unknown sensitivity variable")

    changes = [i * variation_percent / steps for i in range(-steps, steps + 1) if i != 0]
    points = {
        variable: [
            _flip_point(
                FLIP_VARIABLES[variable](scenario, 1 + change / 100),
                variable,
                change,
                f"{variable} {_signed(change)}%",
            )
            for change in changes
        ]
        for variable in variables
    }

    return FlipSensitivityReport(
        variation_percent=variation_percent,
        steps=steps,
        base=_flip_point(scenario, "base", 0.0, "Base case"),
        points=points,
    )
