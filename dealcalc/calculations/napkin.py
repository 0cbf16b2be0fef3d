"""
Napkin Calculations

Single-formula screening estimates run before a detailed analysis:

- PAR / HIGH-5 for income properties: expenses are a flat share of gross
  revenue depending on the unit count, and financing is estimated as 0.5%
  of the price per month.
- FIP10 for flips: overhead is 10% of the resale price.

Each estimator has an inverse solving for the price that exactly meets
the target. An inverse is feasible when its solved value is itself a valid
input of the forward estimate: a purchase price must be positive, while a
renovation budget of 0 is allowed.
"""

import math
from typing import Dict, List, Sequence

from pydantic import BaseModel

from dealcalc.calculations.errors import InvalidInputError

# Monthly cashflow per door
MULTI_THRESHOLDS = {"minimum": 50.0, "target": 75.0, "excellent": 100.0}

# Profit per flip
FLIP_THRESHOLDS = {"minimum": 15000.0, "target": 25000.0, "excellent": 40000.0}

HIGH5_MONTHLY_RATE = 0.005
FLIP_OVERHEAD_RATE = 0.10


class NapkinMultiResult(BaseModel):
    purchase_price: float
    units: int
    gross_revenue: float
    expense_ratio: float  # percent
    expenses: float
    noi: float
    financing: float
    cashflow: float
    cashflow_per_door: float  # monthly
    revenue_to_price_ratio: float
    is_good_deal: bool
    rating: str


class NapkinMultiMaxPrice(BaseModel):
    units: int
    gross_revenue: float
    target_cashflow_per_door: float
    expenses: float
    noi: float
    target_annual_cashflow: float
    max_financing: float
    max_purchase_price: float
    is_feasible: bool


class DoorsNeeded(BaseModel):
    target_monthly_income: float
    cashflow_per_door: float
    exact_doors: float
    doors_needed: int
    monthly_income: float
    annual_income: float


class NapkinFlipResult(BaseModel):
    final_price: float
    initial_price: float
    renovation_cost: float
    overhead: float
    profit: float
    profit_percent: float
    is_good_deal: bool
    rating: str


class NapkinFlipMaxOffer(BaseModel):
    final_price: float
    renovation_cost: float
    overhead: float
    target_profit: float
    max_purchase_price: float
    is_feasible: bool


class NapkinFlipMaxRenovation(BaseModel):
    final_price: float
    initial_price: float
    overhead: float
    target_profit: float
    max_renovation_cost: float
    is_feasible: bool


class NapkinSensitivityPoint(BaseModel):
    name: str
    variable: str
    change_percent: float
    result: Dict[str, float]


def _require_positive(name: str, value: float):
    if value is None or value <= 0:
        raise InvalidInputError(name, value, "Must be a positive number")


def _require_units(units: int):
    if isinstance(units, bool) or not isinstance(units, int) or units <= 0:
        raise InvalidInputError("units", units, "Must be a positive whole number")


def expense_ratio_for_units(units: int) -> float:
    """Share of gross revenue spent on operating expenses."""
    if units <= 2:
        return 0.30
    if units <= 4:
        return 0.35
    if units <= 6:
        return 0.45
    return 0.50


def _rate(value: float, thresholds: Dict[str, float]) -> str:
    if value >= thresholds["excellent"]:
        return "EXCELLENT"
    if value >= thresholds["target"]:
        return "GOOD"
    if value >= thresholds["minimum"]:
        return "ACCEPTABLE"
    return "POOR"


def napkin_multi(purchase_price: float, units: int, gross_revenue: float) -> NapkinMultiResult:
    """
    PAR estimate of monthly cashflow per door.

    Args:
        purchase_price: Purchase price
        units: Number of dwelling units
        gross_revenue: Annual gross revenue

    Returns:
        NapkinMultiResult; a deal is good at 75$/door/month or more
    """
    _require_positive("purchase_price", purchase_price)
    _require_units(units)
    _require_positive("gross_revenue", gross_revenue)

    expense_ratio = expense_ratio_for_units(units)
    expenses = gross_revenue * expense_ratio
    noi = gross_revenue - expenses
    financing = purchase_price * HIGH5_MONTHLY_RATE * 12
    cashflow = noi - financing
    cashflow_per_door = cashflow / units / 12

    return NapkinMultiResult(
        purchase_price=purchase_price,
        units=units,
        gross_revenue=gross_revenue,
        expense_ratio=expense_ratio * 100,
        expenses=expenses,
        noi=noi,
        financing=financing,
        cashflow=cashflow,
        cashflow_per_door=cashflow_per_door,
        revenue_to_price_ratio=gross_revenue / purchase_price,
        is_good_deal=cashflow_per_door >= MULTI_THRESHOLDS["target"],
        rating=_rate(cashflow_per_door, MULTI_THRESHOLDS),
    )


def napkin_multi_max_price(
    units: int,
    gross_revenue: float,
    target_cashflow_per_door: float = MULTI_THRESHOLDS["target"],
) -> NapkinMultiMaxPrice:
    """Highest purchase price that still yields the target cashflow per door."""
    _require_units(units)
    _require_positive("gross_revenue", gross_revenue)

    target_annual_cashflow = target_cashflow_per_door * units * 12
    expenses = gross_revenue * expense_ratio_for_units(units)
    noi = gross_revenue - expenses
    max_financing = noi - target_annual_cashflow
    max_price = max_financing / (HIGH5_MONTHLY_RATE * 12)

    return NapkinMultiMaxPrice(
        units=units,
        gross_revenue=gross_revenue,
        target_cashflow_per_door=target_cashflow_per_door,
        expenses=expenses,
        noi=noi,
        target_annual_cashflow=target_annual_cashflow,
        max_financing=max_financing,
        max_purchase_price=max(0.0, max_price),
        is_feasible=max_price > 0,
    )


def napkin_multi_doors_needed(
    target_monthly_income: float,
    cashflow_per_door: float = MULTI_THRESHOLDS["target"],
) -> DoorsNeeded:
    """Number of doors needed to reach a monthly income, rounded up."""
    _require_positive("target_monthly_income", target_monthly_income)
    _require_positive("cashflow_per_door", cashflow_per_door)

    exact = target_monthly_income / cashflow_per_door
    doors = math.ceil(exact)
    return DoorsNeeded(
        target_monthly_income=target_monthly_income,
        cashflow_per_door=cashflow_per_door,
        exact_doors=exact,
        doors_needed=doors,
        monthly_income=doors * cashflow_per_door,
        annual_income=doors * cashflow_per_door * 12,
    )


def _validate_flip(final_price: float, renovation_cost: float):
    _require_positive("final_price", final_price)
    if renovation_cost is None or renovation_cost < 0:
        raise InvalidInputError("renovation_cost", renovation_cost, "Cannot be negative")


def napkin_flip(final_price: float, initial_price: float, renovation_cost: float) -> NapkinFlipResult:
    """
    FIP10 profit estimate.

    profit = final - initial - renovation - 10% of final; a deal is good at
    25 000$ profit or more.
    """
    _validate_flip(final_price, renovation_cost)
    _require_positive("initial_price", initial_price)

    overhead = final_price * FLIP_OVERHEAD_RATE
    profit = final_price - initial_price - renovation_cost - overhead
    investment = initial_price + renovation_cost

    return NapkinFlipResult(
        final_price=final_price,
        initial_price=initial_price,
        renovation_cost=renovation_cost,
        overhead=overhead,
        profit=profit,
        profit_percent=profit / investment * 100,
        is_good_deal=profit >= FLIP_THRESHOLDS["target"],
        rating=_rate(profit, FLIP_THRESHOLDS),
    )


def napkin_flip_max_offer(
    final_price: float,
    renovation_cost: float,
    target_profit: float = FLIP_THRESHOLDS["target"],
) -> NapkinFlipMaxOffer:
    """Highest purchase price that still yields the target profit.

    Feasible only for a positive price.
    """
    _validate_flip(final_price, renovation_cost)

    overhead = final_price * FLIP_OVERHEAD_RATE
    max_price = final_price - renovation_cost - overhead - target_profit
    return NapkinFlipMaxOffer(
        final_price=final_price,
        renovation_cost=renovation_cost,
        overhead=overhead,
        target_profit=target_profit,
        max_purchase_price=max(0.0, max_price),
        is_feasible=max_price > 0,
    )


def napkin_flip_max_renovation(
    final_price: float,
    initial_price: float,
    target_profit: float = FLIP_THRESHOLDS["target"],
) -> NapkinFlipMaxRenovation:
    """Largest renovation budget that still yields the target profit.

    A budget of exactly 0 is feasible: the deal meets the target without
    any renovation.
    """
    _require_positive("final_price", final_price)
    _require_positive("initial_price", initial_price)

    overhead = final_price * FLIP_OVERHEAD_RATE
    max_renovation = final_price - initial_price - overhead - target_profit
    return NapkinFlipMaxRenovation(
        final_price=final_price,
        initial_price=initial_price,
        overhead=overhead,
        target_profit=target_profit,
        max_renovation_cost=max(0.0, max_renovation),
        is_feasible=max_renovation >= 0,
    )


def _sweep(base: Dict[str, float], variations: Dict[str, Sequence[float]], calculate, summarize) -> List[NapkinSensitivityPoint]:
    points = []
    for variable, changes in variations.items():
        for change in changes:
            if change == 0:
                continue
            inputs = dict(base)
            inputs[variable] = base[variable] * (1 + change / 100)
            sign = "+" if change > 0 else ""
            points.append(
                NapkinSensitivityPoint(
                    name=f"{variable} {sign}{change:g}%",
                    variable=variable,
                    change_percent=change,
                    result=summarize(calculate(**inputs)),
                )
            )
    return points


def napkin_flip_sensitivity(
    final_price: float,
    initial_price: float,
    renovation_cost: float,
    initial_price_changes: Sequence[float] = (-5, 5),
    final_price_changes: Sequence[float] = (-5, 5),
    renovation_cost_changes: Sequence[float] = (-10, 10),
) -> List[NapkinSensitivityPoint]:
    """FIP10 profit under price and renovation variations, most profitable first."""
    points = _sweep(
        {
            "final_price": final_price,
            "initial_price": initial_price,
            "renovation_cost": renovation_cost,
        },
        {
            "initial_price": initial_price_changes,
            "final_price": final_price_changes,
            "renovation_cost": renovation_cost_changes,
        },
        napkin_flip,
        lambda r: {"profit": r.profit, "profit_percent": r.profit_percent},
    )
    return sorted(points, key=lambda p: p.result["profit"], reverse=True)


def napkin_multi_sensitivity(
    purchase_price: float,
    units: int,
    gross_revenue: float,
    purchase_price_changes: Sequence[float] = (-5, 5),
    gross_revenue_changes: Sequence[float] = (-5, 5),
) -> List[NapkinSensitivityPoint]:
    """PAR cashflow per door under price and revenue variations."""
    return _sweep(
        {"purchase_price": purchase_price, "units": units, "gross_revenue": gross_revenue},
        {"purchase_price": purchase_price_changes, "gross_revenue": gross_revenue_changes},
        napkin_multi,
        lambda r: {"cashflow": r.cashflow, "cashflow_per_door": r.cashflow_per_door},
    )
