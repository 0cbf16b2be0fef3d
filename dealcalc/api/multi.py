"""
MULTI calculator API endpoints.
"""

from typing import List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field, NonNegativeFloat, PositiveInt

from dealcalc.calculations import multi, sensitivity
from dealcalc.config import get_settings

router = APIRouter()


class AnalyzeInput(BaseModel):
    property: multi.MultiProperty
    target_cashflow_per_door: Optional[float] = None


@router.post("/analyze", response_model=multi.MultiAnalysis)
async def analyze_multi(inputs: AnalyzeInput):
    """Full income property analysis."""
    target = inputs.target_cashflow_per_door
    if target is None:
        target = get_settings().target_cashflow_per_door
    try:
        return multi.analyze_multi_property(inputs.property, target)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


class CompareInput(BaseModel):
    properties: List[multi.MultiProperty] = Field(min_length=1)
    criterion: str = "cashflow_per_unit"


@router.post("/compare", response_model=multi.MultiComparison)
async def compare_multi(inputs: CompareInput):
    """Rank properties by one metric."""
    try:
        return multi.compare_multi_scenarios(inputs.properties, inputs.criterion)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


class SensitivityInput(BaseModel):
    property: multi.MultiProperty
    interest_rate_deltas: List[float] = [-1.0, -0.5, 0.5, 1.0]
    vacancy_rates: List[float] = [0.0, 5.0, 10.0]
    expense_changes: List[float] = [-10.0, 10.0]
    rent_changes: List[float] = [-10.0, -5.0, 5.0, 10.0]
    price_changes: List[float] = [-5.0, 5.0]
    include_combined_stress: bool = True


@router.post("/sensitivity", response_model=sensitivity.SensitivityReport)
async def multi_sensitivity(inputs: SensitivityInput):
    """Cashflow, cap rate and DSCR under one-at-a-time perturbations."""
    try:
        return sensitivity.run_sensitivity(
            inputs.property,
            interest_rate_deltas=inputs.interest_rate_deltas,
            vacancy_rates=inputs.vacancy_rates,
            expense_changes=inputs.expense_changes,
            rent_changes=inputs.rent_changes,
            price_changes=inputs.price_changes,
            include_combined_stress=inputs.include_combined_stress,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


class MaxPriceInput(BaseModel):
    unit_count: PositiveInt
    revenues: multi.MultiRevenues
    expenses: multi.MultiExpenses = Field(default_factory=multi.MultiExpenses)
    interest_rate: NonNegativeFloat = 0.0  # percent
    amortization_years: NonNegativeFloat = 0.0
    down_payment_percent: float = Field(default=20.0, ge=0, lt=100)
    target_cashflow_per_door: Optional[float] = None


@router.post("/max-price", response_model=multi.MultiMaxPurchasePrice)
async def multi_max_price(inputs: MaxPriceInput):
    """Highest purchase price meeting the target cashflow per door."""
    target = inputs.target_cashflow_per_door
    if target is None:
        target = get_settings().target_cashflow_per_door
    try:
        return multi.multi_max_purchase_price(
            inputs.unit_count,
            inputs.revenues,
            inputs.expenses,
            interest_rate=inputs.interest_rate,
            amortization_years=inputs.amortization_years,
            down_payment_percent=inputs.down_payment_percent,
            target_cashflow_per_door=target,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
