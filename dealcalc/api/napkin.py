"""
Napkin screening API endpoints.
"""

from typing import List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from dealcalc.calculations import napkin
from dealcalc.config import get_settings

router = APIRouter()


class NapkinFlipInput(BaseModel):
    final_price: float
    initial_price: float
    renovation_cost: float = 0.0


class NapkinFlipResponse(BaseModel):
    result: napkin.NapkinFlipResult
    sensitivity: List[napkin.NapkinSensitivityPoint]


@router.post("/flip", response_model=NapkinFlipResponse)
async def napkin_flip(inputs: NapkinFlipInput):
    """FIP10 profit estimate with price and renovation variations."""
    try:
        return NapkinFlipResponse(
            result=napkin.napkin_flip(
                inputs.final_price, inputs.initial_price, inputs.renovation_cost
            ),
            sensitivity=napkin.napkin_flip_sensitivity(
                inputs.final_price, inputs.initial_price, inputs.renovation_cost
            ),
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


class MaxOfferInput(BaseModel):
    final_price: float
    renovation_cost: float = 0.0
    target_profit: Optional[float] = None


@router.post("/flip/max-offer", response_model=napkin.NapkinFlipMaxOffer)
async def napkin_flip_max_offer(inputs: MaxOfferInput):
    """Highest purchase price meeting the target profit."""
    target = inputs.target_profit
    if target is None:
        target = get_settings().target_flip_profit
    try:
        return napkin.napkin_flip_max_offer(inputs.final_price, inputs.renovation_cost, target)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


class MaxRenovationInput(BaseModel):
    final_price: float
    initial_price: float
    target_profit: Optional[float] = None


@router.post("/flip/max-renovation", response_model=napkin.NapkinFlipMaxRenovation)
async def napkin_flip_max_renovation(inputs: MaxRenovationInput):
    """Largest renovation budget meeting the target profit."""
    target = inputs.target_profit
    if target is None:
        target = get_settings().target_flip_profit
    try:
        return napkin.napkin_flip_max_renovation(inputs.final_price, inputs.initial_price, target)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


class NapkinMultiInput(BaseModel):
    purchase_price: float
    units: int
    gross_revenue: float


class NapkinMultiResponse(BaseModel):
    result: napkin.NapkinMultiResult
    sensitivity: List[napkin.NapkinSensitivityPoint]


@router.post("/multi", response_model=NapkinMultiResponse)
async def napkin_multi(inputs: NapkinMultiInput):
    """PAR cashflow per door with price and revenue variations."""
    try:
        return NapkinMultiResponse(
            result=napkin.napkin_multi(inputs.purchase_price, inputs.units, inputs.gross_revenue),
            sensitivity=napkin.napkin_multi_sensitivity(
                inputs.purchase_price, inputs.units, inputs.gross_revenue
            ),
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


class MaxPriceInput(BaseModel):
    units: int
    gross_revenue: float
    target_cashflow_per_door: Optional[float] = None


@router.post("/multi/max-price", response_model=napkin.NapkinMultiMaxPrice)
async def napkin_multi_max_price(inputs: MaxPriceInput):
    """Highest purchase price meeting the target cashflow per door."""
    target = inputs.target_cashflow_per_door
    if target is None:
        target = get_settings().target_cashflow_per_door
    try:
        return napkin.napkin_multi_max_price(inputs.units, inputs.gross_revenue, target)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


class DoorsNeededInput(BaseModel):
    target_monthly_income: float
    cashflow_per_door: Optional[float] = None


@router.post("/multi/doors-needed", response_model=napkin.DoorsNeeded)
async def napkin_multi_doors_needed(inputs: DoorsNeededInput):
    """Doors needed to reach a monthly income."""
    per_door = inputs.cashflow_per_door
    if per_door is None:
        per_door = get_settings().target_cashflow_per_door
    try:
        return napkin.napkin_multi_doors_needed(inputs.target_monthly_income, per_door)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
