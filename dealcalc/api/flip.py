"""
FLIP calculator API endpoints.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from dealcalc.calculations import flip
from dealcalc.calculations.flip_model import FlipScenario
from dealcalc.calculations.sensitivity import FlipSensitivityReport, run_flip_sensitivity

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/calculate", response_model=FlipScenario)
async def calculate_flip(scenario: FlipScenario):
    """Compute totals, financing and profitability of one scenario."""
    try:
        return flip.compute_scenario(scenario.cleared())
    except ValueError as e:
        logger.info(f"FLIP calculation rejected: {e}")
        raise HTTPException(status_code=400, detail=str(e))


class CompareInput(BaseModel):
    """Three scenarios to compare."""

    scenario1: FlipScenario
    scenario2: FlipScenario
    scenario3: FlipScenario


@router.post("/compare", response_model=flip.ScenarioComparison)
async def compare_flip_scenarios(inputs: CompareInput):
    """Compute three scenarios and pick the best by annualized ROI."""
    try:
        return flip.compare_scenarios(
            inputs.scenario1.cleared(),
            inputs.scenario2.cleared(),
            inputs.scenario3.cleared(),
        )
    except ValueError as e:
        logger.info(f"FLIP comparison rejected: {e}")
        raise HTTPException(status_code=400, detail=str(e))


class FlipSensitivityInput(BaseModel):
    scenario: FlipScenario
    variables: Optional[List[str]] = None
    variation_percent: float = Field(default=10.0, gt=0)
    steps: int = Field(default=2, ge=1)


@router.post("/sensitivity", response_model=FlipSensitivityReport)
async def flip_sensitivity(inputs: FlipSensitivityInput):
    """Net profit and ROI under sale price, purchase price and renovation variations."""
    kwargs = {"variation_percent": inputs.variation_percent, "steps": inputs.steps}
    if inputs.variables is not None:
        kwargs["variables"] = inputs.variables
    try:
        return run_flip_sensitivity(inputs.scenario, **kwargs)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
