"""
API routes for the deal calculators.
"""

from fastapi import APIRouter

from dealcalc.api import calculations, flip, multi, napkin

router = APIRouter()

# Include sub-routers
router.include_router(flip.router, prefix="/flip", tags=["flip"])
router.include_router(multi.router, prefix="/multi", tags=["multi"])
router.include_router(napkin.router, prefix="/napkin", tags=["napkin"])
router.include_router(calculations.router, prefix="/calculate", tags=["calculations"])
