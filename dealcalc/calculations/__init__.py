"""
Deal Calculation Engine

Core calculation modules for FLIP and MULTI real estate analysis.
Every calculation is a pure function of its input record.
"""

from dealcalc.calculations import (
    amortization,
    aggregation,
    flip,
    multi,
    napkin,
    scenarios,
    sensitivity,
    transfer_tax,
)

__all__ = [
    "amortization",
    "aggregation",
    "flip",
    "multi",
    "napkin",
    "scenarios",
    "sensitivity",
    "transfer_tax",
]
