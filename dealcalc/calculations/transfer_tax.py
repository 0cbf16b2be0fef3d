"""
Quebec property transfer tax ("welcome tax").

Marginal brackets on the property value. Montreal adds two upper brackets
and grants first buyers an exemption of up to 5 000$.
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

from pydantic import BaseModel

from dealcalc.calculations.errors import InvalidInputError


@dataclass(frozen=True)
class TaxBracket:
    lower: float
    upper: float
    rate: float  # decimal


PROVINCIAL_BRACKETS: Tuple[TaxBracket, ...] = (
    TaxBracket(0, 53700, 0.005),
    TaxBracket(53700, 269200, 0.01),
    TaxBracket(269200, math.inf, 0.015),
)

MONTREAL_BRACKETS: Tuple[TaxBracket, ...] = (
    TaxBracket(0, 53700, 0.005),
    TaxBracket(53700, 269200, 0.01),
    TaxBracket(269200, 500000, 0.015),
    TaxBracket(500000, 1000000, 0.02),
    TaxBracket(1000000, math.inf, 0.025),
)

MONTREAL_FIRST_BUYER_EXEMPTION = 5000.0

MONTREAL_AREAS = (
    "montréal", "montreal", "anjou", "baie-d'urfé", "beaconsfield",
    "côte-des-neiges", "côte-saint-luc", "dollard-des-ormeaux", "dorval",
    "hampstead", "kirkland", "lachine", "lasalle", "le plateau-mont-royal",
    "le sud-ouest", "l'île-bizard", "mercier", "mont-royal", "outremont",
    "pierrefonds", "pointe-claire", "rivière-des-prairies", "roxboro",
    "saint-laurent", "saint-léonard", "sainte-anne-de-bellevue",
    "sainte-geneviève", "senneville", "verdun", "ville-marie", "villeray",
    "westmount", "ahuntsic", "cartierville",
)


class BracketDetail(BaseModel):
    lower: float
    upper: Optional[float]  # None for the open top bracket
    rate_percent: float
    amount_in_bracket: float
    tax: float


class TransferTaxResult(BaseModel):
    property_value: float
    municipality: str
    is_montreal: bool
    gross_tax: float
    exemption: float
    exemption_reason: str
    transfer_tax: float
    brackets: List[BracketDetail]


def is_montreal(municipality: Optional[str]) -> bool:
    """True when the municipality names Montreal or one of its boroughs."""
    if not municipality:
        return False
    name = municipality.lower()
    return any(area in name for area in MONTREAL_AREAS)


def calculate_transfer_tax(
    property_value: float,
    municipality: str = "",
    first_time_buyer: bool = False,
    first_home_in_quebec: bool = False,
    custom_rate_percent: Optional[float] = None,
) -> TransferTaxResult:
    """
    Calculate the transfer tax owed on a property purchase.

    Args:
        property_value: Purchase price or assessed value, whichever is higher
        municipality: Municipality of the property
        first_time_buyer: Buyer has never owned a home
        first_home_in_quebec: First property bought in Quebec
        custom_rate_percent: Flat rate replacing the brackets

    Returns:
        TransferTaxResult with per-bracket detail
    """
    if property_value is None or property_value <= 0:
        raise InvalidInputError("property_value", property_value, "Must be a positive number")

    montreal = is_montreal(municipality)
    if custom_rate_percent:
        brackets = (TaxBracket(0, math.inf, custom_rate_percent / 100),)
    elif montreal:
        brackets = MONTREAL_BRACKETS
    else:
        brackets = PROVINCIAL_BRACKETS

    details = []
    gross_tax = 0.0
    for bracket in brackets:
        if property_value <= bracket.lower:
            break
        amount = min(property_value, bracket.upper) - bracket.lower
        tax = amount * bracket.rate
        gross_tax += tax
        details.append(
            BracketDetail(
                lower=bracket.lower,
                upper=None if math.isinf(bracket.upper) else bracket.upper,
                rate_percent=bracket.rate * 100,
                amount_in_bracket=amount,
                tax=tax,
            )
        )

    exemption = 0.0
    reason = ""
    if montreal and (first_time_buyer or first_home_in_quebec):
        exemption = min(gross_tax, MONTREAL_FIRST_BUYER_EXEMPTION)
        reason = "First-time buyer" if first_time_buyer else "First home in Quebec"

    return TransferTaxResult(
        property_value=property_value,
        municipality=municipality,
        is_montreal=montreal,
        gross_tax=gross_tax,
        exemption=exemption,
        exemption_reason=reason,
        transfer_tax=gross_tax - exemption,
        brackets=details,
    )
