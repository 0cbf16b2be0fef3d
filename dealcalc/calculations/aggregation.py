"""
Cost and Revenue Aggregation

Sums the line items of a cost or revenue category. Holding-type categories
are recurring: annual items are converted to monthly amounts and the
monthly total is multiplied by the holding period.
"""

from typing import Dict, Iterable, Mapping, Optional, Tuple
from dataclasses import dataclass
from numbers import Number

DEFAULT_HOLDING_PERIOD_MONTHS = 6


def resolve_holding_period(months: Optional[float]) -> float:
    """Holding period in months, falling back to the default when unset or zero."""
    return months or DEFAULT_HOLDING_PERIOD_MONTHS


def _amount(value) -> float:
    # Missing and non-numeric items count as zero
    if isinstance(value, bool) or not isinstance(value, Number):
        return 0.0
    return float(value)


def aggregate_category(
    items: Mapping, fields: Optional[Iterable[str]] = None
) -> float:
    """
    Flat sum of a category's line items.

    Args:
        items: Mapping of item name to amount
        fields: Item names to include (all items when omitted)

    Returns:
        Sum of the numeric amounts
    """
    if fields is None:
        fields = items.keys()
    return sum(_amount(items.get(name)) for name in fields)


def monthly_total(
    items: Mapping,
    annual_fields: Iterable[str] = (),
    fields: Optional[Iterable[str]] = None,
) -> float:
    """Monthly amount of a recurring category; annual items are divided by 12."""
    annual = set(annual_fields)
    if fields is None:
        fields = items.keys()
    total = 0.0
    for name in fields:
        amount = _amount(items.get(name))
        total += amount / 12 if name in annual else amount
    return total


def holding_period_total(
    items: Mapping,
    holding_period_months: Optional[float],
    annual_fields: Iterable[str] = (),
    fields: Optional[Iterable[str]] = None,
) -> float:
    """Total of a recurring category over the holding period."""
    months = resolve_holding_period(holding_period_months)
    return monthly_total(items, annual_fields, fields) * months


@dataclass(frozen=True)
class CategorySchema:
    """Declares the line items of one category and how they are totalled."""

    name: str
    fields: Tuple[str, ...]
    total_field: str
    annual_fields: Tuple[str, ...] = ()
    recurring: bool = False

    def total(
        self, items: Mapping, holding_period_months: Optional[float] = None
    ) -> float:
        if self.recurring:
            return holding_period_total(
                items, holding_period_months, self.annual_fields, self.fields
            )
        return aggregate_category(items, self.fields)


FLIP_CATEGORIES: Dict[str, CategorySchema] = {
    "acquisition_costs": CategorySchema(
        name="acquisition_costs",
        fields=(
            "purchase_price",
            "transfer_tax",
            "legal_fees",
            "inspection_fees",
            "appraisal_fees",
            "mortgage_insurance",
            "mortgage_setup_fees",
            "other_acquisition_fees",
        ),
        total_field="total_acquisition_costs",
    ),
    "renovation_costs": CategorySchema(
        name="renovation_costs",
        fields=(
            "kitchen",
            "bathroom",
            "flooring",
            "painting",
            "windows",
            "doors",
            "roofing",
            "electrical",
            "plumbing",
            "hvac",
            "foundation",
            "exterior",
            "landscape",
            "permits",
            "labor_costs",
            "materials",
            "contingency",
            "other_renovation_costs",
        ),
        total_field="total_renovation_costs",
    ),
    "selling_costs": CategorySchema(
        name="selling_costs",
        fields=(
            "real_estate_commission",
            "legal_fees_for_sale",
            "marketing_costs",
            "staging_costs",
            "prepayment_penalty",
            "other_selling_costs",
        ),
        total_field="total_selling_costs",
    ),
    "revenues": CategorySchema(
        name="revenues",
        fields=("expected_sale_price", "rental_income", "other_revenues"),
        total_field="total_revenues",
    ),
    "holding_costs": CategorySchema(
        name="holding_costs",
        fields=(
            "property_taxes",
            "insurance",
            "utilities",
            "maintenance",
            "other_holding_costs",
        ),
        total_field="total_holding_costs",
        annual_fields=("property_taxes", "insurance"),
        recurring=True,
    ),
    "maintenance_costs": CategorySchema(
        name="maintenance_costs",
        fields=(
            "repairs",
            "cleaning",
            "landscaping",
            "snow_removal",
            "other_maintenance_costs",
        ),
        total_field="total_maintenance_costs",
        recurring=True,
    ),
}

MULTI_CATEGORIES: Dict[str, CategorySchema] = {
    "revenues": CategorySchema(
        name="revenues",
        fields=("base_rents", "parking", "laundry", "storage", "commercial", "other"),
        total_field="total_revenues",
    ),
    "expenses": CategorySchema(
        name="expenses",
        fields=(
            "municipal_tax",
            "school_tax",
            "insurance",
            "energy",
            "water",
            "maintenance",
            "management",
            "janitor",
            "snow_removal",
            "landscaping",
            "reserve_fund",
            "other",
        ),
        total_field="total_expenses",
    ),
}

# Expense provisions expressed as a percentage of total revenue
MULTI_REVENUE_PROVISIONS: Tuple[str, ...] = ("vacancy_rate", "bad_debt_rate")
