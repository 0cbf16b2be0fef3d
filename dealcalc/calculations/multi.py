"""
MULTI Profitability Engine

Income property analysis: revenues, operating expenses, net operating
income, debt service from any number of financing sources, and the usual
investment ratios (cap rate, cash-on-cash, DSCR, GRM, break-even).
All amounts are annual unless a field name says monthly.
"""

import logging
import math
from typing import Annotated, Dict, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeFloat,
    PlainSerializer,
    PositiveFloat,
    PositiveInt,
)

from dealcalc.calculations.aggregation import (
    MULTI_CATEGORIES,
    MULTI_REVENUE_PROVISIONS,
    aggregate_category,
)
from dealcalc.calculations.amortization import (
    LoanTerms,
    amortize,
    calculate_dscr,
    calculate_max_principal,
)
from dealcalc.calculations.errors import InvalidInputError
from dealcalc.calculations.napkin import HIGH5_MONTHLY_RATE

logger = logging.getLogger(__name__)

DEFAULT_TARGET_CASHFLOW_PER_DOOR = 75.0

# Infinite ratios (no debt service) serialize as null
Ratio = Annotated[
    Optional[float],
    PlainSerializer(
        lambda v: v if v is not None and math.isfinite(v) else None,
        return_type=Optional[float],
    ),
]


class MultiRevenues(BaseModel):
    model_config = ConfigDict(extra="forbid")

    base_rents: NonNegativeFloat = 0
    parking: NonNegativeFloat = 0
    laundry: NonNegativeFloat = 0
    storage: NonNegativeFloat = 0
    commercial: NonNegativeFloat = 0
    other: NonNegativeFloat = 0


class MultiExpenses(BaseModel):
    model_config = ConfigDict(extra="forbid")

    municipal_tax: NonNegativeFloat = 0
    school_tax: NonNegativeFloat = 0
    insurance: NonNegativeFloat = 0
    energy: NonNegativeFloat = 0
    water: NonNegativeFloat = 0
    maintenance: NonNegativeFloat = 0
    management: NonNegativeFloat = 0
    janitor: NonNegativeFloat = 0
    snow_removal: NonNegativeFloat = 0
    landscaping: NonNegativeFloat = 0
    reserve_fund: NonNegativeFloat = 0
    other: NonNegativeFloat = 0
    # Percent of total revenue
    vacancy_rate: float = Field(default=0, ge=0, le=100)
    bad_debt_rate: float = Field(default=0, ge=0, le=100)


class FinancingSource(BaseModel):
    """One loan. Rate in annual percent, term and amortization in years."""

    model_config = ConfigDict(extra="forbid")

    type: str = "first_mortgage"
    amount: NonNegativeFloat = 0
    interest_rate: NonNegativeFloat = 0
    term: NonNegativeFloat = 0
    amortization: NonNegativeFloat = 0
    payment_amount: Optional[NonNegativeFloat] = None  # fixed monthly payment


class MultiProperty(BaseModel):
    """Inputs of a rental income property."""

    model_config = ConfigDict(extra="forbid")

    name: str = ""
    purchase_price: PositiveFloat
    closing_costs: NonNegativeFloat = 0
    renovation_budget: NonNegativeFloat = 0
    unit_count: PositiveInt
    revenues: MultiRevenues = Field(default_factory=MultiRevenues)
    expenses: MultiExpenses = Field(default_factory=MultiExpenses)
    financing_sources: List[FinancingSource] = Field(default_factory=list)


class FinancingAnalysis(BaseModel):
    total_debt: float
    total_equity: float
    debt_breakdown: Dict[str, float]
    monthly_payments: Dict[str, float]
    monthly_debt_service: float
    annual_debt_service: float
    weighted_average_interest_rate: float
    debt_service_coverage_ratio: Ratio
    loan_to_value_ratio: float


class MultiAnalysis(BaseModel):
    """Result of a MULTI analysis."""

    total_investment: float
    gross_revenue: float
    operating_expenses: float
    net_operating_income: float
    annual_debt_service: float
    cashflow: float
    monthly_cashflow: float
    cashflow_per_unit: float  # per door per month
    meets_cashflow_target: bool
    revenue_per_unit: float
    expense_per_unit: float
    financing: FinancingAnalysis
    cap_rate: float
    cash_on_cash_return: float
    gross_rent_multiplier: float
    net_income_multiplier: float
    operating_expense_ratio: float
    break_even_ratio: float
    debt_yield: float
    global_assessment: str


def calculate_total_revenue(revenues: MultiRevenues) -> float:
    return aggregate_category(revenues.model_dump(), MULTI_CATEGORIES["revenues"].fields)


def calculate_operating_expenses(expenses: MultiExpenses, total_revenue: float) -> float:
    """Fixed expenses plus vacancy and bad-debt provisions on revenue."""
    total = aggregate_category(expenses.model_dump(), MULTI_CATEGORIES["expenses"].fields)
    for rate_field in MULTI_REVENUE_PROVISIONS:
        total += total_revenue * (getattr(expenses, rate_field) / 100)
    return total


def analyze_financing(
    sources: List[FinancingSource], net_operating_income: float, purchase_price: float
) -> FinancingAnalysis:
    """
    Debt service and leverage of the financing sources.

    A source with an explicit payment_amount uses it as its monthly payment;
    otherwise the payment is amortized over the source's amortization period.
    """
    named_terms = []
    overrides = {}
    for index, source in enumerate(sources):
        key = f"{index}:{source.type}"
        named_terms.append(
            (key, LoanTerms(source.amount, source.interest_rate, source.amortization))
        )
        if source.payment_amount:
            overrides[key] = source.payment_amount

    structure = amortize(named_terms, months=12, payment_overrides=overrides)

    debt_breakdown: Dict[str, float] = {}
    monthly_payments: Dict[str, float] = {}
    for source, loan in zip(sources, structure.loans):
        debt_breakdown[source.type] = debt_breakdown.get(source.type, 0.0) + source.amount
        monthly_payments[source.type] = (
            monthly_payments.get(source.type, 0.0) + loan.monthly_payment
        )

    total_debt = structure.total_principal
    monthly_debt_service = structure.total_monthly_payment
    annual_debt_service = monthly_debt_service * 12
    weighted_rate = (
        sum(s.amount * s.interest_rate for s in sources) / total_debt
        if total_debt > 0
        else 0.0
    )

    return FinancingAnalysis(
        total_debt=total_debt,
        total_equity=purchase_price - total_debt,
        debt_breakdown=debt_breakdown,
        monthly_payments=monthly_payments,
        monthly_debt_service=monthly_debt_service,
        annual_debt_service=annual_debt_service,
        weighted_average_interest_rate=weighted_rate,
        debt_service_coverage_ratio=calculate_dscr(net_operating_income, annual_debt_service),
        loan_to_value_ratio=(total_debt / purchase_price * 100) if purchase_price > 0 else 0.0,
    )


def assess_investment(cap_rate: float, cash_on_cash: float) -> str:
    """Overall rating from cap rate and cash-on-cash return (both percent)."""
    if cap_rate >= 7 and cash_on_cash >= 10:
        return "EXCELLENT"
    if cap_rate >= 6 and cash_on_cash >= 8:
        return "GOOD"
    if cap_rate >= 4.5 and cash_on_cash >= 6:
        return "ACCEPTABLE"
    return "POOR"


def analyze_multi_property(
    prop: MultiProperty,
    target_cashflow_per_door: float = DEFAULT_TARGET_CASHFLOW_PER_DOOR,
) -> MultiAnalysis:
    """
    Full analysis of a rental property.

    Args:
        prop: Property inputs
        target_cashflow_per_door: Monthly cashflow per unit considered acceptable

    Returns:
        MultiAnalysis with cashflow, financing and investment ratios
    """
    price = prop.purchase_price
    total_revenue = calculate_total_revenue(prop.revenues)
    operating_expenses = calculate_operating_expenses(prop.expenses, total_revenue)
    noi = total_revenue - operating_expenses

    financing = analyze_financing(prop.financing_sources, noi, price)
    debt_service = financing.annual_debt_service
    cashflow = noi - debt_service
    cashflow_per_unit = cashflow / prop.unit_count / 12

    total_investment = price + prop.closing_costs + prop.renovation_budget
    equity = financing.total_equity

    cap_rate = noi / price * 100
    cash_on_cash = cashflow / equity * 100 if equity > 0 else 0.0
    borrowed = total_investment - equity

    return MultiAnalysis(
        total_investment=total_investment,
        gross_revenue=total_revenue,
        operating_expenses=operating_expenses,
        net_operating_income=noi,
        annual_debt_service=debt_service,
        cashflow=cashflow,
        monthly_cashflow=cashflow / 12,
        cashflow_per_unit=cashflow_per_unit,
        meets_cashflow_target=cashflow_per_unit >= target_cashflow_per_door,
        revenue_per_unit=total_revenue / prop.unit_count,
        expense_per_unit=operating_expenses / prop.unit_count,
        financing=financing,
        cap_rate=cap_rate,
        cash_on_cash_return=cash_on_cash,
        gross_rent_multiplier=price / total_revenue if total_revenue > 0 else 0.0,
        net_income_multiplier=price / noi if noi > 0 else 0.0,
        operating_expense_ratio=(
            operating_expenses / total_revenue * 100 if total_revenue > 0 else 0.0
        ),
        break_even_ratio=(
            (operating_expenses + debt_service) / total_revenue * 100
            if total_revenue > 0
            else 0.0
        ),
        debt_yield=noi / borrowed * 100 if borrowed > 0 else 0.0,
        global_assessment=assess_investment(cap_rate, cash_on_cash),
    )


class MultiMaxPurchasePrice(BaseModel):
    unit_count: int
    target_cashflow_per_door: float
    gross_revenue: float
    operating_expenses: float
    net_operating_income: float
    target_annual_cashflow: float
    max_annual_debt_service: float
    max_mortgage_amount: float
    down_payment: float
    max_purchase_price: float
    method: str  # "amortization" or "high5"
    is_feasible: bool


def multi_max_purchase_price(
    unit_count: int,
    revenues: MultiRevenues,
    expenses: MultiExpenses,
    interest_rate: float = 0.0,
    amortization_years: float = 0.0,
    down_payment_percent: float = 20.0,
    target_cashflow_per_door: float = DEFAULT_TARGET_CASHFLOW_PER_DOOR,
) -> MultiMaxPurchasePrice:
    """
    Highest purchase price that still leaves the target cashflow per door.

    The debt service left after the target cashflow is converted into the
    largest mortgage it can amortize, then grossed up by the down payment.
    Without a rate or an amortization period the mortgage is estimated with
    HIGH-5 (0.5% of the amount per month).

    Args:
        unit_count: Number of doors
        revenues: Annual revenues
        expenses: Annual expenses and revenue-based provisions
        interest_rate: Mortgage rate in annual percent
        amortization_years: Mortgage amortization in years
        down_payment_percent: Down payment as a percent of the price
        target_cashflow_per_door: Monthly cashflow per door to keep

    Returns:
        MultiMaxPurchasePrice; is_feasible is False when revenue cannot
        cover the target cashflow
    """
    if isinstance(unit_count, bool) or not isinstance(unit_count, int) or unit_count <= 0:
        raise InvalidInputError("unit_count", unit_count, "Must be a positive whole number")
    if not 0 <= down_payment_percent < 100:
        raise InvalidInputError(
            "down_payment_percent", down_payment_percent, "Must be between 0 and 100"
        )

    gross_revenue = calculate_total_revenue(revenues)
    operating_expenses = calculate_operating_expenses(expenses, gross_revenue)
    noi = gross_revenue - operating_expenses
    target_annual_cashflow = target_cashflow_per_door * unit_count * 12
    max_debt_service = noi - target_annual_cashflow

    if interest_rate and amortization_years:
        method = "amortization"
        mortgage = calculate_max_principal(
            max(0.0, max_debt_service) / 12, interest_rate, amortization_years
        )
    else:
        method = "high5"
        mortgage = max(0.0, max_debt_service) / (HIGH5_MONTHLY_RATE * 12)

    price = mortgage / (1 - down_payment_percent / 100)

    return MultiMaxPurchasePrice(
        unit_count=unit_count,
        target_cashflow_per_door=target_cashflow_per_door,
        gross_revenue=gross_revenue,
        operating_expenses=operating_expenses,
        net_operating_income=noi,
        target_annual_cashflow=target_annual_cashflow,
        max_annual_debt_service=max_debt_service,
        max_mortgage_amount=mortgage,
        down_payment=price - mortgage,
        max_purchase_price=price,
        method=method,
        is_feasible=max_debt_service > 0,
    )


COMPARISON_CRITERIA = {
    "cashflow": lambda a: a.cashflow,
    "cashflow_per_unit": lambda a: a.cashflow_per_unit,
    "cap_rate": lambda a: a.cap_rate,
    "cash_on_cash_return": lambda a: a.cash_on_cash_return,
    "debt_service_coverage_ratio": lambda a: a.financing.debt_service_coverage_ratio,
    "net_operating_income": lambda a: a.net_operating_income,
}


class RankedProperty(BaseModel):
    rank: int
    index: int
    name: str
    value: float
    analysis: MultiAnalysis


class MultiComparison(BaseModel):
    criterion: str
    ranking: List[RankedProperty]
    best_index: int


def compare_multi_scenarios(
    properties: List[MultiProperty], criterion: str = "cashflow_per_unit"
) -> MultiComparison:
    """
    Rank properties by one metric, highest first.

    Ties keep input order.
    """
    if criterion not in COMPARISON_CRITERIA:
        raise InvalidInputError("criterion", criterion, "Unknown comparison criterion")
    if not properties:
        raise InvalidInputError("properties", properties, "At least one property is required")

    key = COMPARISON_CRITERIA[criterion]
    analyses = [analyze_multi_property(p) for p in properties]
    order = sorted(range(len(analyses)), key=lambda i: key(analyses[i]), reverse=True)

    ranking = [
        RankedProperty(
            rank=rank,
            index=i,
            name=properties[i].name or f"Scenario {i + 1}",
            value=key(analyses[i]),
            analysis=analyses[i],
        )
        for rank, i in enumerate(order, start=1)
    ]
    logger.debug(f"Ranked {len(properties)} properties by {criterion}")
    return MultiComparison(criterion=criterion, ranking=ranking, best_index=order[0])
