"""
Loan Amortization Calculations

Monthly payment, interest accrued over a holding period, and dated
amortization schedules. Rates are annual percentages (5.0 means 5%),
terms are in years unless a parameter says months.
"""

import math
from typing import List, Dict, Optional, Iterable, Tuple
from dataclasses import dataclass
from datetime import date
from dateutil.relativedelta import relativedelta

from dealcalc.calculations.errors import InvalidInputError


@dataclass(frozen=True)
class LoanTerms:
    """Terms of a single financing source."""

    principal: float = 0.0
    annual_rate_percent: float = 0.0
    term_years: float = 0.0

    def __post_init__(self):
        for field in ("principal", "annual_rate_percent", "term_years"):
            value = getattr(self, field)
            if value is None:
                object.__setattr__(self, field, 0.0)
            elif value < 0:
                raise InvalidInputError(field, value, "Loan terms cannot be negative")

    @property
    def monthly_rate(self) -> float:
        return self.annual_rate_percent / 100 / 12


@dataclass(frozen=True)
class FinancedLoan:
    """A financing source with its derived payment and holding-period interest."""

    name: str
    terms: LoanTerms
    monthly_payment: float
    interest_paid: float


@dataclass(frozen=True)
class FinancingStructure:
    """Ordered financing sources amortized over the same number of months."""

    loans: Tuple[FinancedLoan, ...]
    months: int

    @property
    def total_monthly_payment(self) -> float:
        return sum(loan.monthly_payment for loan in self.loans)

    @property
    def total_interest_paid(self) -> float:
        return sum(loan.interest_paid for loan in self.loans)

    @property
    def total_principal(self) -> float:
        return sum(loan.terms.principal for loan in self.loans)

    def payment(self, name: str) -> float:
        """Monthly payment of the named source (0 if absent)."""
        for loan in self.loans:
            if loan.name == name:
                return loan.monthly_payment
        return 0.0


def calculate_payment(
    principal: float, annual_rate_percent: float, term_years: float
) -> float:
    """
    Calculate monthly loan payment.

    Standard annuity formula, P * r(1+r)^n / ((1+r)^n - 1).

    Args:
        principal: Loan principal amount
        annual_rate_percent: Annual interest rate in percent (e.g., 5 for 5%)
        term_years: Amortization period in years

    Returns:
        Monthly payment amount, 0 when there is no principal or no term
    """
    terms = LoanTerms(principal, annual_rate_percent, term_years)

    if terms.principal == 0 or terms.term_years == 0:
        return 0.0

    return _annuity_payment(terms.principal, terms.monthly_rate, terms.term_years * 12)


def _annuity_payment(principal: float, monthly_rate: float, periods: float) -> float:
    if monthly_rate == 0:
        return principal / periods
    growth = (1 + monthly_rate) ** periods
    return principal * (monthly_rate * growth) / (growth - 1)


def calculate_max_principal(
    monthly_payment: float, annual_rate_percent: float, term_years: float
) -> float:
    """
    Largest principal a monthly payment can amortize.

    Inverse of calculate_payment, PMT * (1 - (1+r)^-n) / r.
    """
    for name, value in (
        ("monthly_payment", monthly_payment),
        ("annual_rate_percent", annual_rate_percent),
        ("term_years", term_years),
    ):
        if value < 0:
            raise InvalidInputError(name, value, "Loan terms cannot be negative")

    periods = term_years * 12
    if monthly_payment == 0 or periods == 0:
        return 0.0
    monthly_rate = annual_rate_percent / 100 / 12
    if monthly_rate == 0:
        return monthly_payment * periods
    return monthly_payment * (1 - (1 + monthly_rate) ** -periods) / monthly_rate


def calculate_loan_interest(
    principal: float, annual_rate_percent: float, payment: float, months: int
) -> float:
    """
    Simulate month-by-month amortization and return the interest accrued.

    A loan with no principal, rate or payment accrues nothing. The
    simulation stops early once the balance is repaid. A partial final
    month is simulated as a full one.
    """
    if not principal or not annual_rate_percent or not payment:
        return 0.0

    monthly_rate = annual_rate_percent / 100 / 12
    balance = principal
    total_interest = 0.0

    for _ in range(math.ceil(months)):
        if balance <= 0:
            break
        interest = balance * monthly_rate
        principal_paid = min(payment - interest, balance)
        total_interest += interest
        balance -= principal_paid

    return total_interest


def calculate_total_interest_paid(loans: Iterable[Dict], months: int) -> float:
    """
    Calculate total interest paid on several loans over a number of months.

    Args:
        loans: Dicts with "principal", "annual_rate" (percent) and "payment"
        months: Number of months to simulate

    Returns:
        Sum of interest accrued on all loans
    """
    return sum(
        calculate_loan_interest(
            loan.get("principal") or 0.0,
            loan.get("annual_rate") or 0.0,
            loan.get("payment") or 0.0,
            months,
        )
        for loan in loans
    )


def amortize(
    sources: Iterable[Tuple[str, LoanTerms]],
    months: int,
    payment_overrides: Optional[Dict[str, float]] = None,
) -> FinancingStructure:
    """
    Build a financing structure from named loan terms.

    Payment and interest of every source are derived from the same terms
    and the same month count. An override replaces the computed monthly
    payment of a source (e.g. a payment fixed by the lender).
    """
    overrides = payment_overrides or {}
    loans = []
    for name, terms in sources:
        payment = overrides.get(name)
        if payment is None:
            payment = calculate_payment(
                terms.principal, terms.annual_rate_percent, terms.term_years
            )
        interest = calculate_loan_interest(
            terms.principal, terms.annual_rate_percent, payment, months
        )
        loans.append(FinancedLoan(name, terms, payment, interest))
    return FinancingStructure(tuple(loans), math.ceil(months))


def calculate_remaining_balance(
    principal: float,
    annual_rate_percent: float,
    term_years: float,
    payments_completed: int,
) -> float:
    """Calculate remaining loan balance after N payments."""
    monthly_rate = annual_rate_percent / 100 / 12
    payment = calculate_payment(principal, annual_rate_percent, term_years)

    if monthly_rate == 0:
        return max(0.0, principal - payment * payments_completed)

    balance = principal * ((1 + monthly_rate) ** payments_completed) - payment * (
        ((1 + monthly_rate) ** payments_completed - 1) / monthly_rate
    )

    return max(0.0, balance)


def generate_amortization_schedule(
    principal: float,
    annual_rate_percent: float,
    amortization_months: int,
    io_months: int = 0,
    total_months: Optional[int] = None,
    start_date: Optional[date] = None,
) -> List[Dict]:
    """
    Generate a dated amortization schedule.

    Args:
        principal: Loan principal amount
        annual_rate_percent: Annual interest rate in percent
        amortization_months: Amortization period in months
        io_months: Interest-only period in months
        total_months: Number of periods to generate (defaults to full payoff)
        start_date: Date of first payment

    Returns:
        List of amortization rows
    """
    for name, value in (
        ("principal", principal),
        ("annual_rate_percent", annual_rate_percent),
        ("amortization_months", amortization_months),
        ("io_months", io_months),
    ):
        if value < 0:
            raise InvalidInputError(name, value, "Loan terms cannot be negative")
    if total_months is None:
        total_months = io_months + amortization_months

    schedule = []
    balance = principal
    monthly_rate = annual_rate_percent / 100 / 12

    if start_date is None:
        start_date = date.today()

    for period in range(1, total_months + 1):
        period_date = start_date + relativedelta(months=period - 1)
        interest = balance * monthly_rate

        if period <= io_months:
            principal_pmt = 0.0
            payment = interest
        else:
            remaining_periods = amortization_months - (period - io_months - 1)
            if remaining_periods > 0:
                payment = _annuity_payment(balance, monthly_rate, remaining_periods)
                principal_pmt = min(payment - interest, balance)
                payment = principal_pmt + interest
            else:
                # Balloon
                principal_pmt = balance
                payment = balance + interest

        ending_balance = balance - principal_pmt

        schedule.append(
            {
                "period": period,
                "date": period_date.isoformat(),
                "beginning_balance": round(balance, 2),
                "payment": round(payment, 2),
                "interest": round(interest, 2),
                "principal": round(principal_pmt, 2),
                "ending_balance": round(max(0, ending_balance), 2),
            }
        )

        balance = max(0.0, ending_balance)

        if balance == 0:
            break

    return schedule


def calculate_total_interest(schedule: List[Dict]) -> float:
    """Calculate total interest paid over a schedule."""
    return sum(row["interest"] for row in schedule)


def calculate_debt_service(
    schedule: List[Dict], start_period: int, end_period: int
) -> float:
    """Calculate total debt service (P+I) for a range of periods."""
    return sum(
        row["payment"]
        for row in schedule
        if start_period <= row["period"] <= end_period
    )


def calculate_dscr(noi: float, debt_service: float) -> float:
    """
    Calculate Debt Service Coverage Ratio (DSCR).

    Args:
        noi: Net Operating Income for the period
        debt_service: Debt service for the same period

    Returns:
        DSCR ratio, infinite when there is no debt service
    """
    if debt_service == 0:
        return float("inf")
    return noi / debt_service
