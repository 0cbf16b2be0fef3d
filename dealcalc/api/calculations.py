"""
Loan and tax calculation API endpoints.

These endpoints accept inputs and return calculated results.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field, NonNegativeFloat

from dealcalc.calculations import amortization
from dealcalc.calculations.transfer_tax import TransferTaxResult, calculate_transfer_tax

router = APIRouter()


class PaymentInput(BaseModel):
    """Input for a monthly payment calculation."""

    principal: NonNegativeFloat
    annual_rate: NonNegativeFloat  # percent
    term_years: NonNegativeFloat
    holding_period_months: int = Field(default=0, ge=0)


class PaymentResponse(BaseModel):
    monthly_payment: float
    annual_debt_service: float
    interest_over_holding_period: float
    balance_after_holding_period: float


@router.post("/payment", response_model=PaymentResponse)
async def calculate_payment(inputs: PaymentInput):
    """Monthly payment, and interest accrued over an optional holding period."""
    try:
        payment = amortization.calculate_payment(
            inputs.principal, inputs.annual_rate, inputs.term_years
        )
        interest = amortization.calculate_loan_interest(
            inputs.principal, inputs.annual_rate, payment, inputs.holding_period_months
        )
        balance = amortization.calculate_remaining_balance(
            inputs.principal,
            inputs.annual_rate,
            inputs.term_years,
            inputs.holding_period_months,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return PaymentResponse(
        monthly_payment=payment,
        annual_debt_service=payment * 12,
        interest_over_holding_period=interest,
        balance_after_holding_period=balance,
    )


class AmortizationInput(BaseModel):
    """Input for amortization calculation."""

    principal: NonNegativeFloat
    annual_rate: NonNegativeFloat  # percent
    amortization_years: int = Field(gt=0)
    io_months: int = Field(default=0, ge=0)
    total_months: Optional[int] = Field(default=None, gt=0)
    start_date: Optional[date] = None
    debt_service_from: int = Field(default=1, ge=1)
    debt_service_to: Optional[int] = Field(default=None, ge=1)


class AmortizationResponse(BaseModel):
    schedule: List[dict]
    total_interest: float
    total_principal: float
    debt_service: float  # payments over the requested period range


@router.post("/amortization", response_model=AmortizationResponse)
async def calculate_amortization(inputs: AmortizationInput):
    """Generate loan amortization schedule."""
    try:
        schedule = amortization.generate_amortization_schedule(
            principal=inputs.principal,
            annual_rate_percent=inputs.annual_rate,
            amortization_months=inputs.amortization_years * 12,
            io_months=inputs.io_months,
            total_months=inputs.total_months,
            start_date=inputs.start_date,
        )
        last_period = inputs.debt_service_to
        if last_period is None:
            last_period = len(schedule)
        debt_service = amortization.calculate_debt_service(
            schedule, inputs.debt_service_from, last_period
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return AmortizationResponse(
        schedule=schedule,
        total_interest=amortization.calculate_total_interest(schedule),
        total_principal=sum(row["principal"] for row in schedule),
        debt_service=debt_service,
    )


class TransferTaxInput(BaseModel):
    property_value: float
    municipality: str = ""
    first_time_buyer: bool = False
    first_home_in_quebec: bool = False
    custom_rate_percent: Optional[NonNegativeFloat] = None


@router.post("/transfer-tax", response_model=TransferTaxResult)
async def calculate_transfer_tax_endpoint(inputs: TransferTaxInput):
    """Quebec welcome tax for a purchase."""
    try:
        return calculate_transfer_tax(**inputs.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
