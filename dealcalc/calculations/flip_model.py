"""
FLIP scenario records.

A scenario groups named sections of line items. Each section carries its
derived values (totals, payments, interest) next to the inputs; derived
values are None until the engine computes them and are cleared whenever
the section is updated.
"""

from typing import ClassVar, Optional, Tuple
from datetime import date
from pydantic import BaseModel, ConfigDict, Field, NonNegativeFloat


class Section(BaseModel):
    """Base class for scenario sections."""

    model_config = ConfigDict(extra="forbid")

    derived_fields: ClassVar[Tuple[str, ...]] = ()

    def cleared(self) -> "Section":
        """Copy of the section with every derived value reset."""
        return self.model_copy(update={name: None for name in self.derived_fields})


class Actions(Section):
    flip_plan: str = ""
    acquisition_date: Optional[date] = None
    expected_sale_date: Optional[date] = None
    holding_period_months: NonNegativeFloat = 0


class GeneralInfo(Section):
    scenario: Optional[int] = None
    address: str = ""
    city: str = ""
    province: str = ""
    postal_code: str = ""
    property_type: str = ""
    year_built: Optional[int] = None
    lot_size: NonNegativeFloat = 0
    building_size: NonNegativeFloat = 0
    number_of_bedrooms: int = 0
    number_of_bathrooms: int = 0
    parking_spaces: int = 0
    description: str = ""


class AcquisitionCosts(Section):
    purchase_price: NonNegativeFloat = 0
    transfer_tax: NonNegativeFloat = 0
    legal_fees: NonNegativeFloat = 0
    inspection_fees: NonNegativeFloat = 0
    appraisal_fees: NonNegativeFloat = 0
    mortgage_insurance: NonNegativeFloat = 0
    mortgage_setup_fees: NonNegativeFloat = 0
    other_acquisition_fees: NonNegativeFloat = 0
    total_acquisition_costs: Optional[float] = None

    derived_fields: ClassVar[Tuple[str, ...]] = ("total_acquisition_costs",)


class RenovationCosts(Section):
    kitchen: NonNegativeFloat = 0
    bathroom: NonNegativeFloat = 0
    flooring: NonNegativeFloat = 0
    painting: NonNegativeFloat = 0
    windows: NonNegativeFloat = 0
    doors: NonNegativeFloat = 0
    roofing: NonNegativeFloat = 0
    electrical: NonNegativeFloat = 0
    plumbing: NonNegativeFloat = 0
    hvac: NonNegativeFloat = 0
    foundation: NonNegativeFloat = 0
    exterior: NonNegativeFloat = 0
    landscape: NonNegativeFloat = 0
    permits: NonNegativeFloat = 0
    labor_costs: NonNegativeFloat = 0
    materials: NonNegativeFloat = 0
    contingency: NonNegativeFloat = 0
    other_renovation_costs: NonNegativeFloat = 0
    total_renovation_costs: Optional[float] = None

    derived_fields: ClassVar[Tuple[str, ...]] = ("total_renovation_costs",)


class SellingCosts(Section):
    real_estate_commission: NonNegativeFloat = 0
    legal_fees_for_sale: NonNegativeFloat = 0
    marketing_costs: NonNegativeFloat = 0
    staging_costs: NonNegativeFloat = 0
    prepayment_penalty: NonNegativeFloat = 0
    other_selling_costs: NonNegativeFloat = 0
    total_selling_costs: Optional[float] = None

    derived_fields: ClassVar[Tuple[str, ...]] = ("total_selling_costs",)


class Revenues(Section):
    expected_sale_price: NonNegativeFloat = 0
    rental_income: NonNegativeFloat = 0
    other_revenues: NonNegativeFloat = 0
    total_revenues: Optional[float] = None

    derived_fields: ClassVar[Tuple[str, ...]] = ("total_revenues",)


class HoldingCosts(Section):
    property_taxes: NonNegativeFloat = 0  # annual
    insurance: NonNegativeFloat = 0  # annual
    utilities: NonNegativeFloat = 0  # monthly
    maintenance: NonNegativeFloat = 0  # monthly
    other_holding_costs: NonNegativeFloat = 0  # monthly
    total_holding_costs: Optional[float] = None

    derived_fields: ClassVar[Tuple[str, ...]] = ("total_holding_costs",)


class MaintenanceCosts(Section):
    # All items are monthly
    repairs: NonNegativeFloat = 0
    cleaning: NonNegativeFloat = 0
    landscaping: NonNegativeFloat = 0
    snow_removal: NonNegativeFloat = 0
    other_maintenance_costs: NonNegativeFloat = 0
    total_maintenance_costs: Optional[float] = None

    derived_fields: ClassVar[Tuple[str, ...]] = ("total_maintenance_costs",)


class PropertyFinancing(Section):
    """Purchase financing. Rates are annual percentages, terms are in years."""

    down_payment: NonNegativeFloat = 0
    down_payment_percentage: NonNegativeFloat = 0
    first_mortgage_amount: NonNegativeFloat = 0
    first_mortgage_rate: NonNegativeFloat = 0
    first_mortgage_term: NonNegativeFloat = 0
    first_mortgage_amortization: NonNegativeFloat = 0
    second_mortgage_amount: NonNegativeFloat = 0
    second_mortgage_rate: NonNegativeFloat = 0
    second_mortgage_term: NonNegativeFloat = 0
    second_mortgage_amortization: NonNegativeFloat = 0
    private_loan_amount: NonNegativeFloat = 0
    private_loan_rate: NonNegativeFloat = 0
    private_loan_term: NonNegativeFloat = 0
    vendor_take_back_amount: NonNegativeFloat = 0
    vendor_take_back_rate: NonNegativeFloat = 0
    vendor_take_back_term: NonNegativeFloat = 0

    monthly_payment_first_mortgage: Optional[float] = None
    monthly_payment_second_mortgage: Optional[float] = None
    monthly_payment_private_loan: Optional[float] = None
    monthly_payment_vendor_take_back: Optional[float] = None
    total_monthly_payment: Optional[float] = None
    total_interest_paid: Optional[float] = None

    derived_fields: ClassVar[Tuple[str, ...]] = (
        "monthly_payment_first_mortgage",
        "monthly_payment_second_mortgage",
        "monthly_payment_private_loan",
        "monthly_payment_vendor_take_back",
        "total_monthly_payment",
        "total_interest_paid",
    )


class RenovationFinancing(Section):
    """Renovation financing. The renovation loan term is a month count."""

    personal_funds: NonNegativeFloat = 0
    credit_line_amount: NonNegativeFloat = 0
    credit_line_rate: NonNegativeFloat = 0
    renovation_loan_amount: NonNegativeFloat = 0
    renovation_loan_rate: NonNegativeFloat = 0
    renovation_loan_term: NonNegativeFloat = 0

    monthly_payment_credit_line: Optional[float] = None
    monthly_payment_renovation_loan: Optional[float] = None
    total_monthly_payment_renovation: Optional[float] = None
    total_interest_paid_renovation: Optional[float] = None

    derived_fields: ClassVar[Tuple[str, ...]] = (
        "monthly_payment_credit_line",
        "monthly_payment_renovation_loan",
        "total_monthly_payment_renovation",
        "total_interest_paid_renovation",
    )


class ProfitabilityAnalysis(BaseModel):
    """Derived profitability metrics of one scenario."""

    acquisition_cost: float
    renovation_cost: float
    total_investment: float
    total_revenue: float
    gross_profit: float
    holding_costs: float
    selling_costs: float
    financing_costs: float
    net_profit: float
    roi: float
    annualized_roi: float
    cash_on_cash: float
    total_cash_invested: float


class FlipScenario(BaseModel):
    """Complete input and derived state of one FLIP scenario."""

    model_config = ConfigDict(extra="forbid")

    actions: Actions = Field(default_factory=Actions)
    general_info: GeneralInfo = Field(default_factory=GeneralInfo)
    acquisition_costs: AcquisitionCosts = Field(default_factory=AcquisitionCosts)
    renovation_costs: RenovationCosts = Field(default_factory=RenovationCosts)
    selling_costs: SellingCosts = Field(default_factory=SellingCosts)
    revenues: Revenues = Field(default_factory=Revenues)
    holding_costs: HoldingCosts = Field(default_factory=HoldingCosts)
    maintenance_costs: MaintenanceCosts = Field(default_factory=MaintenanceCosts)
    property_financing: PropertyFinancing = Field(default_factory=PropertyFinancing)
    renovation_financing: RenovationFinancing = Field(default_factory=RenovationFinancing)
    profitability_analysis: Optional[ProfitabilityAnalysis] = None

    def cleared(self) -> "FlipScenario":
        """Copy of the scenario with every derived value reset."""
        update = {
            name: getattr(self, name).cleared()
            for name in SECTION_NAMES
        }
        update["profitability_analysis"] = None
        return self.model_copy(update=update)


SECTION_NAMES: Tuple[str, ...] = (
    "actions",
    "general_info",
    "acquisition_costs",
    "renovation_costs",
    "selling_costs",
    "revenues",
    "holding_costs",
    "maintenance_costs",
    "property_financing",
    "renovation_financing",
)
