"""
Loan program payment breakdowns.

Each program differs only in how its insurance-equivalent premiums are
charged: conventional and jumbo loans carry PMI until 20% equity, FHA loans an
upfront and an annual MIP, VA loans a one-time funding fee, and USDA loans an
upfront and an annual guarantee fee. The amortization itself is delegated to
the engine.
"""

from typing import Literal

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from .amortization import AmortizationEngine
from .loan import LoanInputs

LoanProgram = Literal["conventional", "fha", "va", "usda", "jumbo"]

CONFORMING_LOAN_LIMIT = 832750.0
PMI_REQUIRED_ABOVE_LTV = 80.0


def va_funding_fee_rate(
    eligibility: Literal["active", "reserves"],
    first_use: bool,
    down_payment_percent: float,
    disability_exempt: bool,
) -> float:
    """
    VA funding fee as a percent of the base loan amount.

    Args:
        eligibility: Active duty/veteran or reserves/national guard
        first_use: Whether this is the first use of the VA benefit
        down_payment_percent: Down payment as a percent of the price
        disability_exempt: Veterans receiving disability compensation pay no fee

    Returns:
        Funding fee rate (percent)
    """
    if disability_exempt:
        return 0.0
    if down_payment_percent >= 10:
        return 1.25
    if down_payment_percent >= 5:
        return 1.5
    if first_use:
        return 2.15 if eligibility == "active" else 2.4
    return 3.3


class ProgramPaymentInputs(BaseModel):
    """Purchase and program parameters for a payment breakdown."""

    program: LoanProgram = Field(default="conventional", description="Loan program")
    home_price: float = Field(..., gt=0, description="Purchase price")
    down_payment: float = Field(default=0, ge=0, description="Cash down payment")
    annual_interest_rate: float = Field(
        ..., ge=0, le=100, description="Annual interest rate (percent)"
    )
    term_months: int = Field(default=360, gt=0, le=600, description="Loan term")
    annual_property_tax: float = Field(default=0, ge=0, description="Yearly tax")
    annual_home_insurance: float = Field(default=0, ge=0, description="Yearly insurance")
    monthly_hoa: float = Field(default=0, ge=0, description="Monthly HOA dues")

    pmi_rate: float = Field(default=0.5, ge=0, description="Annual PMI (percent)")
    fha_upfront_mip_rate: float = Field(default=1.75, ge=0)
    fha_annual_mip_rate: float = Field(default=0.55, ge=0)
    va_eligibility: Literal["active", "reserves"] = "active"
    va_first_use: bool = True
    va_disability_exempt: bool = False
    finance_funding_fee: bool = True
    usda_upfront_fee_rate: float = Field(default=1.0, ge=0)
    usda_annual_fee_rate: float = Field(default=0.35, ge=0)
    conforming_loan_limit: float = Field(default=CONFORMING_LOAN_LIMIT, gt=0)

    @field_validator("down_payment")
    @classmethod
    def validate_down_payment(cls, v: float, info: ValidationInfo) -> float:
        home_price = info.data.get("home_price")
        if home_price is not None and v >= home_price:
            raise ValueError("Down payment must be less than the home price")
        return v

    @property
    def base_loan_amount(self) -> float:
        return round(self.home_price - self.down_payment, 2)

    @property
    def down_payment_percent(self) -> float:
        return self.down_payment / self.home_price * 100


class ProgramPaymentBreakdown(BaseModel):
    """Monthly PITI breakdown for a loan program."""

    program: LoanProgram
    base_loan_amount: float
    upfront_fee_rate: float
    upfront_fee: float
    total_loan_amount: float
    down_payment_percent: float
    ltv: float
    is_jumbo: bool
    monthly_principal_interest: float
    monthly_property_tax: float
    monthly_insurance: float
    monthly_mortgage_insurance: float
    monthly_hoa: float
    total_monthly_payment: float
    total_interest: float
    total_mortgage_insurance: float
    payoff_month: int


def build_program_loan(inputs: ProgramPaymentInputs) -> LoanInputs:
    """Translate program rules into engine loan inputs."""
    ltv = inputs.base_loan_amount / inputs.home_price * 100
    loan = {
        "principal": inputs.base_loan_amount,
        "annual_interest_rate": inputs.annual_interest_rate,
        "term_months": inputs.term_months,
    }

    if inputs.program in ("conventional", "jumbo"):
        if ltv > PMI_REQUIRED_ABOVE_LTV:
            loan["annual_fee_rate"] = inputs.pmi_rate
            loan["fee_cancel_balance"] = round(
                inputs.home_price * PMI_REQUIRED_ABOVE_LTV / 100, 2
            )
    elif inputs.program == "fha":
        loan["upfront_fee_rate"] = inputs.fha_upfront_mip_rate
        loan["annual_fee_rate"] = inputs.fha_annual_mip_rate
    elif inputs.program == "va":
        loan["upfront_fee_rate"] = va_funding_fee_rate(
            inputs.va_eligibility,
            inputs.va_first_use,
            inputs.down_payment_percent,
            inputs.va_disability_exempt,
        )
        loan["finance_upfront_fee"] = inputs.finance_funding_fee
    elif inputs.program == "usda":
        loan["upfront_fee_rate"] = inputs.usda_upfront_fee_rate
        loan["annual_fee_rate"] = inputs.usda_annual_fee_rate

    return LoanInputs(**loan)


def calculate_program_payment(inputs: ProgramPaymentInputs) -> ProgramPaymentBreakdown:
    """
    Calculate the monthly payment breakdown for a loan program.

    Args:
        inputs: Purchase and program parameters

    Returns:
        Monthly PITI breakdown including mortgage insurance
    """
    loan = build_program_loan(inputs)
    schedule = AmortizationEngine.generate_schedule(loan)

    monthly_tax = round(inputs.annual_property_tax / 12, 2)
    monthly_insurance = round(inputs.annual_home_insurance / 12, 2)
    monthly_mortgage_insurance = schedule.rows[0].insurance_premium

    return ProgramPaymentBreakdown(
        program=inputs.program,
        base_loan_amount=inputs.base_loan_amount,
        upfront_fee_rate=loan.upfront_fee_rate,
        upfront_fee=loan.upfront_fee,
        total_loan_amount=loan.financed_principal,
        down_payment_percent=round(inputs.down_payment_percent, 2),
        ltv=round(inputs.base_loan_amount / inputs.home_price * 100, 2),
        is_jumbo=inputs.base_loan_amount > inputs.conforming_loan_limit,
        monthly_principal_interest=schedule.monthly_payment,
        monthly_property_tax=monthly_tax,
        monthly_insurance=monthly_insurance,
        monthly_mortgage_insurance=monthly_mortgage_insurance,
        monthly_hoa=round(inputs.monthly_hoa, 2),
        total_monthly_payment=round(
            schedule.monthly_payment
            + monthly_tax
            + monthly_insurance
            + monthly_mortgage_insurance
            + inputs.monthly_hoa,
            2,
        ),
        total_interest=schedule.total_interest,
        total_mortgage_insurance=schedule.total_insurance_premiums,
        payoff_month=schedule.payoff_month,
    )
