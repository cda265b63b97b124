"""
Debt-to-income qualification.

Lenders cap the housing payment (front-end ratio) and the housing payment
plus other debts (back-end ratio) as a share of gross income. This module
turns those limits into the income a purchase requires, and into the home
price an income or a monthly budget supports.
"""

from typing import Dict, Tuple

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from .amortization import AmortizationEngine
from .errors import InvalidInputError
from .loan import AffordabilityResult

DTI_RULES: Dict[str, Tuple[float, float]] = {
    "28/36": (0.28, 0.36),
    "31/43": (0.31, 0.43),
    "41": (0.41, 0.41),
}


def dti_limits(rule: str) -> Tuple[float, float]:
    """
    Front-end and back-end limits for a named DTI rule.

    Besides the presets, ``"front/back"`` percentages such as ``"33/45"`` are
    accepted, and a single percentage such as ``"45"`` applies the same limit
    to both ratios.
    """
    if rule in DTI_RULES:
        return DTI_RULES[rule]
    parts = rule.split("/")
    try:
        limits = [float(part) / 100 for part in parts]
    except ValueError:
        raise InvalidInputError(f"Unknown DTI rule: {rule}") from None
    if len(limits) not in (1, 2) or not all(0 < limit <= 1 for limit in limits):
        raise InvalidInputError(f"DTI rule must be one or two percentages, got {rule}")
    return limits[0], limits[-1]


class IncomeAffordabilityInputs(BaseModel):
    """Income-based affordability parameters."""

    annual_income: float = Field(..., ge=0, description="Gross annual income")
    monthly_debts: float = Field(default=0, ge=0, description="Other monthly debts")
    dti_rule: str = Field(default="28/36", description="DTI preset or single percent")
    down_payment: float = Field(default=0, ge=0, description="Cash down payment")
    annual_interest_rate: float = Field(..., ge=0, le=100)
    term_months: int = Field(default=360, gt=0, le=600)
    property_tax_rate: float = Field(default=1.5, ge=0, description="Percent of price")
    insurance_rate: float = Field(default=0.5, ge=0, description="Percent of price")
    monthly_hoa: float = Field(default=0, ge=0)


class BudgetAffordabilityInputs(BaseModel):
    """Budget-based affordability parameters."""

    monthly_budget: float = Field(..., ge=0, description="Total monthly payment")
    down_payment_percent: float = Field(default=20, ge=0, lt=100)
    annual_interest_rate: float = Field(..., ge=0, le=100)
    term_months: int = Field(default=360, gt=0, le=600)
    property_tax_rate: float = Field(default=1.5, ge=0, description="Percent of price")
    insurance_rate: float = Field(default=0.5, ge=0, description="Percent of price")
    monthly_hoa: float = Field(default=0, ge=0)


def affordability_for_income(inputs: IncomeAffordabilityInputs) -> AffordabilityResult:
    """Maximum home price supported by an annual income and a DTI rule."""
    front_end, back_end = dti_limits(inputs.dti_rule)
    return AmortizationEngine.compute_affordability(
        gross_monthly_income=inputs.annual_income / 12,
        monthly_debts=inputs.monthly_debts,
        dti_front_end_ratio=front_end,
        dti_back_end_ratio=back_end,
        down_payment=inputs.down_payment,
        annual_rate=inputs.annual_interest_rate,
        term_months=inputs.term_months,
        tax_rate=inputs.property_tax_rate,
        insurance_rate=inputs.insurance_rate,
        monthly_hoa=inputs.monthly_hoa,
    )


def affordability_for_budget(inputs: BudgetAffordabilityInputs) -> AffordabilityResult:
    """Maximum home price whose full monthly payment fits a budget."""
    return AmortizationEngine.max_home_price_for_payment(
        monthly_budget=inputs.monthly_budget,
        down_payment_percent=inputs.down_payment_percent,
        annual_rate=inputs.annual_interest_rate,
        term_months=inputs.term_months,
        tax_rate=inputs.property_tax_rate,
        insurance_rate=inputs.insurance_rate,
        monthly_hoa=inputs.monthly_hoa,
    )


class QualificationInputs(BaseModel):
    """A purchase and the DTI limits it must satisfy."""

    home_value: float = Field(..., gt=0)
    down_payment: float = Field(default=0, ge=0)
    annual_interest_rate: float = Field(..., ge=0, le=100)
    term_months: int = Field(default=360, gt=0, le=600)
    annual_taxes: float = Field(default=0, ge=0)
    annual_insurance: float = Field(default=0, ge=0)
    annual_pmi: float = Field(default=0, ge=0)
    front_end_ratio: float = Field(default=0.28, gt=0, le=1)
    back_end_ratio: float = Field(default=0.36, gt=0, le=1)
    monthly_debts: float = Field(default=0, ge=0)

    @field_validator("down_payment")
    @classmethod
    def validate_down_payment(cls, v: float, info: ValidationInfo) -> float:
        home_value = info.data.get("home_value")
        if home_value is not None and v > home_value:
            raise ValueError("Down payment must not exceed the home value")
        return v


class QualificationResult(BaseModel):
    """Income required to qualify for a purchase."""

    loan_amount: float
    monthly_principal_interest: float
    monthly_taxes: float
    monthly_insurance: float
    monthly_pmi: float
    total_housing_payment: float
    required_monthly_income: float
    required_annual_income: float
    front_end_dti: float
    back_end_dti: float
    max_monthly_debt_allowance: float
    limiting_ratio: str
    down_payment_percent: float
    ltv: float


def calculate_required_income(inputs: QualificationInputs) -> QualificationResult:
    """
    Calculate the gross income needed to qualify for a purchase.

    The required income is the larger of the income implied by the
    front-end ratio on the housing payment and by the back-end ratio on the
    housing payment plus other debts.
    """
    loan_amount = round(inputs.home_value - inputs.down_payment, 2)
    monthly_pi = (
        round(
            AmortizationEngine.compute_monthly_payment(
                loan_amount, inputs.annual_interest_rate, inputs.term_months
            ),
            2,
        )
        if loan_amount > 0
        else 0.0
    )
    monthly_taxes = round(inputs.annual_taxes / 12, 2)
    monthly_insurance = round(inputs.annual_insurance / 12, 2)
    monthly_pmi = round(inputs.annual_pmi / 12, 2)
    housing = round(monthly_pi + monthly_taxes + monthly_insurance + monthly_pmi, 2)

    income_front_end = housing / inputs.front_end_ratio
    income_back_end = (housing + inputs.monthly_debts) / inputs.back_end_ratio
    if income_front_end >= income_back_end:
        required_monthly, limiting_ratio = income_front_end, "front_end"
    else:
        required_monthly, limiting_ratio = income_back_end, "back_end"
    required_monthly = round(required_monthly, 2)

    if required_monthly > 0:
        front_end_dti = round(housing / required_monthly * 100, 2)
        back_end_dti = round((housing + inputs.monthly_debts) / required_monthly * 100, 2)
    else:
        front_end_dti = back_end_dti = 0.0

    return QualificationResult(
        loan_amount=loan_amount,
        monthly_principal_interest=monthly_pi,
        monthly_taxes=monthly_taxes,
        monthly_insurance=monthly_insurance,
        monthly_pmi=monthly_pmi,
        total_housing_payment=housing,
        required_monthly_income=required_monthly,
        required_annual_income=round(required_monthly * 12, 2),
        front_end_dti=front_end_dti,
        back_end_dti=back_end_dti,
        max_monthly_debt_allowance=round(
            required_monthly * inputs.back_end_ratio - housing, 2
        ),
        limiting_ratio=limiting_ratio,
        down_payment_percent=round(inputs.down_payment / inputs.home_value * 100, 2),
        ltv=round(loan_amount / inputs.home_value * 100, 2),
    )
