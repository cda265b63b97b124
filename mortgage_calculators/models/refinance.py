"""
Rate-and-term refinance analysis.

Compares keeping an existing loan with refinancing its remaining balance,
both over the full remaining life (via the engine's refinance comparison) and
over the period the owner expects to keep the home.
"""

from typing import List

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from .amortization import AmortizationEngine
from .errors import InvalidInputError
from .loan import AmortizationRow, LoanInputs, RefinanceComparison


class RefinanceScenario(BaseModel):
    """An existing loan and the refinance offer being considered."""

    original_loan_amount: float = Field(..., gt=0, description="Original principal")
    original_interest_rate: float = Field(..., ge=0, le=100, description="Percent")
    original_term_months: int = Field(default=360, gt=0, le=600)
    months_already_paid: int = Field(default=0, ge=0, description="Payments made")
    new_interest_rate: float = Field(..., ge=0, le=100, description="Percent")
    new_term_months: int = Field(default=360, gt=0, le=600)
    years_before_sell: int = Field(default=7, ge=1, le=50)
    discount_points: float = Field(
        default=0, ge=0, description="Points (percent of the new loan)"
    )
    origination_fee_rate: float = Field(
        default=0, ge=0, description="Origination fee (percent of the new loan)"
    )
    other_closing_costs: float = Field(default=0, ge=0)
    federal_tax_rate: float = Field(default=0, ge=0, le=100)
    state_tax_rate: float = Field(default=0, ge=0, le=100)

    @field_validator("months_already_paid")
    @classmethod
    def validate_months_already_paid(cls, v: int, info: ValidationInfo) -> int:
        term = info.data.get("original_term_months")
        if term is not None and v >= term:
            raise ValueError("Months already paid must be less than the original term")
        return v


class LoanHorizonSummary(BaseModel):
    """Cost of a loan over the expected holding period."""

    loan_amount: float
    monthly_payment: float
    balance_at_sale: float
    interest_over_period: float
    payments_over_period: float
    tax_savings: float


class RefinanceAnalysis(BaseModel):
    """Result of a refinance analysis."""

    remaining_balance: float
    remaining_months: int
    original: LoanHorizonSummary
    refinanced: LoanHorizonSummary
    discount_points_cost: float
    origination_fees_cost: float
    total_closing_costs: float
    monthly_payment_difference: float
    additional_payments: float
    balance_difference: float
    interest_savings: float
    tax_savings_loss: float
    total_benefit: float
    should_refinance: bool
    comparison: RefinanceComparison


def _summarize_horizon(
    loan: LoanInputs,
    monthly_payment: float,
    rows: List[AmortizationRow],
    months: int,
    tax_rate: float,
) -> LoanHorizonSummary:
    held = rows[:months]
    interest = round(sum(row.interest for row in held), 2)
    return LoanHorizonSummary(
        loan_amount=loan.financed_principal,
        monthly_payment=monthly_payment,
        balance_at_sale=held[-1].ending_balance,
        interest_over_period=interest,
        payments_over_period=round(sum(row.payment for row in held), 2),
        tax_savings=round(interest * tax_rate, 2),
    )


def analyze_refinance(scenario: RefinanceScenario) -> RefinanceAnalysis:
    """
    Analyze refinancing the remaining balance of an existing loan.

    Closing costs are discount points and origination fees on the new loan
    plus other fixed costs. Over the holding period the benefit is the
    interest saved, less the mortgage-interest deduction given up and the
    closing costs. Interest saved already equals the payment savings plus the
    difference in balance at sale, so the benefit is not measured on the
    balance difference alone; a refinance that lowers the payment without
    paying down faster still counts its payment savings.

    Args:
        scenario: Existing loan and refinance offer

    Returns:
        Holding-period analysis with the full-term comparison attached

    Raises:
        InvalidInputError: If the existing loan is already paid off
    """
    original = LoanInputs(
        principal=scenario.original_loan_amount,
        annual_interest_rate=scenario.original_interest_rate,
        term_months=scenario.original_term_months,
    )
    remaining_balance = AmortizationEngine.remaining_balance(
        original, scenario.months_already_paid
    )
    if remaining_balance <= 0:
        raise InvalidInputError("The existing loan is already paid off")
    remaining_months = scenario.original_term_months - scenario.months_already_paid

    current_loan = LoanInputs(
        principal=remaining_balance,
        annual_interest_rate=scenario.original_interest_rate,
        term_months=remaining_months,
    )
    new_loan = LoanInputs(
        principal=remaining_balance,
        annual_interest_rate=scenario.new_interest_rate,
        term_months=scenario.new_term_months,
    )

    discount_points_cost = round(remaining_balance * scenario.discount_points / 100, 2)
    origination_fees_cost = round(
        remaining_balance * scenario.origination_fee_rate / 100, 2
    )
    total_closing_costs = round(
        discount_points_cost + origination_fees_cost + scenario.other_closing_costs, 2
    )

    current_schedule = AmortizationEngine.generate_schedule(current_loan)
    new_schedule = AmortizationEngine.generate_schedule(new_loan)

    months_held = scenario.years_before_sell * 12
    tax_rate = (scenario.federal_tax_rate + scenario.state_tax_rate) / 100
    original_summary = _summarize_horizon(
        current_loan,
        current_schedule.monthly_payment,
        current_schedule.rows,
        months_held,
        tax_rate,
    )
    refinanced_summary = _summarize_horizon(
        new_loan, new_schedule.monthly_payment, new_schedule.rows, months_held, tax_rate
    )

    interest_savings = round(
        original_summary.interest_over_period - refinanced_summary.interest_over_period,
        2,
    )
    tax_savings_loss = round(
        original_summary.tax_savings - refinanced_summary.tax_savings, 2
    )
    total_benefit = round(interest_savings - tax_savings_loss - total_closing_costs, 2)

    return RefinanceAnalysis(
        remaining_balance=remaining_balance,
        remaining_months=remaining_months,
        original=original_summary,
        refinanced=refinanced_summary,
        discount_points_cost=discount_points_cost,
        origination_fees_cost=origination_fees_cost,
        total_closing_costs=total_closing_costs,
        monthly_payment_difference=round(
            new_schedule.monthly_payment - current_schedule.monthly_payment, 2
        ),
        additional_payments=round(
            refinanced_summary.payments_over_period
            - original_summary.payments_over_period,
            2,
        ),
        balance_difference=round(
            original_summary.balance_at_sale - refinanced_summary.balance_at_sale, 2
        ),
        interest_savings=interest_savings,
        tax_savings_loss=tax_savings_loss,
        total_benefit=total_benefit,
        should_refinance=total_benefit > 0,
        comparison=AmortizationEngine.compare_refinance(
            current_loan, new_loan, total_closing_costs
        ),
    )
