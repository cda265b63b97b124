"""
Home equity calculators.

Covers cash-out refinancing, consolidating consumer debt into a HELOC, and
the 80/10/10 piggyback alternative to a single loan with PMI.
"""

import math
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from .amortization import AmortizationEngine
from .errors import InvalidInputError
from .loan import AmortizationSchedule, LoanInputs

MAX_CASH_OUT_LTV = 0.80


class CashOutRefinanceInputs(BaseModel):
    """Parameters of a cash-out refinance."""

    home_value: float = Field(..., gt=0, description="Current home value")
    current_balance: float = Field(default=0, ge=0, description="Mortgage balance")
    desired_cash_out: float = Field(default=0, ge=0, description="Cash requested")
    annual_interest_rate: float = Field(..., ge=0, le=100, description="Percent")
    term_months: int = Field(default=360, gt=0, le=600)
    refinance_fees: float = Field(default=0, ge=0)
    roll_fees_into_loan: bool = False
    max_ltv: float = Field(
        default=MAX_CASH_OUT_LTV, gt=0, le=1, description="Maximum loan-to-value"
    )


class CashOutRefinanceResult(BaseModel):
    """Result of a cash-out refinance."""

    equity: float
    max_loan_amount: float
    max_cash_out: float
    actual_cash_out: float
    net_cash_out: float
    new_loan_balance: float
    combined_ltv: float
    monthly_payment: float
    total_interest: float


def calculate_cash_out_refinance(inputs: CashOutRefinanceInputs) -> CashOutRefinanceResult:
    """
    Calculate how much cash a refinance can release and what it costs.

    The new loan may not exceed ``max_ltv`` of the home value, so the cash
    out is capped at that limit less the current balance.
    """
    max_loan_amount = round(inputs.home_value * inputs.max_ltv, 2)
    max_cash_out = max(0.0, round(max_loan_amount - inputs.current_balance, 2))
    actual_cash_out = min(inputs.desired_cash_out, max_cash_out)

    new_loan_balance = inputs.current_balance + actual_cash_out
    if inputs.roll_fees_into_loan:
        new_loan_balance += inputs.refinance_fees
        net_cash_out = actual_cash_out
    else:
        net_cash_out = max(0.0, actual_cash_out - inputs.refinance_fees)
    new_loan_balance = round(new_loan_balance, 2)

    monthly_payment = 0.0
    total_interest = 0.0
    if new_loan_balance > 0:
        schedule = AmortizationEngine.generate_schedule(
            LoanInputs(
                principal=new_loan_balance,
                annual_interest_rate=inputs.annual_interest_rate,
                term_months=inputs.term_months,
            )
        )
        monthly_payment = schedule.monthly_payment
        total_interest = schedule.total_interest

    return CashOutRefinanceResult(
        equity=round(inputs.home_value - inputs.current_balance, 2),
        max_loan_amount=max_loan_amount,
        max_cash_out=max_cash_out,
        actual_cash_out=round(actual_cash_out, 2),
        net_cash_out=round(net_cash_out, 2),
        new_loan_balance=new_loan_balance,
        combined_ltv=round(new_loan_balance / inputs.home_value * 100, 2),
        monthly_payment=monthly_payment,
        total_interest=total_interest,
    )


class Debt(BaseModel):
    """An existing consumer debt."""

    name: str = Field(..., min_length=1, description="Debt name")
    balance: float = Field(..., ge=0, description="Outstanding balance")
    monthly_payment: float = Field(..., ge=0, description="Monthly payment")
    interest_rate: float = Field(..., ge=0, le=100, description="Annual rate (percent)")


class DebtPayoff(BaseModel):
    """Payoff of a single debt at its current payment."""

    name: str
    months_to_payoff: Optional[int] = Field(
        default=None, description="None when the payment never covers the interest"
    )
    total_interest: Optional[float] = None


class HelocInputs(BaseModel):
    """Debts to consolidate and the HELOC terms."""

    debts: List[Debt] = Field(..., min_length=1)
    heloc_interest_rate: float = Field(..., ge=0, le=100, description="Percent")
    heloc_term_months: int = Field(default=180, gt=0, le=600)
    heloc_closing_costs: float = Field(default=0, ge=0)
    tax_rate: float = Field(
        default=0, ge=0, le=100, description="Marginal rate for the interest deduction"
    )


class HelocComparison(BaseModel):
    """Existing debts vs a consolidation HELOC."""

    payoffs: List[DebtPayoff]
    total_debt_balance: float
    existing_monthly_payment: float
    weighted_interest_rate: float
    existing_months_to_payoff: Optional[int]
    existing_total_interest: Optional[float]
    existing_total_cost: Optional[float]
    heloc_loan_amount: float
    heloc_monthly_payment: float
    heloc_total_interest: float
    heloc_tax_savings: float
    heloc_total_cost: float
    monthly_savings: float
    total_savings: Optional[float]
    better_option: Literal["heloc", "existing"]


def debt_payoff(debt: Debt) -> DebtPayoff:
    """Months and interest needed to retire a debt at its current payment."""
    if debt.balance == 0:
        return DebtPayoff(name=debt.name, months_to_payoff=0, total_interest=0.0)
    if debt.monthly_payment == 0:
        return DebtPayoff(name=debt.name)

    monthly_rate = debt.interest_rate / 100 / 12
    if monthly_rate == 0:
        months = math.ceil(debt.balance / debt.monthly_payment)
        return DebtPayoff(name=debt.name, months_to_payoff=months, total_interest=0.0)

    coverage = 1 - debt.balance * monthly_rate / debt.monthly_payment
    if coverage <= 0:
        return DebtPayoff(name=debt.name)

    months = math.ceil(-math.log(coverage) / math.log(1 + monthly_rate))
    total_interest = round(debt.monthly_payment * months - debt.balance, 2)
    return DebtPayoff(name=debt.name, months_to_payoff=months, total_interest=total_interest)


def compare_heloc_consolidation(inputs: HelocInputs) -> HelocComparison:
    """
    Compare paying debts as they are with consolidating them into a HELOC.

    HELOC interest is treated as deductible at ``tax_rate``; consumer debt
    interest is not. When a debt's payment never covers its interest, the
    existing totals are None and the HELOC is the better option.

    Raises:
        InvalidInputError: If there is no balance to consolidate
    """
    total_balance = round(sum(debt.balance for debt in inputs.debts), 2)
    if total_balance <= 0:
        raise InvalidInputError("There is no debt balance to consolidate")

    existing_monthly = round(sum(debt.monthly_payment for debt in inputs.debts), 2)
    weighted_rate = round(
        sum(debt.balance * debt.interest_rate for debt in inputs.debts) / total_balance, 4
    )
    payoffs = [debt_payoff(debt) for debt in inputs.debts]

    if all(payoff.months_to_payoff is not None for payoff in payoffs):
        existing_months: Optional[int] = max(payoff.months_to_payoff for payoff in payoffs)
        existing_interest: Optional[float] = round(
            sum(payoff.total_interest for payoff in payoffs), 2
        )
        existing_cost: Optional[float] = round(total_balance + existing_interest, 2)
    else:
        existing_months = existing_interest = existing_cost = None

    heloc = AmortizationEngine.generate_schedule(
        LoanInputs(
            principal=total_balance,
            annual_interest_rate=inputs.heloc_interest_rate,
            term_months=inputs.heloc_term_months,
        )
    )
    tax_savings = round(heloc.total_interest * inputs.tax_rate / 100, 2)
    heloc_cost = round(heloc.total_paid + inputs.heloc_closing_costs - tax_savings, 2)

    total_savings = (
        round(existing_cost - heloc_cost, 2) if existing_cost is not None else None
    )
    better_option = "heloc" if total_savings is None or total_savings > 0 else "existing"

    return HelocComparison(
        payoffs=payoffs,
        total_debt_balance=total_balance,
        existing_monthly_payment=existing_monthly,
        weighted_interest_rate=weighted_rate,
        existing_months_to_payoff=existing_months,
        existing_total_interest=existing_interest,
        existing_total_cost=existing_cost,
        heloc_loan_amount=total_balance,
        heloc_monthly_payment=heloc.monthly_payment,
        heloc_total_interest=heloc.total_interest,
        heloc_tax_savings=tax_savings,
        heloc_total_cost=heloc_cost,
        monthly_savings=round(existing_monthly - heloc.monthly_payment, 2),
        total_savings=total_savings,
        better_option=better_option,
    )


class MortgageOffer(BaseModel):
    """Rate, term and costs of one mortgage offer."""

    annual_interest_rate: float = Field(..., ge=0, le=100, description="Percent")
    term_months: int = Field(default=360, gt=0, le=600)
    discount_points: float = Field(default=0, ge=0, description="Percent of the loan")
    closing_costs: float = Field(default=0, ge=0)


class PiggybackInputs(BaseModel):
    """A single loan with PMI vs an 80% first mortgage plus a second mortgage."""

    home_value: float = Field(..., gt=0)
    down_payment: float = Field(default=0, ge=0)
    annual_pmi_rate: float = Field(default=0.5, ge=0, description="Percent")
    pmi_loan: MortgageOffer
    first_mortgage: MortgageOffer
    second_mortgage: MortgageOffer
    first_mortgage_ltv: float = Field(default=0.80, gt=0, le=1)

    @field_validator("down_payment")
    @classmethod
    def validate_down_payment(cls, v: float, info: ValidationInfo) -> float:
        home_value = info.data.get("home_value")
        if home_value is not None and v >= home_value:
            raise ValueError("Down payment must be less than the home value")
        return v


class OfferCost(BaseModel):
    """Lifetime cost of a mortgage offer."""

    loan_amount: float
    monthly_payment: float
    points_cost: float
    total_closing: float
    total_interest: float
    total_mortgage_insurance: float = 0.0
    payoff_month: int = 0


class PiggybackComparison(BaseModel):
    """Result of the PMI vs piggyback comparison."""

    pmi: OfferCost
    first_mortgage: OfferCost
    second_mortgage: OfferCost
    pmi_monthly_payment: float
    piggyback_monthly_payment: float
    pmi_total_cost: float
    piggyback_total_cost: float
    savings: float
    better_option: Literal["piggyback", "pmi"]


def _offer_cost(
    amount: float, offer: MortgageOffer, schedule: Optional[AmortizationSchedule]
) -> OfferCost:
    points_cost = round(amount * offer.discount_points / 100, 2)
    if schedule is None:
        return OfferCost(
            loan_amount=0.0,
            monthly_payment=0.0,
            points_cost=0.0,
            total_closing=0.0,
            total_interest=0.0,
        )
    return OfferCost(
        loan_amount=round(amount, 2),
        monthly_payment=round(schedule.monthly_payment + schedule.rows[0].insurance_premium, 2),
        points_cost=points_cost,
        total_closing=round(points_cost + offer.closing_costs, 2),
        total_interest=schedule.total_interest,
        total_mortgage_insurance=schedule.total_insurance_premiums,
        payoff_month=schedule.payoff_month,
    )


def compare_piggyback(inputs: PiggybackInputs) -> PiggybackComparison:
    """
    Compare one loan with PMI against an 80% first plus a second mortgage.

    PMI is charged until the balance reaches 80% of the home value. Total
    cost counts principal, interest, PMI, points, closing costs and the down
    payment.
    """
    loan_amount = round(inputs.home_value - inputs.down_payment, 2)
    first_amount = round(min(inputs.home_value * inputs.first_mortgage_ltv, loan_amount), 2)
    second_amount = round(loan_amount - first_amount, 2)
    cancel_balance = round(inputs.home_value * inputs.first_mortgage_ltv, 2)

    needs_pmi = loan_amount > cancel_balance
    pmi_schedule = AmortizationEngine.generate_schedule(
        LoanInputs(
            principal=loan_amount,
            annual_interest_rate=inputs.pmi_loan.annual_interest_rate,
            term_months=inputs.pmi_loan.term_months,
            annual_fee_rate=inputs.annual_pmi_rate if needs_pmi else 0,
            fee_cancel_balance=cancel_balance,
        )
    )
    first_schedule = AmortizationEngine.generate_schedule(
        LoanInputs(
            principal=first_amount,
            annual_interest_rate=inputs.first_mortgage.annual_interest_rate,
            term_months=inputs.first_mortgage.term_months,
        )
    )
    second_schedule = (
        AmortizationEngine.generate_schedule(
            LoanInputs(
                principal=second_amount,
                annual_interest_rate=inputs.second_mortgage.annual_interest_rate,
                term_months=inputs.second_mortgage.term_months,
            )
        )
        if second_amount > 0
        else None
    )

    pmi = _offer_cost(loan_amount, inputs.pmi_loan, pmi_schedule)
    first = _offer_cost(first_amount, inputs.first_mortgage, first_schedule)
    second = _offer_cost(second_amount, inputs.second_mortgage, second_schedule)

    pmi_total = round(
        pmi_schedule.total_paid
        + pmi.total_mortgage_insurance
        + pmi.total_closing
        + inputs.down_payment,
        2,
    )
    piggyback_total = round(
        first_schedule.total_paid
        + (second_schedule.total_paid if second_schedule else 0.0)
        + first.total_closing
        + second.total_closing
        + inputs.down_payment,
        2,
    )
    savings = round(pmi_total - piggyback_total, 2)

    return PiggybackComparison(
        pmi=pmi,
        first_mortgage=first,
        second_mortgage=second,
        pmi_monthly_payment=pmi.monthly_payment,
        piggyback_monthly_payment=round(first.monthly_payment + second.monthly_payment, 2),
        pmi_total_cost=pmi_total,
        piggyback_total_cost=piggyback_total,
        savings=abs(savings),
        better_option="piggyback" if savings > 0 else "pmi",
    )
