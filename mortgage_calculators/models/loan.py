"""
Loan data models shared by every calculator.

These models describe the inputs to the amortization engine and the
schedules and comparison results it produces. All of them are transient:
they are built for a single calculation and never persisted.
"""

from datetime import date
from typing import Dict, List, Literal, Optional

import numpy as np
from pydantic import BaseModel, Field, ValidationInfo, field_validator

ARM_RATE_CEILING = 18.0


class LoanInputs(BaseModel):
    """Parameters of a fixed-rate loan."""

    principal: float = Field(..., ge=0.01, description="Loan principal amount")
    annual_interest_rate: float = Field(
        ..., ge=0, le=100, description="Annual interest rate (percent)"
    )
    term_months: int = Field(..., gt=0, le=600, description="Loan term in months")
    upfront_fee_rate: float = Field(
        default=0, ge=0, le=100, description="Upfront fee (percent of principal)"
    )
    finance_upfront_fee: bool = Field(
        default=True, description="Whether the upfront fee is added to the loan"
    )
    annual_fee_rate: float = Field(
        default=0, ge=0, le=100, description="Annual insurance-equivalent fee (percent)"
    )
    fee_cancel_balance: Optional[float] = Field(
        default=None,
        ge=0,
        description="Balance at or below which the annual fee stops",
    )
    extra_monthly_payment: float = Field(
        default=0, ge=0, description="Extra principal paid every month"
    )
    one_time_extra_payment: float = Field(
        default=0, ge=0, description="Single extra principal payment"
    )
    one_time_extra_month: int = Field(
        default=1, ge=1, description="Month the one-time extra payment is made"
    )
    first_payment_date: Optional[date] = Field(
        default=None, description="Date of the first payment"
    )

    @property
    def upfront_fee(self) -> float:
        """Upfront fee amount in dollars."""
        return round(self.principal * self.upfront_fee_rate / 100, 2)

    @property
    def financed_principal(self) -> float:
        """Principal actually amortized, including a financed upfront fee."""
        if self.finance_upfront_fee:
            return round(self.principal + self.upfront_fee, 2)
        return round(self.principal, 2)

    def extra_payment_for(self, period: int) -> float:
        """Extra principal scheduled for a given month."""
        extra = self.extra_monthly_payment
        if period == self.one_time_extra_month:
            extra += self.one_time_extra_payment
        return round(extra, 2)


class AmortizationRow(BaseModel):
    """A single payment of an amortization schedule."""

    period: int = Field(
        ..., ge=1, description="Payment number (1-based; the month for monthly loans)"
    )
    payment_date: Optional[date] = Field(default=None, description="Payment date")
    beginning_balance: float = Field(..., ge=0, description="Balance before payment")
    payment: float = Field(..., ge=0, description="Interest plus principal paid")
    interest: float = Field(..., ge=0, description="Interest portion")
    principal: float = Field(..., ge=0, description="Principal portion, including extra")
    extra_payment: float = Field(default=0, ge=0, description="Extra principal applied")
    insurance_premium: float = Field(
        default=0, ge=0, description="Mortgage insurance or guarantee fee"
    )
    ending_balance: float = Field(..., ge=0, description="Balance after payment")
    cumulative_interest: float = Field(..., ge=0, description="Interest paid to date")


class AmortizationSchedule(BaseModel):
    """Complete amortization schedule for a loan."""

    inputs: LoanInputs
    financed_principal: float = Field(..., gt=0)
    upfront_fee: float = Field(default=0, ge=0)
    monthly_payment: float = Field(..., ge=0, description="Scheduled P&I payment")
    rows: List[AmortizationRow]
    total_interest: float = Field(..., ge=0)
    total_principal: float = Field(..., ge=0)
    total_insurance_premiums: float = Field(default=0, ge=0)
    total_paid: float = Field(..., ge=0, description="Interest plus principal paid")
    payoff_month: int = Field(..., ge=1, description="Number of payments made")

    def yearly_totals(self) -> List[Dict[str, float]]:
        """Aggregate interest and principal by loan year."""
        periods = np.array([row.period for row in self.rows])
        interest = np.array([row.interest for row in self.rows])
        principal = np.array([row.principal for row in self.rows])
        balances = np.array([row.ending_balance for row in self.rows])

        years = (periods - 1) // 12
        starts = np.flatnonzero(np.r_[True, years[1:] != years[:-1]])
        ends = np.r_[starts[1:], len(periods)] - 1

        interest_by_year = np.add.reduceat(interest, starts)
        principal_by_year = np.add.reduceat(principal, starts)

        return [
            {
                "year": int(years[start]) + 1,
                "interest": round(float(year_interest), 2),
                "principal": round(float(year_principal), 2),
                "ending_balance": round(float(balances[end]), 2),
            }
            for start, end, year_interest, year_principal in zip(
                starts, ends, interest_by_year, principal_by_year
            )
        ]


class ARMSchedulePeriod(BaseModel):
    """Adjustment terms of an adjustable-rate mortgage."""

    initial_fixed_months: int = Field(
        ..., ge=0, description="Months before the first rate adjustment"
    )
    adjustment_interval_months: int = Field(
        default=12, gt=0, description="Months between adjustments"
    )
    initial_cap: float = Field(
        ..., ge=0, description="Maximum change at the first adjustment (points)"
    )
    periodic_cap: float = Field(
        ..., ge=0, description="Maximum change at later adjustments (points)"
    )
    lifetime_cap: float = Field(
        ..., ge=0, description="Maximum change over the life of the loan (points)"
    )
    index_rate: float = Field(..., ge=0, description="Index rate (percent)")
    margin: float = Field(..., ge=0, description="Margin added to the index (percent)")
    index_rates: List[float] = Field(
        default_factory=list,
        description="Index rate at each successive adjustment; the last value persists",
    )
    rate_ceiling: float = Field(
        default=ARM_RATE_CEILING, gt=0, le=100, description="Absolute maximum rate (percent)"
    )
    rate_floor: float = Field(default=0.0, ge=0, description="Minimum rate (percent)")

    @field_validator("index_rates")
    @classmethod
    def validate_index_rates(cls, v: List[float]) -> List[float]:
        if any(rate < 0 for rate in v):
            raise ValueError("Index rates must be non-negative")
        return v

    @field_validator("rate_floor")
    @classmethod
    def validate_rate_floor(cls, v: float, info: ValidationInfo) -> float:
        ceiling = info.data.get("rate_ceiling")
        if ceiling is not None and v > ceiling:
            raise ValueError("Rate floor must not exceed the rate ceiling")
        return v

    def index_for_adjustment(self, adjustment_number: int) -> float:
        """Index rate in effect at the n-th adjustment (1-based)."""
        if not self.index_rates:
            return self.index_rate
        position = min(adjustment_number, len(self.index_rates)) - 1
        return self.index_rates[position]


class ARMAdjustment(BaseModel):
    """A rate period of an adjustable-rate schedule."""

    start_month: int = Field(..., ge=1)
    rate: float = Field(..., ge=0, description="Annual rate for the period (percent)")
    monthly_payment: float = Field(..., ge=0)
    beginning_balance: float = Field(..., ge=0)


class ARMSchedule(BaseModel):
    """Payments of an adjustable-rate mortgage."""

    payments: List[float]
    adjustments: List[ARMAdjustment]
    rows: List[AmortizationRow]
    initial_payment: float
    max_payment: float
    max_rate: float
    total_interest: float


class ComparisonResult(BaseModel):
    """Baseline vs modified loan comparison."""

    baseline_total_interest: float
    modified_total_interest: float
    interest_saved: float
    baseline_payoff_month: int
    modified_payoff_month: int
    months_saved: int


class RefinanceComparison(ComparisonResult):
    """Comparison of the current loan against a refinanced loan."""

    current_payment: float
    new_payment: float
    monthly_savings: float
    closing_costs: float
    break_even_months: Optional[float] = Field(
        default=None, description="None when refinancing never pays for itself"
    )
    breaks_even: bool = Field(
        default=False, description="Whether monthly savings ever recover closing costs"
    )


class BiWeeklyComparison(ComparisonResult):
    """Comparison of monthly payments against true bi-weekly payments."""

    monthly_payment: float
    bi_weekly_payment: float
    payment_count: int
    effective_annual_payments: float
    payoff_date: Optional[date] = None
    tax_rate: float = Field(default=0, description="Marginal tax rate (percent)")
    baseline_tax_savings: float = 0.0
    modified_tax_savings: float = 0.0
    tax_savings_loss: float = Field(
        default=0.0, description="Interest deduction given up by paying faster"
    )
    net_benefit: float = Field(
        default=0.0, description="Interest saved less the deduction given up"
    )
    rows: List[AmortizationRow]


class AffordabilityResult(BaseModel):
    """Maximum home price for an income or a monthly budget."""

    feasible: bool
    limiting_ratio: Optional[Literal["front_end", "back_end", "budget"]] = None
    max_housing_payment: float
    max_home_price: float
    down_payment: float
    loan_amount: float
    monthly_principal_interest: float
    monthly_tax: float
    monthly_insurance: float
    monthly_hoa: float
    total_monthly_payment: float
