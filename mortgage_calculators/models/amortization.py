"""
Loan amortization engine.

This module holds the financial core shared by every calculator: monthly
payments, amortization schedules with extra payments and insurance premiums,
adjustable-rate schedules, refinance and bi-weekly comparisons, and
affordability. Every function is pure and deterministic; monetary values are
rounded to the cent after each step so schedules always end at zero.
"""

import calendar
import math
from datetime import date, timedelta
from itertools import islice
from typing import Iterator, List, Optional

from .errors import InvalidInputError
from .loan import (
    AffordabilityResult,
    AmortizationRow,
    AmortizationSchedule,
    ARMAdjustment,
    ARMSchedule,
    ARMSchedulePeriod,
    BiWeeklyComparison,
    ComparisonResult,
    LoanInputs,
    RefinanceComparison,
)

BI_WEEKLY_DAYS = 14
BI_WEEKLY_PAYMENTS_PER_YEAR = 26
DAYS_PER_YEAR = 365


def add_months(start: date, months: int) -> date:
    """Shift a date by whole months, clamping the day to the month length."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


class AmortizationEngine:
    """Calculator for loan payments, schedules and comparisons."""

    @staticmethod
    def compute_monthly_payment(
        principal: float, annual_rate: float, term_months: int
    ) -> float:
        """
        Calculate the monthly payment using the standard amortization formula.

        Args:
            principal: Loan principal amount
            annual_rate: Annual interest rate as a percent (e.g., 6.5 for 6.5%)
            term_months: Loan term in months

        Returns:
            Unrounded monthly principal and interest payment

        Raises:
            InvalidInputError: If principal or term is not positive, or the
                rate is negative
        """
        if principal <= 0:
            raise InvalidInputError("Principal must be greater than zero")
        if term_months <= 0:
            raise InvalidInputError("Term must be at least one month")
        if annual_rate < 0:
            raise InvalidInputError("Interest rate must not be negative")

        monthly_rate = annual_rate / 12 / 100

        if monthly_rate == 0:
            return principal / term_months

        growth = (1 + monthly_rate) ** term_months
        return principal * (monthly_rate * growth) / (growth - 1)

    @staticmethod
    def adjust_rate(
        previous_rate: float,
        initial_rate: float,
        target_rate: float,
        cap: float,
        arm: ARMSchedulePeriod,
    ) -> float:
        """
        Apply the adjustment caps to a fully indexed rate.

        Args:
            previous_rate: Rate in effect before the adjustment
            initial_rate: Rate at origination
            target_rate: Index plus margin
            cap: Initial or periodic cap for this adjustment
            arm: Adjustment terms providing the lifetime cap and bounds

        Returns:
            The new annual rate (percent)
        """
        rate = min(max(target_rate, previous_rate - cap), previous_rate + cap)
        rate = min(
            max(rate, initial_rate - arm.lifetime_cap), initial_rate + arm.lifetime_cap
        )
        rate = min(max(rate, arm.rate_floor), arm.rate_ceiling)
        return round(max(rate, 0.0), 4)

    @staticmethod
    def _is_adjustment_month(period: int, arm: ARMSchedulePeriod) -> bool:
        first_adjustment = (
            arm.initial_fixed_months or arm.adjustment_interval_months
        ) + 1
        if period < first_adjustment:
            return False
        return (period - first_adjustment) % arm.adjustment_interval_months == 0

    @staticmethod
    def _amortize(
        inputs: LoanInputs,
        arm: Optional[ARMSchedulePeriod] = None,
        adjustments: Optional[List[ARMAdjustment]] = None,
    ) -> Iterator[AmortizationRow]:
        """Yield monthly rows until the balance or the term is exhausted."""
        term = inputs.term_months
        balance = inputs.financed_principal
        initial_rate = inputs.annual_interest_rate
        rate = initial_rate
        payment = round(
            AmortizationEngine.compute_monthly_payment(balance, rate, term), 2
        )
        if adjustments is not None:
            adjustments.append(
                ARMAdjustment(
                    start_month=1,
                    rate=rate,
                    monthly_payment=payment,
                    beginning_balance=balance,
                )
            )

        cumulative_interest = 0.0
        adjustment_number = 0
        premium = 0.0

        for period in range(1, term + 1):
            if balance <= 0:
                break

            if arm is not None and AmortizationEngine._is_adjustment_month(
                period, arm
            ):
                adjustment_number += 1
                cap = arm.initial_cap if adjustment_number == 1 else arm.periodic_cap
                target = arm.index_for_adjustment(adjustment_number) + arm.margin
                rate = AmortizationEngine.adjust_rate(
                    rate, initial_rate, target, cap, arm
                )
                payment = round(
                    AmortizationEngine.compute_monthly_payment(
                        balance, rate, term - period + 1
                    ),
                    2,
                )
                if adjustments is not None:
                    adjustments.append(
                        ARMAdjustment(
                            start_month=period,
                            rate=rate,
                            monthly_payment=payment,
                            beginning_balance=balance,
                        )
                    )

            # Annual premiums are re-based on the balance at each loan anniversary
            if inputs.annual_fee_rate > 0 and (period - 1) % 12 == 0:
                premium = round(balance * inputs.annual_fee_rate / 100 / 12, 2)
            if (
                inputs.fee_cancel_balance is not None
                and balance <= inputs.fee_cancel_balance
            ):
                premium = 0.0

            interest = round(balance * rate / 12 / 100, 2)
            scheduled_principal = max(0.0, round(payment - interest, 2))
            extra = inputs.extra_payment_for(period)
            principal = round(scheduled_principal + extra, 2)

            # The last scheduled payment absorbs the rounding remainder
            if period == term or principal >= balance:
                principal = balance
            applied_extra = min(extra, max(0.0, round(principal - scheduled_principal, 2)))

            ending_balance = round(balance - principal, 2)
            cumulative_interest = round(cumulative_interest + interest, 2)

            yield AmortizationRow(
                period=period,
                payment_date=(
                    add_months(inputs.first_payment_date, period - 1)
                    if inputs.first_payment_date
                    else None
                ),
                beginning_balance=balance,
                payment=round(interest + principal, 2),
                interest=interest,
                principal=principal,
                extra_payment=applied_extra,
                insurance_premium=premium,
                ending_balance=ending_balance,
                cumulative_interest=cumulative_interest,
            )

            balance = ending_balance

    @staticmethod
    def iter_schedule(inputs: LoanInputs) -> Iterator[AmortizationRow]:
        """
        Iterate the monthly amortization rows of a fixed-rate loan.

        Each call starts a fresh iteration from the first payment.
        """
        return AmortizationEngine._amortize(inputs)

    @staticmethod
    def _build_schedule(
        inputs: LoanInputs, rows: List[AmortizationRow], monthly_payment: float
    ) -> AmortizationSchedule:
        total_principal = round(sum(row.principal for row in rows), 2)
        total_interest = rows[-1].cumulative_interest
        return AmortizationSchedule(
            inputs=inputs,
            financed_principal=inputs.financed_principal,
            upfront_fee=inputs.upfront_fee,
            monthly_payment=monthly_payment,
            rows=rows,
            total_interest=total_interest,
            total_principal=total_principal,
            total_insurance_premiums=round(
                sum(row.insurance_premium for row in rows), 2
            ),
            total_paid=round(total_interest + total_principal, 2),
            payoff_month=len(rows),
        )

    @staticmethod
    def generate_schedule(inputs: LoanInputs) -> AmortizationSchedule:
        """
        Generate a complete amortization schedule for a fixed-rate loan.

        Extra monthly and one-time payments are applied to principal in the
        month they are due, so the schedule ends early once the balance
        reaches zero.

        Args:
            inputs: Loan parameters

        Returns:
            Complete amortization schedule
        """
        monthly_payment = round(
            AmortizationEngine.compute_monthly_payment(
                inputs.financed_principal,
                inputs.annual_interest_rate,
                inputs.term_months,
            ),
            2,
        )
        rows = list(AmortizationEngine.iter_schedule(inputs))
        return AmortizationEngine._build_schedule(inputs, rows, monthly_payment)

    @staticmethod
    def remaining_balance(inputs: LoanInputs, payments_made: int) -> float:
        """Balance left after a number of scheduled payments."""
        if payments_made < 0:
            raise InvalidInputError("Payments made must not be negative")
        if payments_made == 0:
            return inputs.financed_principal

        balance = inputs.financed_principal
        for row in islice(AmortizationEngine.iter_schedule(inputs), payments_made):
            balance = row.ending_balance
        return balance

    @staticmethod
    def _without_extra_payments(inputs: LoanInputs) -> LoanInputs:
        return inputs.model_copy(
            update={"extra_monthly_payment": 0, "one_time_extra_payment": 0}
        )

    @staticmethod
    def compare_extra_payments(inputs: LoanInputs) -> ComparisonResult:
        """
        Compare a loan with extra payments against its standard schedule.

        Args:
            inputs: Loan parameters including the extra monthly and one-time
                payments

        Returns:
            Interest and time saved by the extra payments
        """
        baseline = AmortizationEngine.generate_schedule(
            AmortizationEngine._without_extra_payments(inputs)
        )
        modified = AmortizationEngine.generate_schedule(inputs)

        return ComparisonResult(
            baseline_total_interest=baseline.total_interest,
            modified_total_interest=modified.total_interest,
            interest_saved=round(baseline.total_interest - modified.total_interest, 2),
            baseline_payoff_month=baseline.payoff_month,
            modified_payoff_month=modified.payoff_month,
            months_saved=baseline.payoff_month - modified.payoff_month,
        )

    @staticmethod
    def compute_arm_payment(
        inputs: LoanInputs, arm: ARMSchedulePeriod
    ) -> ARMSchedule:
        """
        Generate the payments of an adjustable-rate mortgage.

        The initial rate applies during the fixed period. At each adjustment
        the rate moves toward index plus margin, limited by the initial or
        periodic cap, the lifetime cap, and the absolute floor and ceiling.
        The payment is then re-amortized over the remaining balance and term.

        Args:
            inputs: Loan parameters; the interest rate is the initial rate
            arm: Adjustment terms

        Returns:
            Month-by-month payments, rate periods and rows
        """
        adjustments: List[ARMAdjustment] = []
        rows = list(AmortizationEngine._amortize(inputs, arm, adjustments))
        payments = [row.payment for row in rows]

        return ARMSchedule(
            payments=payments,
            adjustments=adjustments,
            rows=rows,
            initial_payment=adjustments[0].monthly_payment,
            max_payment=max(payments),
            max_rate=max(adjustment.rate for adjustment in adjustments),
            total_interest=rows[-1].cumulative_interest,
        )

    @staticmethod
    def compare_refinance(
        current_loan: LoanInputs,
        new_loan: LoanInputs,
        closing_costs: float,
        net_of_closing_costs: bool = True,
    ) -> RefinanceComparison:
        """
        Compare the remaining current loan with a refinanced loan.

        Args:
            current_loan: Remaining balance, rate and term of the current loan
            new_loan: Terms of the new loan
            closing_costs: Cost of refinancing
            net_of_closing_costs: Subtract closing costs from interest saved

        Returns:
            Comparison including the break-even point; ``break_even_months``
            is None when the new payment is not lower
        """
        if closing_costs < 0:
            raise InvalidInputError("Closing costs must not be negative")

        baseline = AmortizationEngine.generate_schedule(current_loan)
        modified = AmortizationEngine.generate_schedule(new_loan)

        monthly_savings = round(baseline.monthly_payment - modified.monthly_payment, 2)
        if monthly_savings > 0:
            break_even_months: Optional[float] = round(
                closing_costs / monthly_savings, 2
            )
        else:
            break_even_months = None

        interest_saved = baseline.total_interest - modified.total_interest
        if net_of_closing_costs:
            interest_saved -= closing_costs

        return RefinanceComparison(
            baseline_total_interest=baseline.total_interest,
            modified_total_interest=modified.total_interest,
            interest_saved=round(interest_saved, 2),
            baseline_payoff_month=baseline.payoff_month,
            modified_payoff_month=modified.payoff_month,
            months_saved=baseline.payoff_month - modified.payoff_month,
            current_payment=baseline.monthly_payment,
            new_payment=modified.monthly_payment,
            monthly_savings=monthly_savings,
            closing_costs=round(closing_costs, 2),
            break_even_months=break_even_months,
            breaks_even=break_even_months is not None,
        )

    @staticmethod
    def compute_bi_weekly_schedule(
        inputs: LoanInputs, tax_rate: float = 0.0
    ) -> BiWeeklyComparison:
        """
        Compare monthly payments with true bi-weekly payments.

        Half of the monthly payment is paid every 14 days and interest
        accrues for the 14 days between payments, giving 26 half payments
        (13 monthly payments) a year. Extra payments and insurance premiums
        are left out of both schedules.

        Paying less interest also shrinks the mortgage-interest deduction, so
        the net benefit is the interest saved less the deduction given up at
        the borrower's marginal tax rate.

        Args:
            inputs: Loan parameters
            tax_rate: Marginal tax rate (percent) for the interest deduction

        Returns:
            Comparison against the monthly schedule with bi-weekly rows
        """
        if not 0 <= tax_rate <= 100:
            raise InvalidInputError("Tax rate must be between 0 and 100")

        baseline = AmortizationEngine.generate_schedule(
            AmortizationEngine._without_extra_payments(inputs)
        )

        monthly_payment = baseline.monthly_payment
        bi_weekly_payment = round(monthly_payment / 2, 2)
        period_rate = inputs.annual_interest_rate / 100 * BI_WEEKLY_DAYS / DAYS_PER_YEAR

        rows: List[AmortizationRow] = []
        balance = inputs.financed_principal
        cumulative_interest = 0.0
        period = 0

        while balance > 0:
            period += 1
            interest = round(balance * period_rate, 2)
            principal = min(round(bi_weekly_payment - interest, 2), balance)
            if principal <= 0:
                raise InvalidInputError("Bi-weekly payment does not cover the interest")
            ending_balance = round(balance - principal, 2)
            cumulative_interest = round(cumulative_interest + interest, 2)

            rows.append(
                AmortizationRow(
                    period=period,
                    payment_date=(
                        inputs.first_payment_date
                        + timedelta(days=BI_WEEKLY_DAYS * (period - 1))
                        if inputs.first_payment_date
                        else None
                    ),
                    beginning_balance=balance,
                    payment=round(interest + principal, 2),
                    interest=interest,
                    principal=principal,
                    ending_balance=ending_balance,
                    cumulative_interest=cumulative_interest,
                )
            )
            balance = ending_balance

        days_to_payoff = len(rows) * BI_WEEKLY_DAYS
        modified_payoff_month = math.ceil(days_to_payoff / (DAYS_PER_YEAR / 12))
        payoff_date = (
            inputs.first_payment_date + timedelta(days=days_to_payoff - BI_WEEKLY_DAYS)
            if inputs.first_payment_date
            else None
        )

        interest_saved = round(baseline.total_interest - cumulative_interest, 2)
        baseline_tax_savings = round(baseline.total_interest * tax_rate / 100, 2)
        modified_tax_savings = round(cumulative_interest * tax_rate / 100, 2)
        tax_savings_loss = round(baseline_tax_savings - modified_tax_savings, 2)

        return BiWeeklyComparison(
            baseline_total_interest=baseline.total_interest,
            modified_total_interest=cumulative_interest,
            interest_saved=interest_saved,
            baseline_payoff_month=baseline.payoff_month,
            modified_payoff_month=modified_payoff_month,
            months_saved=baseline.payoff_month - modified_payoff_month,
            monthly_payment=monthly_payment,
            bi_weekly_payment=bi_weekly_payment,
            payment_count=len(rows),
            effective_annual_payments=round(
                bi_weekly_payment * BI_WEEKLY_PAYMENTS_PER_YEAR / monthly_payment, 2
            ),
            payoff_date=payoff_date,
            tax_rate=tax_rate,
            baseline_tax_savings=baseline_tax_savings,
            modified_tax_savings=modified_tax_savings,
            tax_savings_loss=tax_savings_loss,
            net_benefit=round(interest_saved - tax_savings_loss, 2),
            rows=rows,
        )

    @staticmethod
    def _solve_home_price(
        max_payment: float,
        annual_rate: float,
        term_months: int,
        tax_rate: float,
        insurance_rate: float,
        monthly_hoa: float,
        limiting_ratio: str,
        down_payment: Optional[float] = None,
        down_payment_percent: Optional[float] = None,
    ) -> AffordabilityResult:
        # Payment per dollar borrowed and carrying cost per dollar of price
        factor = AmortizationEngine.compute_monthly_payment(1.0, annual_rate, term_months)
        carrying = (tax_rate + insurance_rate) / 100 / 12
        available = max_payment - monthly_hoa

        if available <= 0:
            return AmortizationEngine._infeasible(max(max_payment, 0.0), limiting_ratio)

        if down_payment_percent is not None:
            share = down_payment_percent / 100
            home_price = available / (factor * (1 - share) + carrying)
            loan_amount = math.floor(home_price * (1 - share) * 100) / 100
            down_payment = round(home_price * share, 2)
        else:
            down_payment = down_payment or 0.0
            loan_amount = (available - carrying * down_payment) / (factor + carrying)
            if loan_amount > 0:
                loan_amount = math.floor(loan_amount * 100) / 100
            else:
                # The down payment alone buys more house than taxes allow
                loan_amount = 0.0
                if carrying > 0:
                    down_payment = min(down_payment, available / carrying)

        home_price = round(loan_amount + down_payment, 2)
        if home_price <= 0:
            return AmortizationEngine._infeasible(max_payment, limiting_ratio)

        monthly_pi = (
            round(
                AmortizationEngine.compute_monthly_payment(
                    loan_amount, annual_rate, term_months
                ),
                2,
            )
            if loan_amount > 0
            else 0.0
        )
        monthly_tax = round(home_price * tax_rate / 100 / 12, 2)
        monthly_insurance = round(home_price * insurance_rate / 100 / 12, 2)

        return AffordabilityResult(
            feasible=True,
            limiting_ratio=limiting_ratio,
            max_housing_payment=round(max_payment, 2),
            max_home_price=home_price,
            down_payment=round(down_payment, 2),
            loan_amount=loan_amount,
            monthly_principal_interest=monthly_pi,
            monthly_tax=monthly_tax,
            monthly_insurance=monthly_insurance,
            monthly_hoa=round(monthly_hoa, 2),
            total_monthly_payment=round(
                monthly_pi + monthly_tax + monthly_insurance + monthly_hoa, 2
            ),
        )

    @staticmethod
    def _infeasible(max_payment: float, limiting_ratio: str) -> AffordabilityResult:
        return AffordabilityResult(
            feasible=False,
            limiting_ratio=limiting_ratio,
            max_housing_payment=round(max_payment, 2),
            max_home_price=0.0,
            down_payment=0.0,
            loan_amount=0.0,
            monthly_principal_interest=0.0,
            monthly_tax=0.0,
            monthly_insurance=0.0,
            monthly_hoa=0.0,
            total_monthly_payment=0.0,
        )

    @staticmethod
    def _validate_housing_costs(
        annual_rate: float, term_months: int, tax_rate: float, insurance_rate: float
    ) -> None:
        if annual_rate < 0:
            raise InvalidInputError("Interest rate must not be negative")
        if term_months <= 0:
            raise InvalidInputError("Term must be at least one month")
        if tax_rate < 0 or insurance_rate < 0:
            raise InvalidInputError("Tax and insurance rates must not be negative")

    @staticmethod
    def compute_affordability(
        gross_monthly_income: float,
        monthly_debts: float,
        dti_front_end_ratio: float,
        dti_back_end_ratio: float,
        down_payment: float,
        annual_rate: float,
        term_months: int,
        tax_rate: float,
        insurance_rate: float,
        monthly_hoa: float = 0.0,
    ) -> AffordabilityResult:
        """
        Find the most expensive home the borrower qualifies for.

        The housing budget is the lower of the front-end limit and the
        back-end limit net of existing debts. Taxes and insurance scale with
        the home price, so the price is solved in closed form from
        ``P * f + (P + down) * c + hoa = budget``.

        Args:
            gross_monthly_income: Gross monthly income
            monthly_debts: Existing monthly debt payments
            dti_front_end_ratio: Housing-to-income limit (e.g., 0.28)
            dti_back_end_ratio: Total-debt-to-income limit (e.g., 0.36)
            down_payment: Cash down payment
            annual_rate: Annual interest rate (percent)
            term_months: Loan term in months
            tax_rate: Annual property tax (percent of home price)
            insurance_rate: Annual home insurance (percent of home price)
            monthly_hoa: Monthly HOA dues

        Returns:
            Affordability result; ``feasible`` is False when existing debts
            leave no housing budget
        """
        if gross_monthly_income < 0 or monthly_debts < 0 or down_payment < 0:
            raise InvalidInputError("Income, debts and down payment must not be negative")
        if not (0 < dti_front_end_ratio <= 1 and 0 < dti_back_end_ratio <= 1):
            raise InvalidInputError("DTI ratios must be between 0 and 1")
        if monthly_hoa < 0:
            raise InvalidInputError("HOA dues must not be negative")
        AmortizationEngine._validate_housing_costs(
            annual_rate, term_months, tax_rate, insurance_rate
        )

        front_end_budget = gross_monthly_income * dti_front_end_ratio
        back_end_budget = gross_monthly_income * dti_back_end_ratio - monthly_debts

        if back_end_budget <= 0:
            return AmortizationEngine._infeasible(0.0, "back_end")

        if front_end_budget <= back_end_budget:
            max_payment, limiting_ratio = front_end_budget, "front_end"
        else:
            max_payment, limiting_ratio = back_end_budget, "back_end"

        return AmortizationEngine._solve_home_price(
            max_payment,
            annual_rate,
            term_months,
            tax_rate,
            insurance_rate,
            monthly_hoa,
            limiting_ratio,
            down_payment=down_payment,
        )

    @staticmethod
    def max_home_price_for_payment(
        monthly_budget: float,
        down_payment_percent: float,
        annual_rate: float,
        term_months: int,
        tax_rate: float,
        insurance_rate: float,
        monthly_hoa: float = 0.0,
    ) -> AffordabilityResult:
        """Find the most expensive home whose full payment fits a monthly budget."""
        if monthly_budget < 0 or monthly_hoa < 0:
            raise InvalidInputError("Budget and HOA dues must not be negative")
        if not 0 <= down_payment_percent < 100:
            raise InvalidInputError("Down payment percent must be between 0 and 100")
        AmortizationEngine._validate_housing_costs(
            annual_rate, term_months, tax_rate, insurance_rate
        )

        return AmortizationEngine._solve_home_price(
            monthly_budget,
            annual_rate,
            term_months,
            tax_rate,
            insurance_rate,
            monthly_hoa,
            "budget",
            down_payment_percent=down_payment_percent,
        )


def create_sample_loan() -> LoanInputs:
    """Create a sample 30-year loan for testing purposes."""
    return LoanInputs(
        principal=300000.0,
        annual_interest_rate=7.0,
        term_months=360,
    )
