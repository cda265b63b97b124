"""
Rent vs buy comparison.

Projects the cost of renting and of owning over the years before a sale.
Owning costs cover principal and interest, property tax, insurance,
maintenance and PMI while the balance is above 80% of the appreciated home
value; the owner recovers the sale proceeds and the mortgage-interest tax
deduction.
"""

import numpy as np
from pydantic import BaseModel, Field

from .amortization import AmortizationEngine
from .loan import LoanInputs

PMI_CANCEL_LTV = 0.80


class RentVsBuyInputs(BaseModel):
    """Parameters for the rent vs buy comparison."""

    monthly_rent: float = Field(..., ge=0, description="Current monthly rent")
    annual_rent_increase: float = Field(default=3.0, ge=0, description="Percent")
    home_price: float = Field(..., gt=0, description="Purchase price")
    annual_appreciation: float = Field(default=3.0, gt=-100, description="Percent per year")
    years_before_sell: int = Field(default=7, ge=1, le=50)
    selling_cost_rate: float = Field(default=6.0, ge=0, le=100, description="Percent")
    down_payment_percent: float = Field(default=20.0, ge=0, le=100)
    annual_interest_rate: float = Field(..., ge=0, le=100)
    term_months: int = Field(default=360, gt=0, le=600)
    annual_pmi_rate: float = Field(default=0.5, ge=0, description="Percent")
    property_tax_rate: float = Field(default=1.25, ge=0, description="Percent of price")
    insurance_rate: float = Field(default=0.5, ge=0, description="Percent of price")
    annual_maintenance: float = Field(default=0, ge=0)
    income_tax_rate: float = Field(default=0, ge=0, le=100, description="Percent")


class RentVsBuyResult(BaseModel):
    """Outcome of the rent vs buy comparison."""

    total_rent_paid: float
    average_monthly_rent: float
    down_payment: float
    loan_amount: float
    monthly_principal_interest: float
    monthly_pmi: float
    monthly_ownership_cost: float
    total_ownership_cost: float
    total_interest_paid: float
    total_pmi_paid: float
    total_taxes_and_insurance: float
    total_maintenance: float
    total_tax_savings: float
    future_home_value: float
    selling_costs: float
    loan_balance_at_sale: float
    equity_gain: float
    rent_is_cheaper: bool
    net_benefit_of_buying: float
    should_buy: bool


def compare_rent_vs_buy(inputs: RentVsBuyInputs) -> RentVsBuyResult:
    """
    Compare renting against buying over the holding period.

    Args:
        inputs: Rent, purchase, financing and tax parameters

    Returns:
        Totals for both options and the net benefit of buying
    """
    years = inputs.years_before_sell
    months = years * 12

    rent_growth = (1 + inputs.annual_rent_increase / 100) ** np.arange(years)
    total_rent = float(np.sum(inputs.monthly_rent * 12 * rent_growth))

    down_payment = round(inputs.home_price * inputs.down_payment_percent / 100, 2)
    loan_amount = round(inputs.home_price - down_payment, 2)

    principal_interest = np.zeros(months)
    interest = np.zeros(months)
    balances = np.zeros(months)
    monthly_pi = 0.0
    if loan_amount > 0:
        schedule = AmortizationEngine.generate_schedule(
            LoanInputs(
                principal=loan_amount,
                annual_interest_rate=inputs.annual_interest_rate,
                term_months=inputs.term_months,
            )
        )
        monthly_pi = schedule.monthly_payment
        held = schedule.rows[:months]
        principal_interest[: len(held)] = [row.payment for row in held]
        interest[: len(held)] = [row.interest for row in held]
        balances[: len(held)] = [row.ending_balance for row in held]

    # PMI stops once the balance falls to 80% of the appreciated value
    has_pmi = inputs.down_payment_percent < 20 and loan_amount > 0
    monthly_pmi = (
        round(loan_amount * inputs.annual_pmi_rate / 100 / 12, 2) if has_pmi else 0.0
    )
    home_values = inputs.home_price * (1 + inputs.annual_appreciation / 100) ** (
        np.arange(1, months + 1) / 12
    )
    pmi_months = int(np.count_nonzero(balances / home_values > PMI_CANCEL_LTV))
    total_pmi = round(monthly_pmi * pmi_months, 2)

    monthly_tax = inputs.home_price * inputs.property_tax_rate / 100 / 12
    monthly_insurance = inputs.home_price * inputs.insurance_rate / 100 / 12
    monthly_maintenance = inputs.annual_maintenance / 12

    total_taxes_and_insurance = round((monthly_tax + monthly_insurance) * months, 2)
    total_maintenance = round(inputs.annual_maintenance * years, 2)
    total_interest = round(float(np.sum(interest)), 2)
    total_ownership = round(
        float(np.sum(principal_interest))
        + total_taxes_and_insurance
        + total_maintenance
        + total_pmi,
        2,
    )
    total_tax_savings = round(total_interest * inputs.income_tax_rate / 100, 2)

    future_value = round(float(home_values[-1]), 2)
    selling_costs = round(future_value * inputs.selling_cost_rate / 100, 2)
    balance_at_sale = round(float(balances[-1]), 2)
    equity_gain = round(future_value - selling_costs - balance_at_sale - down_payment, 2)

    net_benefit = round(equity_gain + total_tax_savings + total_rent - total_ownership, 2)

    return RentVsBuyResult(
        total_rent_paid=round(total_rent, 2),
        average_monthly_rent=round(total_rent / months, 2),
        down_payment=down_payment,
        loan_amount=loan_amount,
        monthly_principal_interest=monthly_pi,
        monthly_pmi=monthly_pmi,
        monthly_ownership_cost=round(
            monthly_pi + monthly_tax + monthly_insurance + monthly_maintenance + monthly_pmi,
            2,
        ),
        total_ownership_cost=total_ownership,
        total_interest_paid=total_interest,
        total_pmi_paid=total_pmi,
        total_taxes_and_insurance=total_taxes_and_insurance,
        total_maintenance=total_maintenance,
        total_tax_savings=total_tax_savings,
        future_home_value=future_value,
        selling_costs=selling_costs,
        loan_balance_at_sale=balance_at_sale,
        equity_gain=equity_gain,
        rent_is_cheaper=total_rent < total_ownership,
        net_benefit_of_buying=net_benefit,
        should_buy=net_benefit > 0,
    )
