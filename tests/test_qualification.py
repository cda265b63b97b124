"""Tests for required-income qualification."""

import pytest
from pydantic import ValidationError

from mortgage_calculators.models import QualificationInputs, calculate_required_income


def make_inputs(**overrides) -> QualificationInputs:
    params = {
        "home_value": 400000,
        "down_payment": 80000,
        "annual_interest_rate": 6.5,
        "term_months": 360,
        "annual_taxes": 4800,
        "annual_insurance": 1200,
        "monthly_debts": 500,
    }
    params.update(overrides)
    return QualificationInputs(**params)


class TestRequiredIncome:
    """Test cases for the required income calculation."""

    def test_housing_payment(self):
        """Test that the housing payment sums P&I, taxes and insurance."""
        result = calculate_required_income(make_inputs())

        assert result.loan_amount == 320000.0
        assert result.monthly_taxes == 400.0
        assert result.monthly_insurance == 100.0
        assert result.total_housing_payment == pytest.approx(
            result.monthly_principal_interest + 500, abs=0.01
        )

    def test_front_end_limit(self):
        """Test that the front-end ratio sets the income for modest debts."""
        result = calculate_required_income(make_inputs())

        assert result.limiting_ratio == "front_end"
        assert result.required_monthly_income == pytest.approx(
            result.total_housing_payment / 0.28, abs=0.01
        )
        assert result.front_end_dti == pytest.approx(28.0, abs=0.01)
        assert result.required_annual_income == pytest.approx(
            result.required_monthly_income * 12, abs=0.01
        )

    def test_back_end_limit(self):
        """Test that large debts make the back-end ratio bind."""
        result = calculate_required_income(make_inputs(monthly_debts=2000))

        assert result.limiting_ratio == "back_end"
        assert result.back_end_dti == pytest.approx(36.0, abs=0.01)
        assert result.max_monthly_debt_allowance == pytest.approx(2000, abs=0.01)

    def test_pmi_included(self):
        """Test that PMI raises the housing payment."""
        without_pmi = calculate_required_income(make_inputs())
        with_pmi = calculate_required_income(make_inputs(annual_pmi=1800))

        assert with_pmi.monthly_pmi == 150.0
        assert with_pmi.total_housing_payment == pytest.approx(
            without_pmi.total_housing_payment + 150, abs=0.01
        )

    def test_ltv(self):
        """Test the down payment percent and loan-to-value."""
        result = calculate_required_income(make_inputs())

        assert result.down_payment_percent == 20.0
        assert result.ltv == 80.0

    def test_cash_purchase(self):
        """Test that paying cash leaves only taxes and insurance."""
        result = calculate_required_income(make_inputs(down_payment=400000))

        assert result.loan_amount == 0.0
        assert result.monthly_principal_interest == 0.0
        assert result.total_housing_payment == 500.0

    def test_down_payment_above_value_rejected(self):
        """Test that a down payment above the home value is invalid."""
        with pytest.raises(ValidationError):
            make_inputs(down_payment=500000)
