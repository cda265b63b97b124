"""
Tests for loan program payment breakdowns.

This module tests the mortgage insurance and funding fee rules of the
conventional, FHA, VA, USDA and jumbo programs.
"""

import pytest
from pydantic import ValidationError

from mortgage_calculators.models import (
    ProgramPaymentInputs,
    calculate_program_payment,
    va_funding_fee_rate,
)


class TestVaFundingFee:
    """Test cases for the VA funding fee table."""

    @pytest.mark.parametrize(
        "eligibility, first_use, down_percent, exempt, expected",
        [
            ("active", True, 0, False, 2.15),
            ("reserves", True, 0, False, 2.4),
            ("active", False, 0, False, 3.3),
            ("reserves", False, 4.9, False, 3.3),
            ("active", True, 5, False, 1.5),
            ("active", False, 7, False, 1.5),
            ("reserves", True, 10, False, 1.25),
            ("active", True, 0, True, 0.0),
        ],
    )
    def test_fee_table(self, eligibility, first_use, down_percent, exempt, expected):
        """Test the fee for each eligibility, use and down payment tier."""
        assert va_funding_fee_rate(eligibility, first_use, down_percent, exempt) == expected


class TestProgramPayments:
    """Test cases for program payment breakdowns."""

    def test_conventional_with_pmi(self):
        """Test that a conventional loan above 80% LTV carries PMI."""
        result = calculate_program_payment(
            ProgramPaymentInputs(
                program="conventional",
                home_price=400000,
                down_payment=40000,
                annual_interest_rate=6.5,
            )
        )

        assert result.base_loan_amount == 360000.0
        assert result.ltv == 90.0
        assert result.upfront_fee == 0.0
        assert result.monthly_mortgage_insurance == 150.0
        # PMI cancels at 80% LTV, long before the end of the loan
        assert result.total_mortgage_insurance < 150.0 * 360

    def test_conventional_without_pmi(self):
        """Test that 20% down avoids PMI."""
        result = calculate_program_payment(
            ProgramPaymentInputs(
                home_price=400000, down_payment=80000, annual_interest_rate=6.5
            )
        )

        assert result.monthly_mortgage_insurance == 0.0
        assert result.total_mortgage_insurance == 0.0

    def test_fha_mip(self):
        """Test the FHA upfront and annual MIP."""
        result = calculate_program_payment(
            ProgramPaymentInputs(
                program="fha",
                home_price=300000,
                down_payment=10500,
                annual_interest_rate=6.0,
            )
        )

        assert result.base_loan_amount == 289500.0
        assert result.upfront_fee == 5066.25
        assert result.total_loan_amount == 294566.25
        assert result.monthly_mortgage_insurance == round(294566.25 * 0.55 / 100 / 12, 2)
        # Annual MIP lasts for the life of the loan
        assert result.payoff_month == 360

    def test_va_funding_fee_financed(self):
        """Test a VA loan with the funding fee rolled into the loan."""
        result = calculate_program_payment(
            ProgramPaymentInputs(program="va", home_price=400000, annual_interest_rate=6.0)
        )

        assert result.upfront_fee_rate == 2.15
        assert result.upfront_fee == 8600.0
        assert result.total_loan_amount == 408600.0
        assert result.monthly_mortgage_insurance == 0.0

    def test_va_funding_fee_paid_in_cash(self):
        """Test a VA loan with the funding fee paid at closing."""
        result = calculate_program_payment(
            ProgramPaymentInputs(
                program="va",
                home_price=400000,
                annual_interest_rate=6.0,
                finance_funding_fee=False,
            )
        )

        assert result.upfront_fee == 8600.0
        assert result.total_loan_amount == 400000.0

    def test_usda_guarantee_fee(self):
        """Test the USDA upfront and annual guarantee fees."""
        result = calculate_program_payment(
            ProgramPaymentInputs(program="usda", home_price=200000, annual_interest_rate=6.0)
        )

        assert result.upfront_fee == 2000.0
        assert result.total_loan_amount == 202000.0
        assert result.monthly_mortgage_insurance == 58.92

    def test_jumbo_flag(self):
        """Test that loans above the conforming limit are flagged."""
        inputs = ProgramPaymentInputs(
            program="jumbo",
            home_price=1200000,
            down_payment=240000,
            annual_interest_rate=7.0,
        )

        assert calculate_program_payment(inputs).is_jumbo is True
        raised_limit = inputs.model_copy(update={"conforming_loan_limit": 1000000})
        assert calculate_program_payment(raised_limit).is_jumbo is False

    def test_total_monthly_payment(self):
        """Test that the total adds every monthly component."""
        result = calculate_program_payment(
            ProgramPaymentInputs(
                program="fha",
                home_price=300000,
                down_payment=10500,
                annual_interest_rate=6.0,
                annual_property_tax=3600,
                annual_home_insurance=1200,
                monthly_hoa=50,
            )
        )

        assert result.monthly_property_tax == 300.0
        assert result.monthly_insurance == 100.0
        assert result.total_monthly_payment == pytest.approx(
            result.monthly_principal_interest
            + 300
            + 100
            + result.monthly_mortgage_insurance
            + 50,
            abs=0.01,
        )

    def test_down_payment_must_be_below_price(self):
        """Test that the down payment must leave something to borrow."""
        with pytest.raises(ValidationError):
            ProgramPaymentInputs(
                home_price=300000, down_payment=300000, annual_interest_rate=6.0
            )

    def test_unknown_program_rejected(self):
        """Test that only known programs are accepted."""
        with pytest.raises(ValidationError):
            ProgramPaymentInputs(
                program="interest_only", home_price=300000, annual_interest_rate=6.0
            )
