"""Tests for adjustable-rate mortgage schedules."""

import pytest
from pydantic import ValidationError

from mortgage_calculators.models import AmortizationEngine, ARMSchedulePeriod, LoanInputs


def make_arm(**overrides) -> ARMSchedulePeriod:
    """Build a 5/1 ARM with 2/2/5 caps."""
    params = {
        "initial_fixed_months": 60,
        "adjustment_interval_months": 12,
        "initial_cap": 2.0,
        "periodic_cap": 2.0,
        "lifetime_cap": 5.0,
        "index_rate": 6.0,
        "margin": 2.75,
    }
    params.update(overrides)
    return ARMSchedulePeriod(**params)


@pytest.fixture
def arm_loan():
    """A $300,000 30-year loan starting at 5%."""
    return LoanInputs(principal=300000, annual_interest_rate=5.0, term_months=360)


class TestARMSchedule:
    """Test cases for rate adjustments and payment resets."""

    def test_fixed_period_payment(self, arm_loan):
        """Test that the initial payment holds for the fixed period."""
        schedule = AmortizationEngine.compute_arm_payment(arm_loan, make_arm())
        fixed_payment = round(AmortizationEngine.compute_monthly_payment(300000, 5.0, 360), 2)

        assert schedule.initial_payment == fixed_payment
        assert all(payment == fixed_payment for payment in schedule.payments[:60])
        assert schedule.adjustments[0].start_month == 1
        assert schedule.adjustments[0].rate == 5.0

    def test_initial_and_periodic_caps(self, arm_loan):
        """Test that each adjustment moves by at most its cap."""
        schedule = AmortizationEngine.compute_arm_payment(arm_loan, make_arm())

        first, second = schedule.adjustments[1], schedule.adjustments[2]
        assert first.start_month == 61
        assert first.rate == 7.0
        assert second.start_month == 73
        assert second.rate == 8.75
        assert schedule.max_rate == 8.75

    def test_payment_reamortized_at_adjustment(self, arm_loan):
        """Test that the payment is recomputed on the remaining balance and term."""
        schedule = AmortizationEngine.compute_arm_payment(arm_loan, make_arm())
        first = schedule.adjustments[1]

        expected = round(
            AmortizationEngine.compute_monthly_payment(
                first.beginning_balance, first.rate, 360 - 60
            ),
            2,
        )
        assert first.monthly_payment == expected
        assert schedule.payments[60] == expected
        assert schedule.max_payment > schedule.initial_payment

    def test_lifetime_cap(self, arm_loan):
        """Test that the rate never exceeds the initial rate plus the lifetime cap."""
        arm = make_arm(initial_cap=5.0, index_rate=10.0, margin=3.0)
        schedule = AmortizationEngine.compute_arm_payment(arm_loan, arm)

        assert schedule.max_rate == 10.0
        assert all(adjustment.rate <= 10.0 for adjustment in schedule.adjustments)

    def test_rate_ceiling(self, arm_loan):
        """Test that the absolute ceiling bounds every rate."""
        arm = make_arm(rate_ceiling=8.0)
        schedule = AmortizationEngine.compute_arm_payment(arm_loan, arm)

        assert schedule.max_rate == 8.0

    def test_rate_decrease(self, arm_loan):
        """Test that a falling index lowers the rate within the cap."""
        arm = make_arm(index_rate=1.0, margin=2.0)
        schedule = AmortizationEngine.compute_arm_payment(arm_loan, arm)

        assert schedule.adjustments[1].rate == 3.0
        assert schedule.payments[60] < schedule.initial_payment

    def test_rate_floor(self, arm_loan):
        """Test that the floor stops the rate from falling further."""
        arm = make_arm(index_rate=0.0, margin=1.0, initial_cap=5.0, rate_floor=4.0)
        schedule = AmortizationEngine.compute_arm_payment(arm_loan, arm)

        assert schedule.adjustments[1].rate == 4.0

    def test_index_path(self, arm_loan):
        """Test that successive adjustments read successive index values."""
        arm = make_arm(
            initial_cap=2.0,
            periodic_cap=1.0,
            margin=2.0,
            index_rates=[4.0, 5.0],
        )
        schedule = AmortizationEngine.compute_arm_payment(arm_loan, arm)
        rates = [adjustment.rate for adjustment in schedule.adjustments[:5]]

        assert rates == [5.0, 6.0, 7.0, 7.0, 7.0]

    def test_schedule_ends_at_zero(self, arm_loan):
        """Test that the adjustable schedule is fully amortized."""
        schedule = AmortizationEngine.compute_arm_payment(arm_loan, make_arm())

        assert schedule.rows[-1].ending_balance == 0.0
        assert len(schedule.payments) == len(schedule.rows) == 360
        assert schedule.total_interest == schedule.rows[-1].cumulative_interest

    def test_adjustment_without_fixed_period(self, arm_loan):
        """Test that a zero fixed period adjusts after the first interval."""
        arm = make_arm(initial_fixed_months=0, adjustment_interval_months=6)
        schedule = AmortizationEngine.compute_arm_payment(arm_loan, arm)

        assert schedule.adjustments[1].start_month == 7
        assert schedule.adjustments[2].start_month == 13


class TestARMValidation:
    """Test cases for adjustment term validation."""

    @pytest.mark.parametrize("field", ["initial_cap", "periodic_cap", "lifetime_cap"])
    def test_negative_caps_rejected(self, field):
        """Test that negative caps fail validation."""
        with pytest.raises(ValidationError):
            make_arm(**{field: -1.0})

    def test_negative_index_path_rejected(self):
        """Test that negative index values fail validation."""
        with pytest.raises(ValidationError):
            make_arm(index_rates=[3.0, -1.0])

    def test_floor_above_ceiling_rejected(self):
        """Test that the floor cannot exceed the ceiling."""
        with pytest.raises(ValidationError):
            make_arm(rate_ceiling=8.0, rate_floor=9.0)

    def test_index_for_adjustment(self):
        """Test that the last index value persists."""
        arm = make_arm(index_rates=[3.0, 4.0])

        assert arm.index_for_adjustment(1) == 3.0
        assert arm.index_for_adjustment(2) == 4.0
        assert arm.index_for_adjustment(7) == 4.0
        assert make_arm().index_for_adjustment(3) == 6.0
