"""
Calculation service for running mortgage calculators by name.

The service validates a JSON payload against the calculator's input model,
fills in configured defaults, runs the calculation and returns a JSON-ready
dictionary. Each call is independent; nothing is stored between requests.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple, Type

from pydantic import BaseModel, Field

from mortgage_calculators.config import Settings
from mortgage_calculators.models import (
    AmortizationEngine,
    ARMSchedulePeriod,
    BudgetAffordabilityInputs,
    CashOutRefinanceInputs,
    HelocInputs,
    IncomeAffordabilityInputs,
    InvalidInputError,
    LoanInputs,
    PiggybackInputs,
    ProgramPaymentInputs,
    QualificationInputs,
    RefinanceScenario,
    RentVsBuyInputs,
    UnknownCalculatorError,
    affordability_for_budget,
    affordability_for_income,
    analyze_refinance,
    calculate_cash_out_refinance,
    calculate_program_payment,
    calculate_required_income,
    compare_heloc_consolidation,
    compare_piggyback,
    compare_rent_vs_buy,
)

logger = logging.getLogger(__name__)


class ARMRequest(BaseModel):
    """Loan and adjustment terms for an adjustable-rate schedule."""

    loan: LoanInputs
    arm: ARMSchedulePeriod


class BiWeeklyRequest(LoanInputs):
    """Loan terms plus the marginal tax rate for the interest deduction."""

    tax_rate: float = Field(default=0, ge=0, le=100, description="Percent")


class RefinanceRequest(BaseModel):
    """Current and new loan terms for a refinance comparison."""

    current_loan: LoanInputs
    new_loan: LoanInputs
    closing_costs: float = Field(default=0, ge=0)
    net_of_closing_costs: bool = True


def _payment(inputs: LoanInputs) -> Dict[str, Any]:
    monthly_payment = AmortizationEngine.compute_monthly_payment(
        inputs.financed_principal, inputs.annual_interest_rate, inputs.term_months
    )
    return {
        "financed_principal": inputs.financed_principal,
        "upfront_fee": inputs.upfront_fee,
        "monthly_payment": round(monthly_payment, 2),
    }


def _schedule(inputs: LoanInputs) -> Dict[str, Any]:
    schedule = AmortizationEngine.generate_schedule(inputs)
    result = schedule.model_dump(mode="json")
    result["yearly_totals"] = schedule.yearly_totals()
    return result


def _arm(request: ARMRequest) -> BaseModel:
    return AmortizationEngine.compute_arm_payment(request.loan, request.arm)


def _bi_weekly(request: BiWeeklyRequest) -> BaseModel:
    return AmortizationEngine.compute_bi_weekly_schedule(request, request.tax_rate)


def _refinance(request: RefinanceRequest) -> BaseModel:
    return AmortizationEngine.compare_refinance(
        request.current_loan,
        request.new_loan,
        request.closing_costs,
        request.net_of_closing_costs,
    )


Calculator = Tuple[Type[BaseModel], Callable[[Any], Any]]

CALCULATORS: Dict[str, Calculator] = {
    "payment": (LoanInputs, _payment),
    "schedule": (LoanInputs, _schedule),
    "arm": (ARMRequest, _arm),
    "refinance": (RefinanceRequest, _refinance),
    "refinance-analysis": (RefinanceScenario, analyze_refinance),
    "extra-payments": (LoanInputs, AmortizationEngine.compare_extra_payments),
    "bi-weekly": (BiWeeklyRequest, _bi_weekly),
    "affordability": (IncomeAffordabilityInputs, affordability_for_income),
    "affordability-budget": (BudgetAffordabilityInputs, affordability_for_budget),
    "qualification": (QualificationInputs, calculate_required_income),
    "loan-program": (ProgramPaymentInputs, calculate_program_payment),
    "cash-out": (CashOutRefinanceInputs, calculate_cash_out_refinance),
    "heloc": (HelocInputs, compare_heloc_consolidation),
    "piggyback": (PiggybackInputs, compare_piggyback),
    "rent-vs-buy": (RentVsBuyInputs, compare_rent_vs_buy),
}


class CalculationService:
    """Service for running mortgage calculators from JSON payloads."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        """Initialize the calculation service.

        Args:
            settings: Application settings supplying calculator defaults
        """
        self.settings = settings
        self.logger = logging.getLogger(__name__)

    @staticmethod
    def available_calculators() -> List[str]:
        """Names of the registered calculators."""
        return sorted(CALCULATORS)

    def _apply_defaults(self, name: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Fill configured defaults the caller did not supply."""
        if self.settings is None:
            return payload

        payload = dict(payload)
        if name == "loan-program":
            payload.setdefault("conforming_loan_limit", self.settings.conforming_loan_limit)
        elif name == "cash-out":
            payload.setdefault("max_ltv", self.settings.max_cash_out_ltv)
        elif name == "arm" and isinstance(payload.get("arm"), dict):
            arm = dict(payload["arm"])
            arm.setdefault("rate_ceiling", self.settings.arm_rate_ceiling)
            payload["arm"] = arm
        return payload

    def run(self, name: str, payload: Any) -> Dict[str, Any]:
        """Run a calculator and return its JSON-ready result.

        Args:
            name: Registered calculator name
            payload: Calculator input as decoded JSON

        Returns:
            Dictionary containing the calculation result

        Raises:
            UnknownCalculatorError: If no calculator has this name
            InvalidInputError: If the payload is not a JSON object or the
                inputs are outside the valid domain
            pydantic.ValidationError: If the payload fails model validation
        """
        if name not in CALCULATORS:
            raise UnknownCalculatorError(f"Unknown calculator: {name}")
        if not isinstance(payload, dict):
            raise InvalidInputError("Request body must be a JSON object")

        input_model, calculate = CALCULATORS[name]
        inputs = input_model.model_validate(self._apply_defaults(name, payload))

        self.logger.info(f"Running calculator {name}")
        result = calculate(inputs)

        if isinstance(result, BaseModel):
            return result.model_dump(mode="json")
        return result
