"""Calculation models for the mortgage calculators."""

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
from .errors import InvalidInputError, UnknownCalculatorError
from .amortization import AmortizationEngine, create_sample_loan
from .loan_programs import (
    ProgramPaymentBreakdown,
    ProgramPaymentInputs,
    calculate_program_payment,
    va_funding_fee_rate,
)
from .refinance import RefinanceAnalysis, RefinanceScenario, analyze_refinance
from .equity import (
    CashOutRefinanceInputs,
    CashOutRefinanceResult,
    Debt,
    HelocComparison,
    HelocInputs,
    MortgageOffer,
    PiggybackComparison,
    PiggybackInputs,
    calculate_cash_out_refinance,
    compare_heloc_consolidation,
    compare_piggyback,
)
from .qualification import (
    BudgetAffordabilityInputs,
    IncomeAffordabilityInputs,
    QualificationInputs,
    QualificationResult,
    affordability_for_budget,
    affordability_for_income,
    calculate_required_income,
    dti_limits,
)
from .rent_vs_buy import RentVsBuyInputs, RentVsBuyResult, compare_rent_vs_buy

__all__ = [
    "AffordabilityResult",
    "AmortizationRow",
    "AmortizationSchedule",
    "ARMAdjustment",
    "ARMSchedule",
    "ARMSchedulePeriod",
    "BiWeeklyComparison",
    "ComparisonResult",
    "LoanInputs",
    "RefinanceComparison",
    "InvalidInputError",
    "UnknownCalculatorError",
    "AmortizationEngine",
    "create_sample_loan",
    "ProgramPaymentBreakdown",
    "ProgramPaymentInputs",
    "calculate_program_payment",
    "va_funding_fee_rate",
    "RefinanceAnalysis",
    "RefinanceScenario",
    "analyze_refinance",
    "CashOutRefinanceInputs",
    "CashOutRefinanceResult",
    "Debt",
    "HelocComparison",
    "HelocInputs",
    "MortgageOffer",
    "PiggybackComparison",
    "PiggybackInputs",
    "calculate_cash_out_refinance",
    "compare_heloc_consolidation",
    "compare_piggyback",
    "BudgetAffordabilityInputs",
    "IncomeAffordabilityInputs",
    "QualificationInputs",
    "QualificationResult",
    "affordability_for_budget",
    "affordability_for_income",
    "calculate_required_income",
    "dti_limits",
    "RentVsBuyInputs",
    "RentVsBuyResult",
    "compare_rent_vs_buy",
]
