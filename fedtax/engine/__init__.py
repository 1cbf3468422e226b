"""Federal tax calculation engine.

Pure functions over a return snapshot and a tax-year configuration.

Components:
- Income aggregation and self-employment tax
- Adjustments (AGI) and standard/itemized deduction selection
- Bracket tax and the shared credit pipeline (CTC, EITC, AOTC, LLC)
- Reconciliation against withholding
- calculate_return: the full pipeline
- Planning helpers: quarterly estimates, what-if comparison, filing requirement
"""

from fedtax.engine.adjustments import AdjustmentsResult, calculate_adjustments
from fedtax.engine.brackets import (
    BracketSlice,
    BracketTaxResult,
    calculate_bracket_tax,
    tax_for_bracket,
)
from fedtax.engine.calculator import CalculationResult, calculate_return
from fedtax.engine.credits import (
    CreditInputs,
    CreditKind,
    CreditLine,
    CreditsResult,
    EducationCreditResult,
    PhaseOut,
    PhaseOutKind,
    RefundRule,
    apply_phase_out,
    build_credit_inputs,
    calculate_aotc,
    calculate_child_tax_credit,
    calculate_education_credits,
    calculate_eitc,
    calculate_llc,
    count_qualifying_children,
    evaluate_credits,
)
from fedtax.engine.deductions import (
    DeductionMethod,
    DeductionResult,
    ItemizedDeductionBreakdown,
    calculate_itemized_deductions,
    calculate_standard_deduction,
    select_deduction,
)
from fedtax.engine.income import IncomeSummary, aggregate_income
from fedtax.engine.planning import (
    EstimatedTaxResult,
    FilingRequirement,
    ScenarioComparison,
    check_filing_requirement,
    compare_scenarios,
    estimate_quarterly_tax,
)
from fedtax.engine.reconcile import ReconciliationResult, reconcile
from fedtax.engine.self_employment import (
    SelfEmploymentTaxResult,
    calculate_self_employment_tax,
)

__all__ = [
    # Income
    "IncomeSummary",
    "aggregate_income",
    "SelfEmploymentTaxResult",
    "calculate_self_employment_tax",
    # AGI and deductions
    "AdjustmentsResult",
    "calculate_adjustments",
    "DeductionMethod",
    "DeductionResult",
    "ItemizedDeductionBreakdown",
    "calculate_itemized_deductions",
    "calculate_standard_deduction",
    "select_deduction",
    # Tax
    "BracketSlice",
    "BracketTaxResult",
    "calculate_bracket_tax",
    "tax_for_bracket",
    # Credits
    "CreditInputs",
    "CreditKind",
    "CreditLine",
    "CreditsResult",
    "EducationCreditResult",
    "PhaseOut",
    "PhaseOutKind",
    "RefundRule",
    "apply_phase_out",
    "build_credit_inputs",
    "calculate_aotc",
    "calculate_child_tax_credit",
    "calculate_education_credits",
    "calculate_eitc",
    "calculate_llc",
    "count_qualifying_children",
    "evaluate_credits",
    # Settlement
    "ReconciliationResult",
    "reconcile",
    "CalculationResult",
    "calculate_return",
    # Planning
    "EstimatedTaxResult",
    "FilingRequirement",
    "ScenarioComparison",
    "check_filing_requirement",
    "compare_scenarios",
    "estimate_quarterly_tax",
]
