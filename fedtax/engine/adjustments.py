"""Above-the-line adjustments and Adjusted Gross Income.

AGI is deliberately not floored here: a negative AGI flows on to the
deduction selector so loss scenarios stay visible. Only taxable income is
floored, in the calculator.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from fedtax.engine.money import clamp, round_cents
from fedtax.engine.self_employment import SelfEmploymentTaxResult
from fedtax.returns.models import Adjustments
from fedtax.tax.year_config import TaxYearConfig


@dataclass(frozen=True)
class AdjustmentsResult:
    """Capped adjustments and the resulting AGI.

    Attributes:
        student_loan_interest: Allowed student loan interest.
        educator_expenses: Allowed educator expenses.
        hsa_contributions: Allowed HSA deduction.
        ira_contributions: Allowed traditional IRA deduction.
        self_employment_health_insurance: Allowed SE health insurance.
        self_employment_tax_deduction: Deductible half of SE tax.
        total_adjustments: Sum of all of the above.
        adjusted_gross_income: Gross income minus total adjustments.
    """

    student_loan_interest: Decimal
    educator_expenses: Decimal
    hsa_contributions: Decimal
    ira_contributions: Decimal
    self_employment_health_insurance: Decimal
    self_employment_tax_deduction: Decimal
    total_adjustments: Decimal
    adjusted_gross_income: Decimal


def calculate_adjustments(
    gross_income: Decimal,
    adjustments: Adjustments,
    se_result: SelfEmploymentTaxResult,
    net_self_employment_income: Decimal,
    config: TaxYearConfig,
) -> AdjustmentsResult:
    """Apply per-field caps and derive AGI.

    Each field is clamped to ``[0, cap]``. The SE health insurance deduction
    cannot exceed net self-employment income.

    Args:
        gross_income: Gross income from the income aggregator.
        adjustments: Adjustments section of the return.
        se_result: SE tax result (supplies the deductible half).
        net_self_employment_income: Net Schedule C profit.
        config: Tax year tables with the adjustment caps.

    Returns:
        AdjustmentsResult with the allowed amounts and AGI.
    """
    hsa_cap = (
        config.hsa_cap_family
        if adjustments.hsa_family_coverage
        else config.hsa_cap_self_only
    )

    student_loan = clamp(adjustments.student_loan_interest, config.student_loan_interest_cap)
    educator = clamp(adjustments.educator_expenses, config.educator_expenses_cap)
    hsa = clamp(adjustments.hsa_contributions, hsa_cap)
    ira = clamp(adjustments.ira_contributions, config.ira_contribution_cap)
    se_health = clamp(
        adjustments.self_employment_health_insurance, net_self_employment_income
    )

    total = (
        student_loan
        + educator
        + hsa
        + ira
        + se_health
        + se_result.deductible_portion
    )

    return AdjustmentsResult(
        student_loan_interest=student_loan,
        educator_expenses=educator,
        hsa_contributions=hsa,
        ira_contributions=ira,
        self_employment_health_insurance=se_health,
        self_employment_tax_deduction=se_result.deductible_portion,
        total_adjustments=total,
        adjusted_gross_income=round_cents(gross_income - total),
    )
