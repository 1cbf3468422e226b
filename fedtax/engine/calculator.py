"""Federal return calculation entry point.

Runs the forward pipeline over one return snapshot:

    Income -> SE tax -> Adjustments -> Deductions -> Bracket tax
           -> Credits -> Reconciliation

The tax-year tables are passed in explicitly; nothing here reads global
state, so the same inputs always produce the same result.

Example:
    >>> from fedtax.tax import TAX_YEAR_2025
    >>> result = calculate_return(TaxReturn(), TAX_YEAR_2025)
    >>> result.total_tax
    Decimal('0.00')
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

from fedtax.core.logging import get_logger
from fedtax.engine.adjustments import calculate_adjustments
from fedtax.engine.brackets import BracketSlice, calculate_bracket_tax
from fedtax.engine.credits import (
    CreditLine,
    build_credit_inputs,
    evaluate_credits,
)
from fedtax.engine.deductions import DeductionMethod, select_deduction
from fedtax.engine.income import aggregate_income
from fedtax.engine.money import ZERO, round_cents
from fedtax.engine.reconcile import reconcile
from fedtax.engine.self_employment import calculate_self_employment_tax
from fedtax.returns.models import EducationCreditType, TaxReturn
from fedtax.tax.year_config import FilingStatus, TaxYearConfig

logger = get_logger(__name__)


def to_jsonable(value: Any) -> Any:
    """Convert engine results to JSON-ready values.

    Decimals become strings so cents survive serialization; enums become
    their values; dataclasses, tuples and lists are walked recursively.
    """
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            item.name: to_jsonable(getattr(value, item.name))
            for item in dataclasses.fields(value)
        }
    if isinstance(value, dict):
        return {to_jsonable(key): to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


@dataclass(frozen=True)
class CalculationResult:
    """Every intermediate and final total for one return.

    Income:
        total_wages, total_interest, total_dividends, self_employment_income,
        gross_income, earned_income, investment_income

    Adjustments and deductions:
        self_employment_tax_deduction, total_adjustments,
        adjusted_gross_income, standard_deduction, itemized_deductions,
        deduction_method, deduction_amount, taxable_income

    Tax and settlement:
        income_tax, self_employment_tax, total_tax_before_credits,
        nonrefundable_credits, refundable_credits, total_credits, total_tax,
        tax_liability,
        federal_withholding, refund_or_owed, is_refund

    ``total_tax`` is negative when refundable credits exceed liability;
    ``tax_liability`` is the same figure floored at zero.
    """

    tax_year: int
    filing_status: FilingStatus

    total_wages: Decimal
    total_interest: Decimal
    total_dividends: Decimal
    self_employment_income: Decimal
    gross_income: Decimal
    earned_income: Decimal
    investment_income: Decimal

    self_employment_tax_deduction: Decimal
    total_adjustments: Decimal
    adjusted_gross_income: Decimal
    standard_deduction: Decimal
    itemized_deductions: Decimal
    deduction_method: DeductionMethod
    deduction_amount: Decimal
    taxable_income: Decimal

    income_tax: Decimal
    self_employment_tax: Decimal
    total_tax_before_credits: Decimal
    nonrefundable_credits: Decimal
    refundable_credits: Decimal
    total_credits: Decimal
    total_tax: Decimal
    tax_liability: Decimal
    federal_withholding: Decimal
    refund_or_owed: Decimal
    is_refund: bool

    marginal_rate: Decimal
    effective_rate: Decimal

    qualifying_children: int = 0
    education_credit: EducationCreditType = EducationCreditType.NONE
    recommended_education_credit: EducationCreditType = EducationCreditType.NONE
    education_ineligibility_reasons: tuple[str, ...] = ()
    credits: tuple[CreditLine, ...] = field(default_factory=tuple)
    bracket_breakdown: tuple[BracketSlice, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        """Plain JSON-ready dict of the result."""
        return to_jsonable(self)


def calculate_return(tax_return: TaxReturn, config: TaxYearConfig) -> CalculationResult:
    """Calculate the federal tax position for a return snapshot.

    Args:
        tax_return: Complete return snapshot. Missing sections count as zero.
        config: Reference tables for the tax year being filed.

    Returns:
        CalculationResult with every intermediate total.

    Raises:
        TaxTableError: If a table lookup fails for the return's filing status.
    """
    personal = tax_return.personal_info
    filing_status = personal.filing_status

    income = aggregate_income(tax_return.income, config)
    se_result = calculate_self_employment_tax(income.net_self_employment_income, config)
    adjustments = calculate_adjustments(
        income.gross_income,
        tax_return.adjustments,
        se_result,
        income.net_self_employment_income,
        config,
    )
    agi = adjustments.adjusted_gross_income

    deduction = select_deduction(
        filing_status,
        personal.claimed_as_dependent,
        income.earned_income,
        tax_return.deductions,
        agi,
        config,
    )
    taxable_income = round_cents(max(ZERO, agi - deduction.amount))
    bracket_result = calculate_bracket_tax(taxable_income, filing_status, config)

    credit_inputs = build_credit_inputs(
        tax_return, agi, income.earned_income, income.investment_income, config
    )
    credits = evaluate_credits(credit_inputs, config)

    settlement = reconcile(
        bracket_result.tax,
        se_result.self_employment_tax,
        credits.lines,
        income.federal_withholding,
    )

    result = CalculationResult(
        tax_year=config.tax_year,
        filing_status=filing_status,
        total_wages=income.total_wages,
        total_interest=income.total_interest,
        total_dividends=income.total_dividends,
        self_employment_income=income.net_self_employment_income,
        gross_income=income.gross_income,
        earned_income=income.earned_income,
        investment_income=income.investment_income,
        self_employment_tax_deduction=adjustments.self_employment_tax_deduction,
        total_adjustments=adjustments.total_adjustments,
        adjusted_gross_income=agi,
        standard_deduction=deduction.standard_amount,
        itemized_deductions=deduction.itemized_amount,
        deduction_method=deduction.method,
        deduction_amount=deduction.amount,
        taxable_income=taxable_income,
        income_tax=bracket_result.tax,
        self_employment_tax=se_result.self_employment_tax,
        total_tax_before_credits=settlement.total_tax_before_credits,
        nonrefundable_credits=settlement.nonrefundable_credits,
        refundable_credits=settlement.refundable_credits,
        total_credits=settlement.total_credits,
        total_tax=settlement.total_tax,
        tax_liability=settlement.tax_liability,
        federal_withholding=settlement.withholding,
        refund_or_owed=settlement.refund_or_owed,
        is_refund=settlement.is_refund,
        marginal_rate=bracket_result.marginal_rate,
        effective_rate=bracket_result.effective_rate,
        qualifying_children=credit_inputs.num_qualifying_children,
        education_credit=credits.education.credit_type,
        recommended_education_credit=credits.education.recommended_credit,
        education_ineligibility_reasons=credits.education.ineligibility_reasons,
        credits=credits.lines,
        bracket_breakdown=bracket_result.breakdown,
    )

    logger.debug(
        "return_calculated",
        tax_year=config.tax_year,
        filing_status=filing_status.value,
        adjusted_gross_income=agi,
        taxable_income=taxable_income,
        total_tax=result.total_tax,
        refund_or_owed=result.refund_or_owed,
    )
    return result
