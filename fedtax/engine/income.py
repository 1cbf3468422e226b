"""Income aggregation from information returns.

Sums wage statements and 1099 records into the gross totals every later
stage consumes. Self-employment income is netted against Schedule C expenses
here; the net-earnings multiplier is applied later by the SE tax engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from fedtax.engine.money import ZERO
from fedtax.returns.models import Income
from fedtax.tax.year_config import TaxYearConfig


@dataclass(frozen=True)
class IncomeSummary:
    """Aggregated income from all information returns.

    Attributes:
        total_wages: Sum of all W-2 Box 1 wages.
        total_interest: Sum of all 1099-INT taxable interest.
        total_tax_exempt_interest: Sum of 1099-INT Box 8 (not in gross income).
        total_dividends: Sum of all 1099-DIV ordinary dividends.
        total_qualified_dividends: Portion of dividends that are qualified.
        gross_self_employment_income: 1099-NEC compensation plus 1099-K gross.
        schedule_c_expenses: Deductible business expenses.
        net_self_employment_income: Gross SE income less expenses, floored at 0.
        gross_income: Wages + interest + dividends + net SE income.
        earned_income: Wages + net SE income.
        investment_income: Taxable interest, tax-exempt interest and dividends.
        federal_withholding: Federal tax withheld across every record.
    """

    total_wages: Decimal
    total_interest: Decimal
    total_tax_exempt_interest: Decimal
    total_dividends: Decimal
    total_qualified_dividends: Decimal
    gross_self_employment_income: Decimal
    schedule_c_expenses: Decimal
    net_self_employment_income: Decimal
    gross_income: Decimal
    earned_income: Decimal
    investment_income: Decimal
    federal_withholding: Decimal


def aggregate_income(income: Income, config: TaxYearConfig) -> IncomeSummary:
    """Aggregate income from every record in the income section.

    Args:
        income: Income section of the return.
        config: Tax year tables (supplies the Schedule C mileage rate).

    Returns:
        IncomeSummary with totals by income type.

    Example:
        >>> summary = aggregate_income(Income(w2s=[W2Record(wages_tips=Decimal("50000"))]), config)
        >>> summary.gross_income
        Decimal('50000')
    """
    total_wages = ZERO
    total_interest = ZERO
    total_tax_exempt_interest = ZERO
    total_dividends = ZERO
    total_qualified_dividends = ZERO
    gross_self_employment_income = ZERO
    federal_withholding = ZERO

    for w2 in income.w2s:
        total_wages += w2.wages_tips
        federal_withholding += w2.federal_withheld

    for form in income.form_1099_ints:
        total_interest += form.interest_income
        total_tax_exempt_interest += form.tax_exempt_interest
        federal_withholding += form.federal_withheld

    for form in income.form_1099_divs:
        total_dividends += form.ordinary_dividends
        total_qualified_dividends += form.qualified_dividends
        federal_withholding += form.federal_withheld

    for form in income.form_1099_necs:
        gross_self_employment_income += form.nonemployee_compensation
        federal_withholding += form.federal_withheld

    for form in income.form_1099_ks:
        gross_self_employment_income += form.gross_amount
        federal_withholding += form.federal_withheld

    schedule_c_expenses = ZERO
    if income.schedule_c is not None:
        schedule_c_expenses = income.schedule_c.total(config.mileage_rate)

    # A Schedule C loss does not offset other income in this estimator
    net_self_employment_income = max(
        ZERO, gross_self_employment_income - schedule_c_expenses
    )

    gross_income = (
        total_wages + total_interest + total_dividends + net_self_employment_income
    )

    return IncomeSummary(
        total_wages=total_wages,
        total_interest=total_interest,
        total_tax_exempt_interest=total_tax_exempt_interest,
        total_dividends=total_dividends,
        total_qualified_dividends=total_qualified_dividends,
        gross_self_employment_income=gross_self_employment_income,
        schedule_c_expenses=schedule_c_expenses,
        net_self_employment_income=net_self_employment_income,
        gross_income=gross_income,
        earned_income=total_wages + net_self_employment_income,
        investment_income=total_interest + total_tax_exempt_interest + total_dividends,
        federal_withholding=federal_withholding,
    )
