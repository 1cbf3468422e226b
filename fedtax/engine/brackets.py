"""Federal income tax under the progressive marginal-rate schedule."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from fedtax.engine.money import ZERO, round_cents
from fedtax.tax.year_config import FilingStatus, TaxBracket, TaxYearConfig


@dataclass(frozen=True)
class BracketSlice:
    """Tax on the slice of income that falls inside one bracket."""

    bracket: TaxBracket
    taxable_in_bracket: Decimal
    tax_in_bracket: Decimal


@dataclass(frozen=True)
class BracketTaxResult:
    """Result of bracket tax calculation.

    Attributes:
        taxable_income: Taxable income as taxed (negative input becomes 0).
        tax: Tax before credits, rounded to cents.
        marginal_rate: Rate of the highest bracket reached.
        effective_rate: Tax divided by taxable income.
        breakdown: Per-bracket slices, lowest first.
    """

    taxable_income: Decimal
    tax: Decimal
    marginal_rate: Decimal
    effective_rate: Decimal
    breakdown: tuple[BracketSlice, ...] = field(default_factory=tuple)


def calculate_bracket_tax(
    taxable_income: Decimal,
    filing_status: FilingStatus,
    config: TaxYearConfig,
) -> BracketTaxResult:
    """Calculate federal income tax using marginal brackets.

    Each bracket taxes only the income inside ``[min, max)``; iteration stops
    at the first bracket whose lower bound is at or above taxable income.

    Args:
        taxable_income: Income after deductions.
        filing_status: Filing status selecting the schedule.
        config: Tax year tables.

    Returns:
        BracketTaxResult with tax, rates, and per-bracket breakdown.

    Raises:
        TaxTableError: If the filing status has no bracket schedule.

    Example:
        >>> calculate_bracket_tax(Decimal("50000"), FilingStatus.SINGLE, TAX_YEAR_2025).tax
        Decimal('5914.00')
    """
    schedule = config.brackets_for(filing_status)
    income = max(ZERO, taxable_income)

    gross_tax = ZERO
    marginal_rate = schedule[0].rate
    breakdown: list[BracketSlice] = []

    for bracket in schedule:
        if income <= bracket.min:
            break

        upper = income if bracket.max is None else min(income, bracket.max)
        taxable_in_bracket = upper - bracket.min
        tax_in_bracket = taxable_in_bracket * bracket.rate
        gross_tax += tax_in_bracket
        marginal_rate = bracket.rate
        breakdown.append(
            BracketSlice(
                bracket=bracket,
                taxable_in_bracket=taxable_in_bracket,
                tax_in_bracket=tax_in_bracket,
            )
        )

    tax = round_cents(gross_tax)
    if income > ZERO:
        effective_rate = tax / income
    else:
        effective_rate = ZERO

    return BracketTaxResult(
        taxable_income=income,
        tax=tax,
        marginal_rate=marginal_rate,
        effective_rate=effective_rate,
        breakdown=tuple(breakdown),
    )


def tax_for_bracket(
    taxable_income: Decimal,
    filing_status: FilingStatus,
    config: TaxYearConfig,
) -> Decimal:
    """Tax before credits for a taxable income and filing status."""
    return calculate_bracket_tax(taxable_income, filing_status, config).tax
