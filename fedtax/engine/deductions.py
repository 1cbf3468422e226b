"""Standard versus itemized deduction selection."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from fedtax.engine.money import ZERO, round_cents
from fedtax.returns.models import DeductionInputs
from fedtax.tax.year_config import FilingStatus, TaxYearConfig


class DeductionMethod(str, Enum):
    """Which deduction path was used."""

    STANDARD = "standard"
    ITEMIZED = "itemized"


@dataclass(frozen=True)
class ItemizedDeductionBreakdown:
    """Itemized deduction components after limits.

    Attributes:
        mortgage_interest: Home mortgage interest (uncapped).
        salt: State and local taxes, capped at the SALT limit.
        charitable_contributions: Charitable gifts (uncapped here).
        medical_floor: AGI times the medical floor rate.
        medical_expenses: Medical expenses in excess of the floor.
        total: Sum of the components.
    """

    mortgage_interest: Decimal
    salt: Decimal
    charitable_contributions: Decimal
    medical_floor: Decimal
    medical_expenses: Decimal
    total: Decimal


@dataclass(frozen=True)
class DeductionResult:
    """Result of deduction selection.

    Attributes:
        method: Standard or itemized.
        amount: The deduction amount to use.
        standard_amount: The standard deduction for this filer.
        itemized_amount: The total itemized deductions.
        itemized: Component breakdown of the itemized total.
    """

    method: DeductionMethod
    amount: Decimal
    standard_amount: Decimal
    itemized_amount: Decimal
    itemized: ItemizedDeductionBreakdown


def calculate_standard_deduction(
    filing_status: FilingStatus,
    claimed_as_dependent: bool,
    earned_income: Decimal,
    config: TaxYearConfig,
) -> Decimal:
    """Standard deduction, using the reduced formula for dependents.

    A dependent gets the greater of the dependent minimum or earned income
    plus the add-on, never more than the ordinary amount for the status.

    Raises:
        TaxTableError: If the filing status has no standard deduction entry.

    Example:
        >>> calculate_standard_deduction(FilingStatus.SINGLE, True, Decimal("0"), config)
        Decimal('1350')
    """
    full_deduction = config.standard_deduction_for(filing_status)
    if not claimed_as_dependent:
        return full_deduction

    dependent_deduction = max(
        config.dependent_standard_deduction_minimum,
        earned_income + config.dependent_standard_deduction_addon,
    )
    return min(dependent_deduction, full_deduction)


def calculate_itemized_deductions(
    inputs: DeductionInputs, agi: Decimal, config: TaxYearConfig
) -> ItemizedDeductionBreakdown:
    """Total itemized deductions with the SALT cap and medical floor applied.

    The medical floor is taken on AGI as given. A negative AGI yields a
    negative floor, which lets the full medical expense (and more) through.

    Args:
        inputs: Itemizable expenses.
        agi: Adjusted Gross Income (may be negative).
        config: Tax year tables.

    Returns:
        ItemizedDeductionBreakdown with the components and total.
    """
    salt = min(inputs.salt_taxes, config.salt_cap)
    medical_floor = round_cents(agi * config.medical_expense_floor_rate)
    medical = max(ZERO, inputs.medical_expenses - medical_floor)

    total = round_cents(
        inputs.mortgage_interest + salt + inputs.charitable_contributions + medical
    )

    return ItemizedDeductionBreakdown(
        mortgage_interest=inputs.mortgage_interest,
        salt=salt,
        charitable_contributions=inputs.charitable_contributions,
        medical_floor=medical_floor,
        medical_expenses=medical,
        total=total,
    )


def select_deduction(
    filing_status: FilingStatus,
    claimed_as_dependent: bool,
    earned_income: Decimal,
    inputs: DeductionInputs,
    agi: Decimal,
    config: TaxYearConfig,
) -> DeductionResult:
    """Compute both deduction paths and choose the larger.

    Itemizing wins only when strictly larger; a tie keeps the standard
    deduction.

    Example:
        >>> result = select_deduction(FilingStatus.SINGLE, False, income, inputs, agi, config)
        >>> result.method
        <DeductionMethod.STANDARD: 'standard'>
    """
    standard_amount = calculate_standard_deduction(
        filing_status, claimed_as_dependent, earned_income, config
    )
    itemized = calculate_itemized_deductions(inputs, agi, config)

    if itemized.total > standard_amount:
        method = DeductionMethod.ITEMIZED
        amount = itemized.total
    else:
        method = DeductionMethod.STANDARD
        amount = standard_amount

    return DeductionResult(
        method=method,
        amount=amount,
        standard_amount=standard_amount,
        itemized_amount=itemized.total,
        itemized=itemized,
    )
