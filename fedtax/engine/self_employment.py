"""Self-employment tax on net Schedule C profit.

The flat SE rate applies to all net earnings. The Social Security wage base
is not modeled, so very high SE profit is overtaxed relative to Schedule SE.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from fedtax.engine.money import ZERO, round_cents
from fedtax.tax.year_config import TaxYearConfig


@dataclass(frozen=True)
class SelfEmploymentTaxResult:
    """Result of the SE tax computation.

    Attributes:
        net_earnings: Net profit times the net-earnings multiplier.
        self_employment_tax: SE tax owed, rounded to cents.
        deductible_portion: Half of SE tax, deductible above the line.
    """

    net_earnings: Decimal
    self_employment_tax: Decimal
    deductible_portion: Decimal


def calculate_self_employment_tax(
    net_profit: Decimal, config: TaxYearConfig
) -> SelfEmploymentTaxResult:
    """Calculate SE tax from net self-employment profit.

    Args:
        net_profit: Net Schedule C profit (before the 92.35% multiplier).
        config: Tax year tables.

    Returns:
        SelfEmploymentTaxResult; all zero when there is no profit.

    Example:
        >>> calculate_self_employment_tax(Decimal("40000"), config).self_employment_tax
        Decimal('5651.82')
    """
    net_earnings = net_profit * config.se_net_earnings_multiplier
    if net_earnings <= ZERO:
        return SelfEmploymentTaxResult(
            net_earnings=ZERO, self_employment_tax=ZERO, deductible_portion=ZERO
        )

    se_tax = round_cents(net_earnings * config.se_tax_rate)
    return SelfEmploymentTaxResult(
        net_earnings=net_earnings,
        self_employment_tax=se_tax,
        deductible_portion=round_cents(se_tax * config.se_deduction_rate),
    )
