"""Apply credits against liability and settle against withholding.

Nonrefundable portions are applied first, in credit order, and each is
limited to whatever liability remains. Refundable portions then reduce the
tax below zero if they exceed it; a negative ``total_tax`` is a net credit
paid out through the refund.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from fedtax.engine.credits import CreditLine, RefundRule
from fedtax.engine.money import ZERO, round_cents


@dataclass(frozen=True)
class AppliedCredit:
    """How much of one credit was used, and how.

    Attributes:
        line: The credit as computed.
        nonrefundable_applied: Portion that offset liability.
        refundable_applied: Portion paid regardless of liability.
    """

    line: CreditLine
    nonrefundable_applied: Decimal
    refundable_applied: Decimal

    @property
    def total_applied(self) -> Decimal:
        return self.nonrefundable_applied + self.refundable_applied


@dataclass(frozen=True)
class ReconciliationResult:
    """Final tax position.

    Attributes:
        total_tax_before_credits: Bracket tax plus SE tax.
        nonrefundable_credits: Nonrefundable credit actually applied.
        tax_after_nonrefundable_credits: Liability left, never negative.
        refundable_credits: Refundable credit applied.
        total_credits: Nonrefundable applied plus refundable.
        total_tax: Liability after all credits (negative is a net credit).
        tax_liability: total_tax floored at zero, for display.
        withholding: Federal tax withheld.
        refund_or_owed: Withholding minus total tax; positive is a refund.
        is_refund: True when refund_or_owed is zero or positive.
        applied: Per-credit application detail, in application order.
    """

    total_tax_before_credits: Decimal
    nonrefundable_credits: Decimal
    tax_after_nonrefundable_credits: Decimal
    refundable_credits: Decimal
    total_credits: Decimal
    total_tax: Decimal
    tax_liability: Decimal
    withholding: Decimal
    refund_or_owed: Decimal
    is_refund: bool
    applied: tuple[AppliedCredit, ...]


def reconcile(
    bracket_tax: Decimal,
    self_employment_tax: Decimal,
    credits: tuple[CreditLine, ...] | list[CreditLine],
    withholding: Decimal,
) -> ReconciliationResult:
    """Settle liability against credits and withholding.

    Args:
        bracket_tax: Income tax from the bracket engine.
        self_employment_tax: SE tax.
        credits: Credit lines in application order.
        withholding: Total federal tax withheld.

    Returns:
        ReconciliationResult.

    Example:
        >>> result = reconcile(Decimal("5914.00"), Decimal("0"), [], Decimal("6000"))
        >>> result.refund_or_owed
        Decimal('86.00')
    """
    before = round_cents(bracket_tax + self_employment_tax)
    remaining = max(ZERO, before)

    applied: list[AppliedCredit] = []
    for line in credits:
        used = min(line.nonrefundable_amount, remaining)
        remaining -= used
        if line.refund_rule is RefundRule.FIXED:
            refundable = line.refundable_amount
        elif line.refund_rule is RefundRule.UNUSED:
            refundable = min(line.amount - used, line.refundable_amount)
        else:
            refundable = ZERO
        applied.append(
            AppliedCredit(
                line=line, nonrefundable_applied=used, refundable_applied=refundable
            )
        )

    nonrefundable_total = sum((item.nonrefundable_applied for item in applied), ZERO)
    refundable_total = sum((item.refundable_applied for item in applied), ZERO)
    total_tax = remaining - refundable_total
    refund_or_owed = round_cents(withholding - total_tax)

    return ReconciliationResult(
        total_tax_before_credits=before,
        nonrefundable_credits=round_cents(nonrefundable_total),
        tax_after_nonrefundable_credits=round_cents(remaining),
        refundable_credits=round_cents(refundable_total),
        total_credits=round_cents(nonrefundable_total + refundable_total),
        total_tax=round_cents(total_tax),
        tax_liability=round_cents(max(ZERO, total_tax)),
        withholding=withholding,
        refund_or_owed=refund_or_owed,
        is_refund=refund_or_owed >= ZERO,
        applied=tuple(applied),
    )
