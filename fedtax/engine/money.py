"""Decimal helpers shared by the calculation engine."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

ZERO = Decimal("0")
CENT = Decimal("0.01")


def round_cents(amount: Decimal) -> Decimal:
    """Round a dollar amount to cents, halves away from zero."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def clamp(amount: Decimal, upper: Decimal | None = None) -> Decimal:
    """Floor an amount at zero and optionally cap it.

    Example:
        >>> clamp(Decimal("3000"), Decimal("2500"))
        Decimal('2500')
        >>> clamp(Decimal("-5"))
        Decimal('0')
    """
    floored = max(ZERO, amount)
    if upper is None:
        return floored
    return min(floored, upper)
