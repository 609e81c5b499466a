"""Rounding helpers for currency amounts and percentages.

Amounts are carried as floats (that's what the JSON data holds). Sums are
accumulated as ``Decimal`` and rounded on the way out, so 0.1 + 0.2 is 0.3
and 2.675 rounds to 2.68 rather than the 2.67 that ``round()`` gives for its
binary approximation.

NaN, infinities and anything else that isn't a finite number raise
``InvalidAmountError`` on the way in.
"""
from decimal import Decimal, InvalidOperation, ROUND_DOWN, ROUND_HALF_UP
from typing import Iterable, Union

from fintrack.errors import InvalidAmountError

CENT = Decimal("0.01")
TENTH = Decimal("0.1")

Number = Union[int, float, Decimal]


def to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            # str() gives the shortest repr that round-trips, i.e. what a user typed
            amount = Decimal(str(value))
        except InvalidOperation:
            raise InvalidAmountError(f"Invalid amount: {value!r}") from None
    if not amount.is_finite():
        raise InvalidAmountError(f"Invalid amount: {value!r}")
    return amount


def round_cents(value: Number) -> float:
    """Round to two decimals, halves away from zero."""
    return float(to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP))


def truncate_tenths(value: Number) -> float:
    """Cut to one decimal toward zero, so 99.96 stays below 100."""
    return float(to_decimal(value).quantize(TENTH, rounding=ROUND_DOWN))


def total(amounts: Iterable[Number]) -> float:
    """Sum exactly, then round to cents."""
    return round_cents(sum((to_decimal(a) for a in amounts), Decimal(0)))
