"""
Fixed-precision money helpers.

Every amount in the ledger is a ``Decimal`` quantized to cents with
ROUND_HALF_UP (half away from zero). Settlement checks always compare
rounded values so float noise never leaves a debt open.
"""
from decimal import Decimal, ROUND_HALF_UP, getcontext
from typing import Iterable, Union

getcontext().prec = 28
CENTS = Decimal("0.01")
ZERO = Decimal("0.00")

MoneyLike = Union[Decimal, int, float, str]


def to_money(value: MoneyLike) -> Decimal:
    """Coerce ``value`` to Decimal without going through binary float."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round2(value: MoneyLike) -> Decimal:
    """Round to 2 decimal places, half away from zero."""
    return to_money(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def money_sum(values: Iterable[MoneyLike]) -> Decimal:
    total = ZERO
    for v in values:
        total += to_money(v)
    return round2(total)


def remaining(paid: MoneyLike, owed: MoneyLike) -> Decimal:
    """Unpaid part of a share, never negative."""
    left = round2(owed) - round2(paid)
    return left if left > ZERO else ZERO


def is_settled(paid: MoneyLike, owed: MoneyLike) -> bool:
    return round2(paid) >= round2(owed)
