"""
Coin unit conversion.

Balances and transfer values travel as integer nano units (10^-9 coin).
"""

from decimal import Decimal, InvalidOperation
from typing import Union

from ..runtime.errors import InvalidOperatorInputError

NANO = Decimal(10) ** 9


def to_nano(amount: Union[str, int, Decimal]) -> int:
    """
    Convert a coin amount to nano units.

    Raises:
        InvalidOperatorInputError: Negative, non-numeric, or finer than one nano unit
    """
    try:
        value = Decimal(str(amount).strip())
    except InvalidOperation as e:
        raise InvalidOperatorInputError(f"Invalid amount: {amount}", cause=e)
    if not value.is_finite() or value < 0:
        raise InvalidOperatorInputError(f"Invalid amount: {amount}")
    nano = value * NANO
    if nano != nano.to_integral_value():
        raise InvalidOperatorInputError(f"Amount has more than 9 decimal places: {amount}")
    return int(nano)


def from_nano(value: int) -> str:
    """Format nano units as a coin amount without trailing zeros."""
    amount = Decimal(int(value)) / NANO
    text = format(amount, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


__all__ = ["to_nano", "from_nano"]
