"""
Money helpers.

Amounts are Decimal inside the application. On the wire they are plain JSON
numbers, integral amounts as ints, so ``800`` goes out as ``800`` and the
browser sends back exactly what it received.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Union


ZERO = Decimal("0")
CENT = Decimal("0.01")


def parse_money(value: Any) -> Decimal:
    """
    Coerce a stored or submitted amount to Decimal.

    Missing, non-numeric, NaN and infinite values count as zero, the way the
    storefront has always treated a product without a usable price.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float, str)):
        try:
            number = Decimal(str(value).strip())
        except InvalidOperation:
            return ZERO
    else:
        return ZERO
    return number if number.is_finite() else ZERO


def round_money(value: Decimal) -> Decimal:
    """Round half-up to whole cents."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def money_to_json(value: Decimal) -> Union[int, float]:
    if value == value.to_integral_value():
        return int(value)
    return float(value)
