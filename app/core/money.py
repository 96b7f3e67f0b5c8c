"""Decimal money helpers.

Amounts are whole currency units (the marketplace sells in VND). All
arithmetic stays in ``Decimal``; floats never touch money values.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated, Any

from pydantic.functional_serializers import PlainSerializer

ZERO = Decimal("0")
HUNDRED = Decimal("100")

_WHOLE_UNIT = Decimal("1")
_ONE_DECIMAL = Decimal("0.1")


def to_decimal(value: Any) -> Decimal:
    """Coerce a database or settings value to ``Decimal``.

    Strings and ints convert exactly; floats go through ``str`` so that
    drivers returning REAL columns do not leak binary noise.
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round_money(amount: Decimal) -> Decimal:
    """Round to the nearest whole currency unit, half up."""
    return amount.quantize(_WHOLE_UNIT, rounding=ROUND_HALF_UP)


def round_one_decimal(value: Decimal) -> Decimal:
    return value.quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP)


def _serialize_money(v: Decimal) -> int | str:
    if v == v.to_integral_value():
        return int(v)
    # Fractional amounts keep their exact digits
    return str(v)


def _serialize_rate(v: Decimal) -> float:
    return float(v)


# Whole amounts are JSON numbers, fractional ones decimal strings.
Money = Annotated[Decimal, PlainSerializer(_serialize_money, return_type=int | str)]
Rate = Annotated[Decimal, PlainSerializer(_serialize_rate, return_type=float)]
