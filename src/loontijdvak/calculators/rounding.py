"""Currency rounding and amount coercion."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from loontijdvak.errors import ValidationError

CENTS = Decimal("0.01")


def round2(amount: Decimal) -> Decimal:
    """Round half away from zero to 2 decimal places.

    Decimal's ROUND_HALF_UP rounds ties away from zero for negative values too.
    """
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def to_decimal(value: Any, name: str = "amount") -> Decimal:
    """Coerce a numeric input to Decimal, rejecting non-numeric values."""
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be numeric", {name: value})
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            # str() first so floats keep their shortest repr (0.1, not 0.1000000000000000055)
            result = Decimal(str(value))
        except InvalidOperation:
            raise ValidationError(f"{name} must be numeric", {name: value}) from None
    else:
        raise ValidationError(f"{name} must be numeric", {name: repr(value)})
    if not result.is_finite():
        raise ValidationError(f"{name} must be a finite number", {name: str(value)})
    return result


def to_non_negative_decimal(value: Any, name: str = "amount") -> Decimal:
    result = to_decimal(value, name)
    if result < 0:
        raise ValidationError(f"{name} must not be negative", {name: str(value)})
    return result
