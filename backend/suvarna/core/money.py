"""
Decimal helpers for currency and weights.

Money is rounded to two places with ROUND_HALF_UP at every line-item
boundary; floats are routed through ``str`` so 0.1 stays 0.1.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from suvarna.core.errors import ValidationError

CENT = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(value: Any, field: str = "value") -> Decimal:
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool) or value is None:
        raise ValidationError(f"{field} must be a number", field=field)
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, ValueError):
            raise ValidationError(f"{field} must be a number, got {value!r}", field=field)
    if not result.is_finite():
        raise ValidationError(f"{field} must be a finite number", field=field)
    return result


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


# Largest value a Numeric(10, 2) column holds
MAX_AMOUNT = Decimal("99999999.99")


def positive_money(value: Decimal, field: str = "amount") -> Decimal:
    """Round to the cent, then require 0 < amount <= MAX_AMOUNT"""
    if not value.is_finite():
        raise ValueError(f"{field} must be a positive amount")
    # Checked before quantize, which fails past the context precision
    if value >= MAX_AMOUNT + CENT:
        raise ValueError(f"{field} must not exceed {MAX_AMOUNT}")
    rounded = round_money(value)
    if rounded <= 0:
        raise ValueError(f"{field} must be a positive amount")
    if rounded > MAX_AMOUNT:
        raise ValueError(f"{field} must not exceed {MAX_AMOUNT}")
    return rounded
