"""
Weight units accepted on invoice line items and their gram factors.
"""
from decimal import Decimal
from typing import Any, Dict

from suvarna.core.errors import ValidationError
from suvarna.core.money import to_decimal

GRAMS_PER_UNIT: Dict[str, Decimal] = {
    "g": Decimal("1"),
    "mg": Decimal("0.001"),
    "kg": Decimal("1000"),
    "tola": Decimal("11.66"),
}


def convert_to_grams(value: Any, unit: str) -> Decimal:
    """
    Convert a weight to grams.

    Raises:
        ValidationError: unknown unit or negative weight. Unknown units are
            never treated as grams.
    """
    factor = GRAMS_PER_UNIT.get(unit)
    if factor is None:
        allowed = ", ".join(GRAMS_PER_UNIT)
        raise ValidationError(f"Unknown weight unit {unit!r}; expected one of {allowed}", field="weight.unit")
    amount = to_decimal(value, field="weight.value")
    if amount < 0:
        raise ValidationError("weight.value must not be negative", field="weight.value")
    return amount * factor
