from decimal import Decimal
from enum import Enum


class MetalType(str, Enum):
    gold = "gold"
    silver = "silver"


class RateSource(str, Enum):
    manual = "manual"
    api = "api"


class ChargeType(str, Enum):
    per_gram = "perGram"
    fixed_per_item = "fixedPerItem"


class ItemType(str, Enum):
    gold = "gold"
    silver = "silver"
    other = "other"


# Fineness relative to the pure quotation of each metal
PURITY_MULTIPLIERS = {
    "24K": Decimal("1.0"),
    "22K": Decimal("0.916"),
    "18K": Decimal("0.75"),
    "Standard": Decimal("1.0"),
    "Sterling": Decimal("0.925"),
}
