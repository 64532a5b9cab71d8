"""
Generic serialization helpers.
No business logic, only formatting utilities.
"""
def serialize_decimal(value):
    """Decimal to a 2-place string for JSON output"""
    if value is None:
        return None
    return f"{value:.2f}"

def serialize_datetime(value):
    """datetime to ISO string for JSON output"""
    if value is None:
        return None
    return value.isoformat()

def serialize_rate(rate):
    """RateRecord to a JSON-ready dict"""
    return {
        "id": rate.id,
        "metal_type": rate.metal_type,
        "purity": rate.purity,
        "rate_per_gram": serialize_decimal(rate.rate_per_gram),
        "source": rate.source,
        "is_active": rate.is_active,
        "last_updated": serialize_datetime(rate.last_updated),
    }
