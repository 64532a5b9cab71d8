"""
Error taxonomy shared by the rate ledger, labour charges and pricing.

Every error fails only the operation that raised it.
"""
from typing import Optional

from pydantic import ValidationError as PydanticValidationError


class LedgerError(Exception):
    """Base class for every error raised by the ledger and pricing services."""


class ValidationError(LedgerError, ValueError):
    """Malformed input, rejected before any state mutation."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NotFoundError(LedgerError, LookupError):
    """No active rate for a pair, or no labour charge / invoice with that id."""


class UpstreamUnavailableError(LedgerError):
    """The external price feed failed or timed out."""


class ConcurrencyConflict(LedgerError):
    """The storage layer rejected a second active record for the same pair."""


def from_pydantic(exc: PydanticValidationError) -> ValidationError:
    """Translate the first pydantic error into a ValidationError naming its field."""
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ())) or None
    message = first.get("msg", "Invalid input")
    if field:
        message = f"{field}: {message}"
    return ValidationError(message, field=field)
