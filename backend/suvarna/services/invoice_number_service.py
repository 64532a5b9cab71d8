"""
Centralized invoice number generation.
Issues sequential numbers per prefix using InvoiceCounter.
"""
from sqlalchemy.orm import Session

from suvarna.core.config import settings
from suvarna.core.errors import ValidationError
from suvarna.models.invoice_counter import InvoiceCounter


def get_next_invoice_seq(db: Session, prefix: str) -> int:
    """
    Next sequence number for a prefix, creating the counter if missing.

    Uses with_for_update() so concurrent invoices never share a number.
    Does NOT commit; the caller commits together with the invoice.
    """
    counter = db.query(InvoiceCounter).filter(
        InvoiceCounter.prefix == prefix
    ).with_for_update().first()

    if not counter:
        counter = InvoiceCounter(prefix=prefix, next_seq=1)
        db.add(counter)
        db.flush()

    current_seq = counter.next_seq
    counter.next_seq += 1
    return current_seq


def generate_invoice_number(db: Session, prefix: str = None) -> str:
    """
    Invoice number formatted as {PREFIX}-{SEQ:06d}, e.g. 'INV-000001'.
    """
    prefix = (prefix or settings.invoice_prefix).strip().upper()
    if not prefix or not prefix.isalnum():
        raise ValidationError(f"Invalid invoice prefix: {prefix!r}", field="prefix")

    seq = get_next_invoice_seq(db, prefix)
    return f"{prefix}-{str(seq).zfill(6)}"
