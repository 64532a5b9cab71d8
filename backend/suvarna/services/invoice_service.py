"""
Invoice creation: prices every line from the current ledger, totals the
invoice and stores the result as a frozen snapshot.
"""
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from suvarna.core.config import settings
from suvarna.core.errors import NotFoundError, ValidationError
from suvarna.core.money import ZERO
from suvarna.models.invoice import Invoice, InvoiceLineItem
from suvarna.services.invoice_number_service import generate_invoice_number
from suvarna.services.pricing_service import PricedLineItem, Weight, price_invoice, price_line_item

logger = logging.getLogger(__name__)

PAYMENT_MODES = {"cash", "card", "upi", "metalExchange", "bankTransfer", "other"}


def _parse_weight(raw: Any) -> Weight:
    if isinstance(raw, Weight):
        return raw
    if isinstance(raw, dict):
        if "value" not in raw:
            raise ValidationError("weight.value is required", field="weight.value")
        return Weight(value=raw["value"], unit=raw.get("unit", "g"))
    if raw is None:
        raise ValidationError("weight is required", field="weight")
    return Weight(value=raw)


def price_items(db: Session, items: List[Dict[str, Any]]) -> List[PricedLineItem]:
    """
    Price raw line dicts with keys item_type, purity, weight and optionally
    labour_charge_id / rate_per_gram.
    """
    if not items:
        raise ValidationError("An invoice needs at least one line item", field="line_items")
    priced = []
    for item in items:
        priced.append(price_line_item(
            db,
            item.get("item_type"),
            item.get("purity"),
            _parse_weight(item.get("weight")),
            labour_charge_id=item.get("labour_charge_id"),
            rate_per_gram=item.get("rate_per_gram"),
        ))
    return priced


def create_invoice(
    db: Session,
    customer_name: str,
    items: List[Dict[str, Any]],
    gst_percent: Optional[Decimal] = None,
    amount_paid: Any = ZERO,
    payment_mode: str = "cash",
    customer_phone: Optional[str] = None,
    prefix: Optional[str] = None,
) -> Invoice:
    """
    Create and persist an invoice.

    Line items keep the rate and labour amount used at creation time; later
    rate or labour-charge changes never touch them.
    """
    name = (customer_name or "").strip()
    if not name:
        raise ValidationError("customer_name is required", field="customer_name")
    if payment_mode not in PAYMENT_MODES:
        raise ValidationError(f"Unknown payment mode {payment_mode!r}", field="payment_mode")

    priced = price_items(db, items)
    totals = price_invoice(
        priced,
        settings.default_gst_percent if gst_percent is None else gst_percent,
        amount_paid,
    )
    rates_source = "manual" if all(p.item_type == "other" for p in priced) else "live"

    try:
        invoice = Invoice(
            invoice_number=generate_invoice_number(db, prefix),
            customer_name=name,
            customer_phone=(customer_phone or "").strip() or None,
            subtotal=totals.subtotal,
            gst_percent=totals.gst_percent,
            cgst_percent=totals.cgst_percent,
            cgst_amount=totals.cgst_amount,
            sgst_percent=totals.sgst_percent,
            sgst_amount=totals.sgst_amount,
            gst_amount=totals.gst_amount,
            grand_total=totals.grand_total,
            payment_mode=payment_mode,
            amount_paid=totals.amount_paid,
            balance_due=totals.balance_due,
            rates_source=rates_source,
        )
        for position, (raw, line) in enumerate(zip(items, priced)):
            invoice.items.append(InvoiceLineItem(
                position=position,
                item_type=line.item_type,
                purity=line.purity,
                description=raw.get("description"),
                weight_value=line.weight_value,
                weight_unit=line.weight_unit,
                weight_in_grams=line.weight_in_grams,
                rate_per_gram=line.rate_per_gram,
                labour_charge_id=line.labour_charge_id,
                labour_charge_type=line.labour_charge_type,
                labour_charge_amount=line.labour_charge_amount,
                metal_price=line.metal_price,
                item_total=line.item_total,
            ))
        db.add(invoice)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(invoice)
    logger.info("invoice %s created grand_total=%s", invoice.invoice_number, invoice.grand_total)
    return invoice


def get_invoice(db: Session, invoice_number: str) -> Invoice:
    invoice = db.query(Invoice).filter(Invoice.invoice_number == invoice_number).first()
    if invoice is None:
        raise NotFoundError(f"Invoice {invoice_number} not found")
    return invoice


def get_latest_invoice_number(db: Session) -> Optional[str]:
    latest = db.query(Invoice).order_by(Invoice.id.desc()).first()
    return latest.invoice_number if latest else None
