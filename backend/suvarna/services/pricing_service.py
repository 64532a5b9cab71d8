"""
Pricing of invoice line items and invoice totals.

Nothing here writes: rates and labour charges are only read, and every call
prices from the currently active rate with no caching.

Rounding: metal price and labour amount are rounded to 2 places
(ROUND_HALF_UP) per line, item_total is their sum, GST is rounded once on the
subtotal, and grand total / balance due are sums of rounded values.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_DOWN, Decimal
from typing import Any, Iterable, Optional

from sqlalchemy.orm import Session

from suvarna.core.errors import NotFoundError, ValidationError
from suvarna.core.metals import ChargeType, ItemType
from suvarna.core.money import CENT, ZERO, round_money, to_decimal
from suvarna.core.weight_units import convert_to_grams
from suvarna.models.labour_charge import LabourCharge
from suvarna.services import labour_charge_service, rate_ledger

TWO = Decimal("2")
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class Weight:
    value: Decimal
    unit: str = "g"


@dataclass(frozen=True)
class PricedLineItem:
    item_type: str
    purity: str
    weight_value: Decimal
    weight_unit: str
    weight_in_grams: Decimal
    rate_per_gram: Decimal
    metal_price: Decimal
    labour_charge_id: Optional[int]
    labour_charge_type: Optional[str]
    labour_charge_amount: Decimal
    item_total: Decimal


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: Decimal
    gst_percent: Decimal
    gst_amount: Decimal
    cgst_percent: Decimal
    cgst_amount: Decimal
    sgst_percent: Decimal
    sgst_amount: Decimal
    grand_total: Decimal
    amount_paid: Decimal
    balance_due: Decimal


def labour_charge_amount(charge: LabourCharge, weight_in_grams: Decimal) -> Decimal:
    amount = to_decimal(charge.amount, field="labour_charge.amount")
    if charge.charge_type == ChargeType.fixed_per_item.value:
        return round_money(amount)
    if charge.charge_type == ChargeType.per_gram.value:
        return round_money(amount * weight_in_grams)
    raise ValidationError(f"Unknown labour charge type {charge.charge_type!r}", field="labour_charge.charge_type")


def compute_line_item(
    item_type: str,
    purity: str,
    weight: Weight,
    rate_per_gram: Any,
    labour_charge: Optional[LabourCharge] = None,
) -> PricedLineItem:
    """Pure arithmetic for one line from an already resolved rate and charge"""
    rate = to_decimal(rate_per_gram, field="rate_per_gram")
    if rate <= 0:
        raise ValidationError("rate_per_gram must be a positive amount", field="rate_per_gram")
    grams = convert_to_grams(weight.value, weight.unit)
    metal_price = round_money(grams * rate)
    labour = labour_charge_amount(labour_charge, grams) if labour_charge is not None else ZERO
    return PricedLineItem(
        item_type=item_type,
        purity=purity,
        weight_value=to_decimal(weight.value, field="weight.value"),
        weight_unit=weight.unit,
        weight_in_grams=grams,
        rate_per_gram=rate,
        metal_price=metal_price,
        labour_charge_id=labour_charge.id if labour_charge is not None else None,
        labour_charge_type=labour_charge.charge_type if labour_charge is not None else None,
        labour_charge_amount=round_money(labour),
        item_total=metal_price + round_money(labour),
    )


def price_line_item(
    db: Session,
    item_type: Any,
    purity: str,
    weight: Weight,
    labour_charge_id: Optional[int] = None,
    rate_per_gram: Optional[Any] = None,
) -> PricedLineItem:
    """
    Price one line from the active rate for (item_type, purity).

    Gold and silver always use the ledger's active rate. ``other`` items have
    no rate series, so the caller supplies rate_per_gram for them.

    Raises:
        ValidationError: unknown item type / unit, negative weight, missing
            rate for an ``other`` item.
        NotFoundError: no active rate for the pair, or the labour charge does
            not exist or is no longer offered.
    """
    try:
        kind = ItemType(item_type.value if isinstance(item_type, ItemType) else item_type)
    except ValueError:
        raise ValidationError(f"Unknown item type {item_type!r}", field="item_type")
    if not purity:
        raise ValidationError("purity must not be empty", field="purity")

    if kind is ItemType.other:
        if rate_per_gram is None:
            raise ValidationError("rate_per_gram is required for 'other' items", field="rate_per_gram")
        rate = rate_per_gram
    else:
        rate = rate_ledger.get_rate(db, kind.value, purity).rate_per_gram

    charge = None
    if labour_charge_id is not None:
        charge = labour_charge_service.get_labour_charge(db, labour_charge_id)
        if not charge.is_active:
            raise NotFoundError(f"Labour charge {labour_charge_id} is no longer active")

    return compute_line_item(kind.value, purity, weight, rate, charge)


def split_gst(gst_percent: Decimal, gst_amount: Decimal):
    """Equal CGST/SGST halves; the odd paisa, if any, goes to SGST"""
    cgst_amount = (gst_amount / TWO).quantize(CENT, rounding=ROUND_DOWN)
    return gst_percent / TWO, cgst_amount, gst_percent / TWO, gst_amount - cgst_amount


def price_invoice(line_items: Iterable[Any], gst_percent: Any, amount_paid: Any = ZERO) -> InvoiceTotals:
    """
    Aggregate priced lines. Overpayment is allowed and yields a negative
    balance_due (a credit for the customer).
    """
    gst_pct = to_decimal(gst_percent, field="gst_percent")
    if gst_pct < 0:
        raise ValidationError("gst_percent must not be negative", field="gst_percent")
    paid = to_decimal(amount_paid, field="amount_paid")
    if paid < 0:
        raise ValidationError("amount_paid must not be negative", field="amount_paid")

    subtotal = ZERO
    for item in line_items:
        total = item.item_total if isinstance(item, PricedLineItem) else item
        subtotal += to_decimal(total, field="item_total")
    subtotal = round_money(subtotal)

    gst_amount = round_money(subtotal * gst_pct / HUNDRED)
    cgst_pct, cgst_amount, sgst_pct, sgst_amount = split_gst(gst_pct, gst_amount)
    grand_total = subtotal + gst_amount
    return InvoiceTotals(
        subtotal=subtotal,
        gst_percent=gst_pct,
        gst_amount=gst_amount,
        cgst_percent=cgst_pct,
        cgst_amount=cgst_amount,
        sgst_percent=sgst_pct,
        sgst_amount=sgst_amount,
        grand_total=grand_total,
        amount_paid=round_money(paid),
        balance_due=grand_total - round_money(paid),
    )
