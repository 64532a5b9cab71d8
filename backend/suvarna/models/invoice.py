from datetime import datetime, timezone

from sqlalchemy import Column, Integer, Numeric, ForeignKey, DateTime, String, UniqueConstraint
from sqlalchemy.orm import relationship

from suvarna.models.base import Base


class Invoice(Base):
    __tablename__ = "invoices"
    __table_args__ = (
        UniqueConstraint("invoice_number", name="uq_invoices_invoice_number"),
    )

    id = Column(Integer, primary_key=True, index=True)
    invoice_number = Column(String(50), nullable=False, index=True)

    # Customer snapshot at billing time
    customer_name = Column(String(255), nullable=False)
    customer_phone = Column(String(50), nullable=True)

    subtotal = Column(Numeric(12, 2), nullable=False, default=0)
    gst_percent = Column(Numeric(5, 2), nullable=False, default=0)
    cgst_percent = Column(Numeric(5, 2), nullable=False, default=0)
    cgst_amount = Column(Numeric(12, 2), nullable=False, default=0)
    sgst_percent = Column(Numeric(5, 2), nullable=False, default=0)
    sgst_amount = Column(Numeric(12, 2), nullable=False, default=0)
    gst_amount = Column(Numeric(12, 2), nullable=False, default=0)
    grand_total = Column(Numeric(12, 2), nullable=False, default=0)

    payment_mode = Column(String(30), nullable=False, default="cash")
    amount_paid = Column(Numeric(12, 2), nullable=False, default=0)
    # Negative when the customer overpaid (store credit)
    balance_due = Column(Numeric(12, 2), nullable=False, default=0)

    # "live" | "manual"
    rates_source = Column(String(10), nullable=False, default="manual")
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    items = relationship(
        "InvoiceLineItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceLineItem.position",
    )


class InvoiceLineItem(Base):
    """Frozen pricing snapshot; never recomputed from current rates"""
    __tablename__ = "invoice_line_items"

    id = Column(Integer, primary_key=True, index=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)

    item_type = Column(String(20), nullable=False)  # gold, silver, other
    purity = Column(String(50), nullable=False)
    description = Column(String(255), nullable=True)
    weight_value = Column(Numeric(14, 4), nullable=False)
    weight_unit = Column(String(10), nullable=False)
    weight_in_grams = Column(Numeric(14, 4), nullable=False)
    rate_per_gram = Column(Numeric(10, 2), nullable=False)
    labour_charge_id = Column(Integer, ForeignKey("labour_charges.id", ondelete="SET NULL"), nullable=True)
    labour_charge_type = Column(String(20), nullable=True)
    labour_charge_amount = Column(Numeric(12, 2), nullable=False, default=0)
    metal_price = Column(Numeric(12, 2), nullable=False, default=0)
    item_total = Column(Numeric(12, 2), nullable=False, default=0)

    invoice = relationship("Invoice", back_populates="items")
