from datetime import datetime, timezone
from sqlalchemy import Boolean, Column, DateTime, Integer, Numeric, String, Text

from suvarna.models.base import Base


class LabourCharge(Base):
    __tablename__ = "labour_charges"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    # "perGram" | "fixedPerItem"
    charge_type = Column(String(20), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    description = Column(Text, nullable=True)
    # Soft delete: inactive charges stay referenced by historical invoices
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))
