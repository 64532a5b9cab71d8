from datetime import datetime, timezone
from sqlalchemy import Boolean, Column, DateTime, Index, Integer, Numeric, String, text

from suvarna.models.base import Base


def _utcnow():
    return datetime.now(timezone.utc)


class RateRecord(Base):
    __tablename__ = "rate_records"
    __table_args__ = (
        # At most one active quotation per (metal_type, purity)
        Index(
            "uq_rate_records_active_pair",
            "metal_type",
            "purity",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
        Index("ix_rate_records_pair_created", "metal_type", "purity", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)

    # "gold" | "silver"
    metal_type = Column(String(20), nullable=False)
    # "24K", "22K", "18K", "Standard", "Sterling", ...
    purity = Column(String(50), nullable=False)

    rate_per_gram = Column(Numeric(10, 2), nullable=False)

    # "manual" | "api"
    source = Column(String(20), nullable=False, default="manual")
    is_active = Column(Boolean, nullable=False, default=True)

    last_updated = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    def __repr__(self):
        state = "active" if self.is_active else "superseded"
        return f"<RateRecord {self.metal_type}/{self.purity} {self.rate_per_gram} {state}>"
