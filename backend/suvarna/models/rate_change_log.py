from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, Integer, Numeric, String

from suvarna.models.base import Base


class RateChangeLog(Base):
    """Audit trail of supersessions: one row each time an active rate is replaced"""
    __tablename__ = "rate_change_logs"

    id = Column(Integer, primary_key=True, index=True)
    metal_type = Column(String(20), nullable=False, index=True)
    purity = Column(String(50), nullable=False, index=True)
    old_rate_per_gram = Column(Numeric(10, 2), nullable=False)
    new_rate_per_gram = Column(Numeric(10, 2), nullable=False)
    source = Column(String(20), nullable=False)
    changed_by = Column(String(255), nullable=True)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
