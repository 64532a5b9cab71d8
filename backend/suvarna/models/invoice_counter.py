from sqlalchemy import Column, Integer, String, UniqueConstraint
from suvarna.models.base import Base


class InvoiceCounter(Base):
	__tablename__ = "invoice_counters"
	__table_args__ = (
		UniqueConstraint("prefix", name="uq_invoice_counters_prefix"),
	)

	id = Column(Integer, primary_key=True, index=True)
	# prefix: 'INV' by default, configurable per shop
	prefix = Column(String(20), nullable=False, index=True)
	next_seq = Column(Integer, nullable=False, default=1)
