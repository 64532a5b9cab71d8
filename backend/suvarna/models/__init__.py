from .base import Base
from .rate_record import RateRecord
from .rate_change_log import RateChangeLog
from .labour_charge import LabourCharge
from .invoice import Invoice, InvoiceLineItem
from .invoice_counter import InvoiceCounter

__all__ = ["Base", "RateRecord", "RateChangeLog", "LabourCharge", "Invoice", "InvoiceLineItem", "InvoiceCounter"]
