"""
Seed script for jewelry shop demo data
"""
import logging

from sqlalchemy.orm import Session

from suvarna.models.labour_charge import LabourCharge
from suvarna.services.labour_charge_service import create_labour_charge
from suvarna.services.rate_feed import StaticRateFeed
from suvarna.services.rate_refresh import RateRefreshJob

logger = logging.getLogger(__name__)

DEFAULT_LABOUR_CHARGES = [
    # name, charge type, amount
    ("Basic Making", "perGram", 200),
    ("Premium Making", "perGram", 450),
    ("Hallmarking", "fixedPerItem", 45),
    ("Stone Setting", "fixedPerItem", 500),
]


def seed_demo(db: Session):
    """Seed labour charges and, on an empty ledger, the static quotations"""
    if db.query(LabourCharge).first() is None:
        for name, charge_type, amount in DEFAULT_LABOUR_CHARGES:
            create_labour_charge(db, name, charge_type, amount)
            logger.info("seeded labour charge %s", name)

    job = RateRefreshJob(feed=StaticRateFeed())
    job.initialize_rates(db)
