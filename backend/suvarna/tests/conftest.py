import os

# Settings are read at import time; never reach for the dev Postgres in tests
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENV", "test")
os.environ.setdefault("RATE_FEED_URL", "")

from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from suvarna.models import Base
from suvarna.services import labour_charge_service, rate_ledger


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'ledger.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def gold_rates(db):
    rate_ledger.upsert_rate(db, "gold", "24K", Decimal("6500"))
    rate_ledger.upsert_rate(db, "gold", "22K", Decimal("6000"))
    return db


@pytest.fixture
def basic_making(db):
    return labour_charge_service.create_labour_charge(db, "Basic Making", "perGram", 200)


@pytest.fixture
def stone_setting(db):
    return labour_charge_service.create_labour_charge(db, "Stone Setting", "fixedPerItem", 500)
