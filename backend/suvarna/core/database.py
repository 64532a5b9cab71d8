from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from suvarna.core.config import settings
from suvarna.models.base import Base


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


engine = create_engine(settings.database_url, **_engine_kwargs(settings.database_url))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db() -> None:
    # Create tables in dev/test without running Alembic
    if settings.env in {"dev", "test"}:
        import suvarna.models  # noqa: F401  registers every table on Base.metadata

        Base.metadata.create_all(bind=engine)
