"""
Refresh of the rate ledger from the external price feed.

The job is triggered by an outside scheduler or on demand. Only one refresh
runs at a time per process; an overlapping call returns immediately as
skipped. A failed feed call leaves every active rate untouched.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from suvarna.core.database import SessionLocal
from suvarna.core.errors import UpstreamUnavailableError
from suvarna.core.metals import RateSource
from suvarna.services import rate_ledger
from suvarna.services.rate_feed import default_feed

logger = logging.getLogger(__name__)

SUCCESS = "success"
PARTIAL = "partial"
FAILED = "failed"
SKIPPED = "skipped"


@dataclass
class RefreshResult:
    outcome: str
    applied: int = 0
    failed: int = 0
    message: str = ""
    errors: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.outcome in {SUCCESS, SKIPPED}


class RateRefreshJob:
    def __init__(self, feed=None, session_factory: Callable[[], Session] = SessionLocal):
        self._feed = feed
        self._session_factory = session_factory
        self._running = threading.Lock()
        self.last_result: Optional[RefreshResult] = None
        self.last_run_at: Optional[datetime] = None

    @property
    def feed(self):
        if self._feed is None:
            self._feed = default_feed()
        return self._feed

    @property
    def is_running(self) -> bool:
        return self._running.locked()

    def get_status(self) -> dict:
        return {
            "is_running": self.is_running,
            "last_run_at": self.last_run_at,
            "last_outcome": self.last_result.outcome if self.last_result else None,
        }

    def refresh_from_external_source(self, db: Optional[Session] = None) -> RefreshResult:
        if not self._running.acquire(blocking=False):
            logger.info("rate refresh already in progress, skipping", extra={"outcome": SKIPPED})
            return RefreshResult(outcome=SKIPPED, message="Rate refresh already in progress")

        try:
            result = self._run(db)
            self.last_result = result
            self.last_run_at = datetime.now(timezone.utc)
            return result
        finally:
            self._running.release()

    def _run(self, db: Optional[Session]) -> RefreshResult:
        logger.info("starting rate refresh")
        try:
            quotes = self.feed.fetch_current_prices()
        except UpstreamUnavailableError as exc:
            logger.error("rate feed unavailable: %s", exc, extra={"outcome": FAILED})
            return RefreshResult(outcome=FAILED, message=str(exc))

        owns_session = db is None
        session = self._session_factory() if owns_session else db
        try:
            bulk = rate_ledger.bulk_upsert(session, quotes, source=RateSource.api)
        finally:
            if owns_session:
                session.close()

        errors = [f"#{f.index}: {f.error}" for f in bulk.failures]
        if not bulk.failures:
            outcome = SUCCESS
        elif bulk.applied:
            outcome = PARTIAL
        else:
            outcome = FAILED
        logger.info(
            "rate refresh finished: %s", outcome,
            extra={"outcome": outcome, "applied": len(bulk.applied), "failed": len(bulk.failures)},
        )
        return RefreshResult(
            outcome=outcome,
            applied=len(bulk.applied),
            failed=len(bulk.failures),
            message=f"Updated {len(bulk.applied)} rates",
            errors=errors,
        )

    def initialize_rates(self, db: Optional[Session] = None) -> Optional[RefreshResult]:
        """Populate an empty ledger with one refresh; a populated ledger is left alone"""
        session = db or self._session_factory()
        try:
            active = len(rate_ledger.get_active_rates(session))
        finally:
            if db is None:
                session.close()
        if active:
            logger.info("found %s active rates, no initial refresh needed", active)
            return None
        logger.info("no active rates found, running initial refresh")
        return self.refresh_from_external_source(db)


rate_refresh_job = RateRefreshJob()


def refresh_from_external_source(db: Optional[Session] = None) -> RefreshResult:
    return rate_refresh_job.refresh_from_external_source(db)
