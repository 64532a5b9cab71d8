"""
Rate ledger: the authoritative active quotation per (metal_type, purity)
plus the history of superseded quotations.

Writers for the same pair are serialized by an in-process lock and by a row
lock on the record being superseded; the partial unique index on the table
is the last line. Different pairs never wait on each other.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, ValidationError as PydanticValidationError, field_validator
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from suvarna.core.config import settings
from suvarna.core.errors import ConcurrencyConflict, LedgerError, NotFoundError, ValidationError, from_pydantic
from suvarna.core.metals import PURITY_MULTIPLIERS, MetalType, RateSource
from suvarna.core.money import positive_money, round_money, to_decimal
from suvarna.models.rate_change_log import RateChangeLog
from suvarna.models.rate_record import RateRecord

logger = logging.getLogger(__name__)


class RateInput(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    metal_type: MetalType
    purity: str
    rate_per_gram: Decimal
    source: RateSource = RateSource.manual

    @field_validator("purity")
    @classmethod
    def purity_not_blank(cls, value: str) -> str:
        if not value:
            raise ValueError("purity must not be empty")
        return value

    @field_validator("rate_per_gram")
    @classmethod
    def rate_positive(cls, value: Decimal) -> Decimal:
        return positive_money(value, field="rate_per_gram")


def parse_rate_input(data: Any) -> RateInput:
    if isinstance(data, RateInput):
        return data
    try:
        return RateInput.model_validate(data)
    except PydanticValidationError as exc:
        raise from_pydantic(exc) from exc


# One lock per validated (metal_type, purity); created lazily under the registry
# lock. Grows with the distinct pairs ever written, a small fixed set of labels.
_pair_locks: Dict[Tuple[str, str], threading.Lock] = {}
_pair_locks_guard = threading.Lock()


def _lock_for(metal_type: str, purity: str) -> threading.Lock:
    key = (metal_type, purity)
    with _pair_locks_guard:
        lock = _pair_locks.get(key)
        if lock is None:
            lock = threading.Lock()
            _pair_locks[key] = lock
        return lock


def _metal_value(metal_type: Any) -> str:
    return metal_type.value if isinstance(metal_type, MetalType) else str(metal_type)


def _purity_value(purity: Any) -> Any:
    # Writes store purity stripped; lookups match the same label
    return purity.strip() if isinstance(purity, str) else purity


def get_active_rates(db: Session) -> List[RateRecord]:
    """All active records ordered by (metal_type, purity)"""
    return (
        db.query(RateRecord)
        .filter(RateRecord.is_active.is_(True))
        .order_by(RateRecord.metal_type, RateRecord.purity)
        .all()
    )


def get_rates_by_metal_type(db: Session, metal_type: Any) -> List[RateRecord]:
    return (
        db.query(RateRecord)
        .filter(RateRecord.metal_type == _metal_value(metal_type), RateRecord.is_active.is_(True))
        .order_by(RateRecord.purity)
        .all()
    )


def find_rate(db: Session, metal_type: Any, purity: str) -> Optional[RateRecord]:
    return db.query(RateRecord).filter(
        RateRecord.metal_type == _metal_value(metal_type),
        RateRecord.purity == _purity_value(purity),
        RateRecord.is_active.is_(True),
    ).first()


def get_rate(db: Session, metal_type: Any, purity: str) -> RateRecord:
    """
    The single active record for the pair.

    Raises:
        NotFoundError: no active rate exists; never substituted with zero.
    """
    rate = find_rate(db, metal_type, purity)
    if rate is None:
        raise NotFoundError(f"No active rate for {_metal_value(metal_type)}/{_purity_value(purity)}")
    return rate


def _current_for_update(db: Session, metal: str, purity: str) -> Optional[RateRecord]:
    return db.query(RateRecord).filter(
        RateRecord.metal_type == metal,
        RateRecord.purity == purity,
        RateRecord.is_active.is_(True),
    ).with_for_update().first()


def upsert_rate(
    db: Session,
    metal_type: Any,
    purity: str,
    rate_per_gram: Any,
    source: Any = RateSource.manual,
    changed_by: Optional[str] = None,
) -> RateRecord:
    """
    Supersede the active record for the pair (if any) and insert a new active one.

    Validation happens before any write. The supersede and the insert commit
    together, so a failure leaves the previous active record in place.
    """
    data = parse_rate_input({
        "metal_type": metal_type,
        "purity": purity,
        "rate_per_gram": rate_per_gram,
        "source": source,
    })
    metal = data.metal_type.value

    with _lock_for(metal, data.purity):
        now = datetime.now(timezone.utc)
        try:
            current = _current_for_update(db, metal, data.purity)

            if current is not None:
                current.is_active = False
                # The deactivation must reach the index before the new row does
                db.flush()
                db.add(RateChangeLog(
                    metal_type=metal,
                    purity=data.purity,
                    old_rate_per_gram=current.rate_per_gram,
                    new_rate_per_gram=data.rate_per_gram,
                    source=data.source.value,
                    changed_by=changed_by,
                    timestamp=now,
                ))

            record = RateRecord(
                metal_type=metal,
                purity=data.purity,
                rate_per_gram=data.rate_per_gram,
                source=data.source.value,
                is_active=True,
                last_updated=now,
                created_at=now,
            )
            db.add(record)
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise ConcurrencyConflict(
                f"Another active rate for {metal}/{data.purity} was written concurrently"
            ) from exc
        except Exception:
            db.rollback()
            raise

    db.refresh(record)
    logger.info(
        "rate upserted %s/%s=%s",
        metal, data.purity, record.rate_per_gram,
        extra={"metal_type": metal, "purity": data.purity, "source": data.source.value},
    )
    return record


@dataclass
class BulkUpsertFailure:
    index: int
    entry: Any
    error: LedgerError


@dataclass
class BulkUpsertResult:
    applied: List[RateRecord] = field(default_factory=list)
    failures: List[BulkUpsertFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


def bulk_upsert(
    db: Session,
    entries: Iterable[Any],
    source: Optional[Any] = None,
    changed_by: Optional[str] = None,
) -> BulkUpsertResult:
    """
    Apply upsert_rate once per entry, in input order.

    Best effort, not transactional: every applied entry is already committed
    when a later entry fails, and nothing is rolled back. Failures are
    collected in the result rather than raised.
    """
    result = BulkUpsertResult()
    for index, entry in enumerate(entries):
        try:
            raw = dict(entry.model_dump() if isinstance(entry, RateInput) else entry)
            if source is not None:
                raw["source"] = source
            record = upsert_rate(
                db,
                raw.get("metal_type"),
                raw.get("purity"),
                raw.get("rate_per_gram"),
                raw.get("source", RateSource.manual),
                changed_by=changed_by,
            )
        except LedgerError as exc:
            logger.warning("bulk upsert entry %s rejected: %s", index, exc)
            result.failures.append(BulkUpsertFailure(index=index, entry=entry, error=exc))
        except (TypeError, ValueError) as exc:
            logger.warning("bulk upsert entry %s malformed: %s", index, exc)
            result.failures.append(BulkUpsertFailure(index=index, entry=entry, error=ValidationError(str(exc))))
        else:
            result.applied.append(record)
    logger.info(
        "bulk upsert finished",
        extra={"applied": len(result.applied), "failed": len(result.failures)},
    )
    return result


def get_history(db: Session, metal_type: Any, purity: str, since_days: int = 7) -> List[RateRecord]:
    """Active and superseded records for the pair created in the last since_days, newest first"""
    if since_days < 0:
        raise ValidationError("since_days must not be negative", field="since_days")
    start = datetime.now(timezone.utc) - timedelta(days=since_days)
    return (
        db.query(RateRecord)
        .filter(
            RateRecord.metal_type == _metal_value(metal_type),
            RateRecord.purity == _purity_value(purity),
            RateRecord.created_at >= start,
        )
        .order_by(RateRecord.created_at.desc(), RateRecord.id.desc())
        .all()
    )


def get_change_log(db: Session, metal_type: Any, purity: str) -> List[RateChangeLog]:
    return (
        db.query(RateChangeLog)
        .filter(RateChangeLog.metal_type == _metal_value(metal_type), RateChangeLog.purity == _purity_value(purity))
        .order_by(RateChangeLog.timestamp.desc(), RateChangeLog.id.desc())
        .all()
    )


def get_last_update_time(db: Session) -> Optional[datetime]:
    latest = (
        db.query(RateRecord)
        .filter(RateRecord.is_active.is_(True))
        .order_by(RateRecord.last_updated.desc())
        .first()
    )
    if latest is None:
        return None
    return _as_utc(latest.last_updated)


def needs_update(db: Session, max_age_minutes: Optional[int] = None) -> bool:
    """True when there are no active rates or the newest one is older than max_age_minutes"""
    last_update = get_last_update_time(db)
    if last_update is None:
        return True
    age_limit = settings.rate_max_age_minutes if max_age_minutes is None else max_age_minutes
    return last_update < datetime.now(timezone.utc) - timedelta(minutes=age_limit)


def get_rates_summary(db: Session) -> Dict[str, Any]:
    rates = get_active_rates(db)
    last_updated = max((_as_utc(r.last_updated) for r in rates), default=None)
    return {
        "gold": [r for r in rates if r.metal_type == MetalType.gold.value],
        "silver": [r for r in rates if r.metal_type == MetalType.silver.value],
        "last_updated": last_updated,
        "total_rates": len(rates),
    }


def calculate_rate_by_purity(base_rate: Any, purity: str) -> Decimal:
    """Derive a purity's rate from the pure (24K / Standard) quotation"""
    multiplier = PURITY_MULTIPLIERS.get(purity)
    if multiplier is None:
        raise ValidationError(f"No fineness multiplier for purity {purity!r}", field="purity")
    base = to_decimal(base_rate, field="base_rate")
    if base <= 0:
        raise ValidationError("base_rate must be a positive amount", field="base_rate")
    return round_money(base * multiplier)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
