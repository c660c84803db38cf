"""Durable key -> (payload, fetched_at) store backed by the cache tables."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from sqlalchemy.orm import Session

from .database import SessionLocal
from .models import GiftSupplyCache, NftResolveCache

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CachedPayload:
    payload: dict[str, Any]
    fetched_at: datetime

    def is_fresh(self, ttl: timedelta, now: datetime | None = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now - self.fetched_at <= ttl


def _as_utc(dt: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is written in UTC.
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


class CacheStore:
    """Upsert-only cache over one ORM table.

    Freshness is not judged here: ``get`` returns whatever row exists and
    the caller compares ``fetched_at`` against its TTL. Errors from the
    database propagate as ``SQLAlchemyError``.
    """

    def __init__(
        self,
        model: type[NftResolveCache] | type[GiftSupplyCache],
        session_factory: Callable[[], Session] = SessionLocal,
    ) -> None:
        self.model = model
        self._session_factory = session_factory

    def get(self, key: str) -> CachedPayload | None:
        with self._session_factory() as db:
            row = db.get(self.model, key)
            if row is None or not isinstance(row.data, dict):
                return None
            return CachedPayload(payload=row.data, fetched_at=_as_utc(row.fetched_at))

    def put(self, key: str, payload: dict[str, Any]) -> None:
        now = datetime.now(timezone.utc)
        with self._session_factory() as db:
            row = db.get(self.model, key)
            if row is None:
                row = self.model(**{self.model.cache_key_column: key})
                db.add(row)
            row.data = payload
            row.fetched_at = now
            db.commit()
        logger.debug("Cached %s=%s", self.model.__tablename__, key)
