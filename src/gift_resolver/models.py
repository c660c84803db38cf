from datetime import datetime, timezone
from typing import Any, ClassVar

from sqlalchemy import JSON, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NftResolveCache(Base):
    __tablename__ = "nft_resolve_cache"
    cache_key_column: ClassVar[str] = "slug"

    slug: Mapped[str] = mapped_column(Text, primary_key=True)
    data: Mapped[dict[str, Any]] = mapped_column(JSON)
    fetched_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


class GiftSupplyCache(Base):
    __tablename__ = "gift_supply_cache"
    cache_key_column: ClassVar[str] = "cache_key"

    cache_key: Mapped[str] = mapped_column(Text, primary_key=True)  # "gift:<slug base>"
    data: Mapped[dict[str, Any]] = mapped_column(JSON)
    fetched_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
