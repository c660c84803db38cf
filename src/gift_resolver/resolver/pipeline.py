"""Resolution pipeline: cache -> collectible page -> title/models/probe.

Stages run strictly in order and each is only paid for when the previous
one came up empty. The cache is an optimization: read failures count as
misses and write failures are logged and dropped.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from ..cache import CacheStore
from ..changes.client import ChangesClient
from ..changes.titles import TitleResolver
from ..config import settings
from ..errors import InvalidInput, NotFound, UpstreamError
from ..poso.prober import ModelProber
from ..schemas import ResolvedItem, SupplyRecord
from ..scraper.telegram import TelegramNftScraper
from .slugs import gift_to_slug, parse_gift_slug, supply_cache_key

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GiftResolver:
    def __init__(
        self,
        scraper: TelegramNftScraper,
        titles: TitleResolver,
        changes: ChangesClient,
        prober: ModelProber,
        item_cache: CacheStore | None = None,
        supply_cache: CacheStore | None = None,
        cache_ttl: timedelta | None = None,
        supply_scan_limit: int | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.scraper = scraper
        self.titles = titles
        self.changes = changes
        self.prober = prober
        self.item_cache = item_cache
        self.supply_cache = supply_cache
        self.cache_ttl = cache_ttl or timedelta(seconds=settings.cache_ttl_seconds)
        self.supply_scan_limit = supply_scan_limit or settings.supply_scan_limit
        self._clock = clock

    async def resolve_item(self, slug: str) -> ResolvedItem:
        """Resolve one NFT by its ``GiftName-N`` slug.

        Raises MalformedSlug, NotFound or UpstreamError.
        """
        slug = slug.strip()
        gift_slug, number = parse_gift_slug(slug)

        payload = self._cache_get(self.item_cache, slug)
        if payload is not None:
            try:
                return ResolvedItem.model_validate(payload)
            except ValidationError as e:
                logger.warning("Discarding unreadable cache entry for %s: %s", slug, e)

        item = await self.scraper.fetch_item(slug)
        if item is not None:
            self._cache_put(self.item_cache, slug, item.to_payload())
            return item

        title = await self.titles.resolve(gift_slug)
        models = await self.changes.fetch_models(title)
        if not models:
            raise NotFound(f"no models for gift {title!r}")

        item = await self.prober.probe(slug, title, number, models)
        if item is None:
            raise NotFound(f"{slug} not found")

        self._cache_put(self.item_cache, slug, item.to_payload())
        return item

    async def resolve_supply(self, gift: str) -> SupplyRecord:
        """Resolve issued/total counts for a gift collection by name or slug.

        Scans serials 1..N of the collectible pages; the first page with both
        counts positive supplies the collection-wide totals.
        """
        gift = gift.strip()
        slug_base = gift_to_slug(gift)
        if not slug_base:
            raise InvalidInput(f"invalid gift: {gift!r}")

        key = supply_cache_key(slug_base)
        payload = self._cache_get(self.supply_cache, key)
        if payload is not None:
            try:
                return SupplyRecord.from_payload(payload)
            except (KeyError, ValidationError) as e:
                logger.warning("Discarding unreadable supply cache entry %s: %s", key, e)

        for number in range(1, self.supply_scan_limit + 1):
            item = await self.scraper.fetch_item(f"{slug_base}-{number}")
            if item is None:
                continue
            record = SupplyRecord(
                slug_base=slug_base,
                display_name=gift,
                issued_count=item.issued_count,
                total_supply=item.total_supply,
            )
            if not record.is_valid:
                continue
            self._cache_put(self.supply_cache, key, record.to_payload())
            return record

        raise UpstreamError(f"failed to resolve supply for {slug_base}")

    def _cache_get(self, cache: CacheStore | None, key: str) -> dict[str, Any] | None:
        if cache is None:
            return None
        try:
            cached = cache.get(key)
        except SQLAlchemyError as e:
            logger.warning("Cache read failed for %s: %s", key, e)
            return None
        if cached is None:
            logger.debug("Cache miss: %s", key)
            return None
        if not cached.is_fresh(self.cache_ttl, now=self._clock()):
            logger.debug("Cache entry expired: %s", key)
            return None
        logger.debug("Cache hit: %s", key)
        return cached.payload

    def _cache_put(self, cache: CacheStore | None, key: str, payload: dict[str, Any]) -> None:
        if cache is None:
            return
        try:
            cache.put(key, payload)
        except SQLAlchemyError as e:
            logger.warning("Cache write failed for %s: %s", key, e)
