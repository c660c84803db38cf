"""Gift slug -> display title resolution backed by a lazily refreshed directory.

The directory is an immutable snapshot swapped in whole on refresh. At most
one refresh runs at a time, as a shared task: callers that need a refresh
await that task, and callers that can answer from the prior snapshot while
it is in flight do so without waiting. A failed refresh is reported to every
caller that awaited it; none of them retries on its own.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Mapping

from ..config import settings
from ..errors import UpstreamError
from .client import ChangesClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TitleDirectory:
    titles: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    fetched_at: float | None = None  # monotonic seconds; None = never loaded

    def is_fresh(self, now: float, ttl: float) -> bool:
        return self.fetched_at is not None and bool(self.titles) and now - self.fetched_at < ttl

    def lookup(self, gift_slug: str) -> str | None:
        return self.titles.get(gift_slug) or self.titles.get(gift_slug.lower())


class TitleResolver:
    def __init__(
        self,
        client: ChangesClient,
        ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client = client
        self._ttl = ttl_seconds if ttl_seconds is not None else settings.title_directory_ttl_seconds
        self._clock = clock
        self._directory = TitleDirectory()
        self._refresh_task: asyncio.Task[TitleDirectory] | None = None

    @property
    def directory(self) -> TitleDirectory:
        return self._directory

    async def resolve(self, gift_slug: str) -> str:
        """Map ``gift_slug`` to its display title.

        Falls back to the slug itself when the loaded directory has no entry.
        Raises UpstreamError only if no directory could ever be loaded.
        """
        snapshot = self._directory
        if snapshot.is_fresh(self._clock(), self._ttl) or self._refresh_task is not None:
            title = snapshot.lookup(gift_slug)
            if title:
                return title

        snapshot = await self._refresh()
        title = snapshot.lookup(gift_slug)
        if not title:
            logger.debug("Gift slug %s not in title directory; using it as title", gift_slug)
            return gift_slug
        return title

    async def _refresh(self) -> TitleDirectory:
        task = self._refresh_task
        if task is None:
            task = asyncio.create_task(self._load())
            task.add_done_callback(self._refresh_done)
            self._refresh_task = task

        try:
            return await asyncio.shield(task)
        except UpstreamError:
            current = self._directory
            if current.titles:
                return current
            raise

    async def _load(self) -> TitleDirectory:
        titles = await self._client.fetch_title_directory()
        fresh = TitleDirectory(titles=MappingProxyType(dict(titles)), fetched_at=self._clock())
        self._directory = fresh
        logger.info("Loaded title directory (%d gifts)", len(titles))
        return fresh

    def _refresh_done(self, task: asyncio.Task[TitleDirectory]) -> None:
        if self._refresh_task is task:
            self._refresh_task = None
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            stale = "using stale copy" if self._directory.titles else "no copy loaded"
            logger.warning("Title directory refresh failed (%s): %s", stale, exc)
