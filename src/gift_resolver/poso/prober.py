"""Bounded concurrent model probing with first-match cancellation."""

from __future__ import annotations

import asyncio
import logging

from ..config import MAX_MODEL_PROBE_CONCURRENCY, settings
from ..errors import UpstreamError
from ..schemas import ResolvedItem
from .client import PosoClient, ProbeOutcome, ProbeStatus

logger = logging.getLogger(__name__)


class ModelProber:
    """Race one search per candidate model for a given serial number.

    At most ``concurrency`` searches are in flight. The first MATCH wins and
    every other task (running or still queued on the semaphore) is cancelled
    before ``probe`` returns.
    """

    def __init__(self, search: PosoClient, concurrency: int | None = None) -> None:
        self._search = search
        concurrency = concurrency or settings.model_probe_concurrency
        self._concurrency = min(MAX_MODEL_PROBE_CONCURRENCY, max(1, concurrency))

    async def probe(self, slug: str, title: str, number: int, models: list[str]) -> ResolvedItem | None:
        """Return the matching item, or None if every model confirmed absence.

        Raises UpstreamError if no model matched and at least one probe failed,
        since "could not check" must not be reported as "does not exist".
        """
        if not models:
            return None

        semaphore = asyncio.Semaphore(self._concurrency)
        found = asyncio.Event()

        async def run(model: str) -> ProbeOutcome | None:
            async with semaphore:
                # A queued task can be woken by the winner releasing its slot
                # before the winner's result is collected.
                if found.is_set():
                    return None
                outcome = await self._search.search_gift(slug, title, model, number)
                if outcome.status is ProbeStatus.MATCH:
                    found.set()
                return outcome

        tasks = [asyncio.create_task(run(model), name=f"probe:{model}") for model in models]
        last_error: UpstreamError | None = None
        failed = 0
        try:
            for next_done in asyncio.as_completed(tasks):
                outcome = await next_done
                if outcome is None:
                    continue
                if outcome.status is ProbeStatus.MATCH:
                    logger.debug("Model %r matched %s #%d", outcome.model, title, number)
                    return outcome.item
                if outcome.status is ProbeStatus.FAILED:
                    failed += 1
                    last_error = outcome.error
                    logger.warning("Probe for model %r failed: %s", outcome.model, outcome.error)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        if last_error is not None:
            raise UpstreamError(
                f"{failed}/{len(models)} model probes failed for {title} #{number}: {last_error}"
            ) from last_error
        return None
