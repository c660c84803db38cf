"""Telegram collectible page scraping orchestrator."""

from __future__ import annotations

import logging

from ..schemas import ResolvedItem
from .client import TelegramClient
from .parser import NftPageParser

logger = logging.getLogger(__name__)


class TelegramNftScraper:
    """Fetch-and-extract for one collectible page."""

    def __init__(self, client: TelegramClient | None = None) -> None:
        self.client = client or TelegramClient()
        self._parser = NftPageParser()

    async def fetch_item(self, slug: str) -> ResolvedItem | None:
        html = await self.client.fetch_item_page(slug)
        if not html:
            return None
        item = self._parser.parse(html, slug)
        if item is None:
            logger.debug("No traits or quantity on page for %s", slug)
        return item

    async def close(self) -> None:
        await self.client.close()
