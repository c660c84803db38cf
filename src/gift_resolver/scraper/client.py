"""HTTP client for fetching public Telegram collectible pages."""

from __future__ import annotations

import logging
from urllib.parse import quote

import httpx

from ..config import settings
from ..fetch import build_client, get_capped

logger = logging.getLogger(__name__)

_HEADERS = {
    "User-Agent": settings.scraper_user_agent,
    "Accept": "text/html",
}


class TelegramClient:
    """Async HTTP client for t.me/nft pages."""

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        self._client = client
        self._base = settings.telegram_nft_base.rstrip("/")

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = build_client(settings.request_timeout, headers=_HEADERS)
        return self._client

    def item_url(self, slug: str) -> str:
        return f"{self._base}/{quote(slug, safe='')}"

    async def fetch_item_page(self, slug: str) -> str | None:
        """Fetch the collectible page. Returns HTML, or None on any failure."""
        url = self.item_url(slug)
        try:
            resp = await get_capped(self._get_client(), url, max_bytes=settings.page_max_bytes)
        except httpx.HTTPError as e:
            logger.warning("Request error for %s: %s", url, e)
            return None
        if not resp.ok:
            logger.warning("HTTP %s for %s", resp.status_code, url)
            return None
        return resp.text

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
