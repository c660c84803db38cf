"""Async client for the changes.tg API and CDN (gift titles and model lists)."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from ..config import settings
from ..errors import UpstreamError
from ..fetch import CappedResponse, build_client, get_capped

logger = logging.getLogger(__name__)

ID_TO_NAME_PATH = "/gifts/id-to-name.json"


def model_names(payload: Any) -> list[str]:
    """Normalize a models listing: plain names or ``{"name": ...}`` objects.

    Entries of any other shape are skipped.
    """
    if not isinstance(payload, list):
        raise UpstreamError(f"models listing is not a list: {type(payload).__name__}")
    names: list[str] = []
    for entry in payload:
        if isinstance(entry, str):
            names.append(entry)
        elif isinstance(entry, dict):
            name = entry.get("name")
            if isinstance(name, str) and name:
                names.append(name)
    return names


def title_mapping(payload: Any) -> dict[str, str]:
    if not isinstance(payload, dict):
        raise UpstreamError(f"id-to-name document is not an object: {type(payload).__name__}")
    return {k: v for k, v in payload.items() if isinstance(k, str) and isinstance(v, str) and v}


class ChangesClient:
    """Title directory (CDN) and per-gift model lists (API)."""

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        self._client = client or build_client(settings.request_timeout)
        self._api_base = settings.changes_api_base.rstrip("/")
        self._cdn_base = settings.changes_cdn_base.rstrip("/")

    async def fetch_title_directory(self) -> dict[str, str]:
        """Fetch the full gift slug -> display title mapping."""
        resp = await self._get(
            f"{self._cdn_base}{ID_TO_NAME_PATH}", max_bytes=settings.directory_max_bytes
        )
        return title_mapping(self._decode(resp))

    async def fetch_models(self, title: str) -> list[str]:
        """Fetch model names for a gift title. An empty list is not an error."""
        resp = await self._get(
            f"{self._api_base}/models/{quote(title, safe='')}", max_bytes=settings.api_max_bytes
        )
        return model_names(self._decode(resp))

    async def close(self) -> None:
        await self._client.aclose()

    async def _get(self, url: str, max_bytes: int) -> CappedResponse:
        try:
            resp = await get_capped(self._client, url, max_bytes=max_bytes)
        except httpx.HTTPError as e:
            raise UpstreamError(f"changes HTTP error for {url}: {e}") from e
        if not resp.ok:
            raise UpstreamError(f"changes status {resp.status_code} for {url}", status_code=resp.status_code)
        return resp

    @staticmethod
    def _decode(resp: CappedResponse) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            raise UpstreamError(f"invalid JSON from {resp.url}: {e}") from e
