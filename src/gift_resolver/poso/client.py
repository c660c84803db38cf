"""Async client for the poso.see.tg gift search API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx
from pydantic import ValidationError

from ..config import settings
from ..errors import UpstreamError
from ..fetch import build_client, get_capped
from ..scraper.parser import strip_rarity
from ..schemas import ResolvedItem

logger = logging.getLogger(__name__)

SEARCH_PATH = "/api/gifts"

# poso answers 4xx when nothing matches the filter
_ABSENT_STATUSES = (400, 404)


class ProbeStatus(str, Enum):
    MATCH = "match"
    ABSENT = "absent"
    FAILED = "failed"


@dataclass(frozen=True)
class ProbeOutcome:
    model: str
    status: ProbeStatus
    item: ResolvedItem | None = None
    error: UpstreamError | None = None

    @classmethod
    def match(cls, model: str, item: ResolvedItem) -> "ProbeOutcome":
        return cls(model, ProbeStatus.MATCH, item=item)

    @classmethod
    def absent(cls, model: str) -> "ProbeOutcome":
        return cls(model, ProbeStatus.ABSENT)

    @classmethod
    def failed(cls, model: str, error: UpstreamError) -> "ProbeOutcome":
        return cls(model, ProbeStatus.FAILED, error=error)


def _first_str(record: dict[str, Any], *keys: str) -> str:
    for key in keys:
        value = record.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""


def _first_int(record: dict[str, Any], *keys: str) -> int:
    for key in keys:
        value = record.get(key)
        if isinstance(value, bool):
            continue
        if isinstance(value, int) and value >= 0:
            return value
        if isinstance(value, str) and value.isdigit():
            return int(value)
    return 0


def normalize_gift(record: dict[str, Any], *, slug: str, title: str, number: int, model: str) -> ResolvedItem:
    """Map one poso gift record onto a ResolvedItem.

    The record matched a (title, model, number) filter, so those are the
    fallbacks for whatever the record leaves out.
    """
    return ResolvedItem(
        slug=slug,
        gift_title=_first_str(record, "title", "gift", "name") or title,
        serial_number=_first_int(record, "num", "number") or number,
        model=strip_rarity(_first_str(record, "model_name", "model")) or model,
        backdrop=strip_rarity(_first_str(record, "backdrop_name", "backdrop")),
        pattern=strip_rarity(_first_str(record, "symbol_name", "symbol", "pattern")),
        owner=_first_str(record, "owner", "owner_username", "owner_name"),
        issued_count=_first_int(record, "issued", "availability_issued"),
        total_supply=_first_int(record, "total", "availability_total"),
    )


class PosoClient:
    """Searches gifts by (title, model name, serial number)."""

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        self._client = client or build_client(settings.request_timeout)
        self._url = settings.poso_api_base.rstrip("/") + SEARCH_PATH
        self._tgauth = settings.poso_tgauth.strip()

    async def search_gift(self, slug: str, title: str, model: str, number: int) -> ProbeOutcome:
        """Look up one (title, model, number) combination.

        Never raises for upstream trouble: transport, status and decode
        errors come back as a FAILED outcome.
        """
        params = {
            "title": title,
            "model_name": model,
            "num": str(number),
            "sort_by": "num",
            "order": "asc",
            "offset": "0",
            "limit": "1",
        }
        if self._tgauth:
            params["tgauth"] = self._tgauth

        try:
            resp = await get_capped(self._client, self._url, params=params, max_bytes=settings.api_max_bytes)
        except httpx.HTTPError as e:
            return ProbeOutcome.failed(model, UpstreamError(f"poso HTTP error: {e}"))

        if resp.status_code in _ABSENT_STATUSES:
            return ProbeOutcome.absent(model)
        if not resp.ok:
            detail = resp.text.strip()[:200]
            return ProbeOutcome.failed(
                model, UpstreamError(f"poso status {resp.status_code}: {detail}", status_code=resp.status_code)
            )

        try:
            data = resp.json()
        except ValueError as e:
            return ProbeOutcome.failed(model, UpstreamError(f"poso invalid JSON: {e}"))

        if not isinstance(data, dict):
            return ProbeOutcome.failed(model, UpstreamError("poso response is not an object"))
        gifts = data.get("gifts")
        if gifts is None:
            return ProbeOutcome.absent(model)
        if not isinstance(gifts, list):
            return ProbeOutcome.failed(model, UpstreamError("poso gifts field is not a list"))
        if not gifts:
            return ProbeOutcome.absent(model)
        record = gifts[0]
        if not isinstance(record, dict):
            return ProbeOutcome.failed(model, UpstreamError("poso gift record is not an object"))

        try:
            item = normalize_gift(record, slug=slug, title=title, number=number, model=model)
        except ValidationError as e:
            return ProbeOutcome.failed(model, UpstreamError(f"poso gift record rejected: {e}"))
        return ProbeOutcome.match(model, item)

    async def close(self) -> None:
        await self._client.aclose()
