"""Size-capped GET shared by every upstream client."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx

logger = logging.getLogger(__name__)


@dataclass
class CappedResponse:
    url: str
    status_code: int
    content: bytes
    encoding: str = "utf-8"
    truncated: bool = False

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        return self.content.decode(self.encoding, errors="replace")

    def json(self) -> Any:
        return json.loads(self.content)


async def get_capped(
    client: httpx.AsyncClient,
    url: str,
    *,
    max_bytes: int,
    params: dict[str, str] | None = None,
    headers: dict[str, str] | None = None,
) -> CappedResponse:
    """GET ``url`` and read at most ``max_bytes`` of the body.

    Anything past the cap is dropped, so a truncated JSON document fails
    to decode rather than exhausting memory. Raises ``httpx.HTTPError``
    on transport failures.
    """
    chunks: list[bytes] = []
    size = 0
    truncated = False
    async with client.stream("GET", url, params=params, headers=headers) as resp:
        async for chunk in resp.aiter_bytes():
            remaining = max_bytes - size
            if len(chunk) > remaining:
                chunks.append(chunk[:remaining])
                truncated = True
                break
            chunks.append(chunk)
            size += len(chunk)
        encoding = resp.encoding or "utf-8"
        status_code = resp.status_code

    if truncated:
        logger.warning("Response from %s truncated at %d bytes", url, max_bytes)
    return CappedResponse(
        url=url,
        status_code=status_code,
        content=b"".join(chunks),
        encoding=encoding,
        truncated=truncated,
    )


def build_client(timeout: float, headers: dict[str, str] | None = None) -> httpx.AsyncClient:
    return httpx.AsyncClient(headers=headers, timeout=timeout, follow_redirects=True)
