"""NFT resolve and collection supply endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query

from ..errors import InvalidInput, MalformedSlug, NotFound, UpstreamError
from ..resolver.pipeline import GiftResolver
from ..schemas import ResolvedItem, SupplyResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/v1", tags=["gifts"])


def _get_resolver() -> GiftResolver:
    from ..main import app_state

    resolver = app_state.get("resolver")
    if resolver is None:
        raise HTTPException(503, "Resolver is not ready")
    return resolver


@router.get(
    "/nft/resolve",
    response_model=ResolvedItem,
    response_model_by_alias=True,
    response_model_exclude_defaults=True,
)
async def resolve_nft(slug: str = Query("", description="Gift slug, e.g. PlushPepe-42")):
    slug = slug.strip()
    if not slug:
        raise HTTPException(400, "missing slug")

    resolver = _get_resolver()
    try:
        return await resolver.resolve_item(slug)
    except MalformedSlug:
        raise HTTPException(400, "invalid slug, expected GiftSlug-123")
    except NotFound as e:
        raise HTTPException(404, str(e))
    except UpstreamError as e:
        logger.warning("Resolve failed for %s: %s", slug, e)
        raise HTTPException(502, "resolve failed")


@router.get("/gifts/supply", response_model=SupplyResponse)
async def gift_supply(gift: str = Query("", description="Gift name or slug, e.g. Kissed Frog")):
    gift = gift.strip()
    if not gift:
        raise HTTPException(400, "missing gift (use ?gift=KissedFrog or ?gift=Kissed Frog)")

    resolver = _get_resolver()
    try:
        record = await resolver.resolve_supply(gift)
    except InvalidInput:
        raise HTTPException(400, "invalid gift")
    except UpstreamError as e:
        logger.warning("Supply lookup failed for %s: %s", gift, e)
        raise HTTPException(502, "failed to resolve supply from Telegram page")
    return SupplyResponse(**record.to_payload())
