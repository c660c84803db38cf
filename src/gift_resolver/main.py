"""FastAPI application with lifespan-managed upstream clients and resolver."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.router import api_router
from .cache import CacheStore
from .changes.client import ChangesClient
from .changes.titles import TitleResolver
from .config import settings
from .database import run_migrations
from .models import GiftSupplyCache, NftResolveCache
from .poso.client import PosoClient
from .poso.prober import ModelProber
from .resolver.pipeline import GiftResolver
from .scraper.telegram import TelegramNftScraper

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Shared state accessible by API endpoints
app_state: dict = {}


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    item_cache = supply_cache = None
    if settings.cache_enabled:
        logger.info("Running database migrations...")
        run_migrations()
        item_cache = CacheStore(NftResolveCache)
        supply_cache = CacheStore(GiftSupplyCache)
    else:
        logger.info("Cache disabled, every request goes upstream")

    scraper = TelegramNftScraper()
    changes = ChangesClient()
    poso = PosoClient()
    app_state["resolver"] = GiftResolver(
        scraper=scraper,
        titles=TitleResolver(changes),
        changes=changes,
        prober=ModelProber(poso),
        item_cache=item_cache,
        supply_cache=supply_cache,
    )
    logger.info(
        "gift-resolver started (cache_ttl=%ds, probe_concurrency=%d)",
        settings.cache_ttl_seconds,
        settings.model_probe_concurrency,
    )

    yield

    # Shutdown
    await scraper.close()
    await changes.close()
    await poso.close()
    app_state.clear()
    logger.info("gift-resolver stopped")


app = FastAPI(
    title="gift-resolver",
    description="Telegram gift NFT metadata and supply resolver",
    version="0.1.0",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

app.include_router(api_router)
