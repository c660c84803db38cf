"""Health check endpoint."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..schemas import HealthResponse

logger = logging.getLogger(__name__)
router = APIRouter(tags=["system"])


@router.get("/health", response_model=HealthResponse)
def health_check(db: Session = Depends(get_db)):
    cache = "disabled"
    if settings.cache_enabled:
        try:
            db.execute(text("SELECT 1"))
            cache = "ok"
        except Exception as e:
            logger.warning("Health check: DB error: %s", e)
            cache = "degraded"

    return HealthResponse(
        ok=True,
        time=datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
        cache=cache,
    )
