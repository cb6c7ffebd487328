"""Health check endpoint: public, no auth required."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter

from cyclesense.config import get_settings
from cyclesense.services.database import fetchval, has_pool

router = APIRouter(tags=["system"])
logger = logging.getLogger("cyclesense.routers.health")


@router.get("/health")
async def health_check() -> dict:
    """Liveness probe. Returns 200 if the API process is up.

    Also performs a lightweight DB connectivity check when a database is
    configured.
    """
    settings = get_settings()
    if not has_pool():
        database = "not_configured"
    else:
        database = "unreachable"
        try:
            await fetchval("SELECT 1")
            database = "connected"
        except Exception as exc:
            logger.warning("Health check DB probe failed: %s", exc)

    return {
        "status": "degraded" if database == "unreachable" else "healthy",
        "version": settings.app_version,
        "environment": settings.environment,
        "database": database,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
