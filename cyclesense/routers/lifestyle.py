"""Lifestyle correlation endpoints.

Endpoints:
    POST /analysis/lifestyle: Analyse episodes and records supplied in the body
    GET  /analysis/lifestyle: Analyse the current user's stored data
"""

from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, HTTPException, Query

from cyclesense.analysis import analyze_lifestyle
from cyclesense.dependencies import AppSettings, CurrentUserId
from cyclesense.models.analysis import LifestyleAnalysisRequest
from cyclesense.services.database import has_pool
from cyclesense.services.health_data import PostgresHealthDataSource, analyze_user

logger = logging.getLogger("cyclesense.routers.lifestyle")

router = APIRouter(prefix="/analysis", tags=["analysis"])


@router.post("/lifestyle")
async def analyze_payload(body: LifestyleAnalysisRequest) -> dict:
    """Correlate the supplied episodes with the supplied health records."""
    episodes = [e.to_domain() for e in body.episodes]
    records = [r.to_domain() for r in body.health_records]
    return analyze_lifestyle(episodes, records).to_dict()


@router.get("/lifestyle")
async def analyze_current_user(
    user_id: CurrentUserId,
    settings: AppSettings,
    days: int | None = Query(default=None, ge=1, le=365),
) -> dict:
    """Correlate the current user's stored episodes and health records."""
    if not has_pool():
        raise HTTPException(status_code=503, detail="Database not configured")

    window = days or settings.analysis_window_days
    try:
        owner = uuid.UUID(user_id)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Invalid user id") from exc

    report = await analyze_user(PostgresHealthDataSource(), owner, days=window)
    return report.to_dict()
