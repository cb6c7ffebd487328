"""CycleSense API: FastAPI application entry point.

Run locally:
    uvicorn cyclesense.main:app --reload --port 8000
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cyclesense.analysis.config_loader import get_thresholds, reload_thresholds
from cyclesense.config import get_settings
from cyclesense.routers import cycle_imports, health, lifestyle
from cyclesense.services.database import close_pool, init_pool

# ---------- Logging ----------

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s %(levelname)-8s %(name)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger("cyclesense")


# ---------- Lifespan ----------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup / shutdown hooks."""
    settings = get_settings()
    logger.info(
        "Starting %s API v%s [%s]",
        settings.app_name,
        settings.app_version,
        settings.environment,
    )
    # fail fast on a bad thresholds file
    if settings.thresholds_path:
        reload_thresholds(Path(settings.thresholds_path))
    else:
        get_thresholds()
    await init_pool(settings)
    yield
    await close_pool()
    logger.info("CycleSense API shut down")


# ---------- App factory ----------

def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="CycleSense API",
        description=(
            "Cycle-tracker CSV imports and lifestyle correlation analysis "
            "for a personal health-episode journal."
        ),
        version=settings.app_version,
        debug=settings.debug,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ---------- Health check (outside v1 prefix, always at /health) ----------
    app.include_router(health.router)

    # ---------- API v1 routes ----------
    v1_prefix = "/api/v1"

    app.include_router(cycle_imports.router, prefix=v1_prefix)
    app.include_router(lifestyle.router, prefix=v1_prefix)

    return app


app = create_app()
