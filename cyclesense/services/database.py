"""Postgres connection pool for the read-only analysis queries.

Uses ``asyncpg`` directly; the pool is created once at app startup when a
``database_url`` is configured and drained at shutdown.
"""

from __future__ import annotations

import logging
from typing import Any

import asyncpg

from cyclesense.config import Settings, get_settings

logger = logging.getLogger("cyclesense.db")

# Module-level connection pool, initialized once at app startup
_pool: asyncpg.Pool | None = None


async def init_pool(settings: Settings | None = None) -> asyncpg.Pool | None:
    """Create the asyncpg connection pool. Call once at app startup.

    Returns None without connecting when no ``database_url`` is configured.
    """
    global _pool
    s = settings or get_settings()
    if not s.database_url:
        logger.info("No database_url configured; running without a database")
        return None
    _pool = await asyncpg.create_pool(
        s.database_url,
        min_size=1,
        max_size=10,
        command_timeout=30,
    )
    logger.info("Database pool initialized (min=1, max=10)")
    return _pool


async def close_pool() -> None:
    """Drain the pool. Call at app shutdown."""
    global _pool
    if _pool:
        await _pool.close()
        _pool = None
        logger.info("Database pool closed")


def get_pool() -> asyncpg.Pool:
    if _pool is None:
        raise RuntimeError("Database pool not initialized: call init_pool() first")
    return _pool


def has_pool() -> bool:
    return _pool is not None


async def fetch(query: str, *args: Any) -> list[asyncpg.Record]:
    """Fetch rows on a pooled connection."""
    pool = get_pool()
    async with pool.acquire() as conn:
        return await conn.fetch(query, *args)


async def fetchval(query: str, *args: Any) -> Any:
    """Fetch a single value on a pooled connection."""
    pool = get_pool()
    async with pool.acquire() as conn:
        return await conn.fetchval(query, *args)
