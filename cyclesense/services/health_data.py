"""Upstream reads for the lifestyle analysis.

Episodes and unified health records are owned by other parts of the system;
this module only reads them.  The two reads are independent and run
concurrently.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import date, datetime, time, timedelta, timezone
from typing import Protocol

from cyclesense.analysis import analyze_lifestyle
from cyclesense.analysis.config_loader import ThresholdConfig
from cyclesense.analysis.models import Episode, ExternalHealthRecord, HealthSignal, LifestyleReport
from cyclesense.services import database

logger = logging.getLogger("cyclesense.services.health_data")

EPISODES_QUERY = """
    SELECT id, start_time, pain_intensity, triggers
    FROM headache_episodes
    WHERE user_id = $1 AND start_time >= $2
    ORDER BY start_time DESC
"""

HEALTH_RECORDS_QUERY = """
    SELECT date, data_type, source, sleep_quality_score, sleep_duration_minutes,
           menstrual_phase, period_flow, cycle_day
    FROM unified_health_data
    WHERE user_id = $1 AND date >= $2 AND data_type = ANY($3::text[])
    ORDER BY date
"""


class HealthDataSource(Protocol):
    """Read-only access to a user's episodes and unified health records."""

    async def fetch_episodes(self, user_id: uuid.UUID | str, since: date) -> list[Episode]:
        ...

    async def fetch_health_records(
        self, user_id: uuid.UUID | str, since: date
    ) -> list[ExternalHealthRecord]:
        ...


class PostgresHealthDataSource:
    """HealthDataSource over the shared asyncpg pool."""

    async def fetch_episodes(self, user_id: uuid.UUID | str, since: date) -> list[Episode]:
        since_ts = datetime.combine(since, time.min, tzinfo=timezone.utc)
        rows = await database.fetch(EPISODES_QUERY, _as_uuid(user_id), since_ts)
        return [Episode.from_row(dict(row)) for row in rows]

    async def fetch_health_records(
        self, user_id: uuid.UUID | str, since: date
    ) -> list[ExternalHealthRecord]:
        rows = await database.fetch(
            HEALTH_RECORDS_QUERY,
            _as_uuid(user_id),
            since,
            [s.value for s in HealthSignal],
        )
        return [ExternalHealthRecord.from_row(dict(row)) for row in rows]


def _as_uuid(user_id: uuid.UUID | str) -> uuid.UUID:
    return user_id if isinstance(user_id, uuid.UUID) else uuid.UUID(str(user_id))


async def analyze_user(
    source: HealthDataSource,
    user_id: uuid.UUID | str,
    days: int = 90,
    as_of: date | None = None,
    config: ThresholdConfig | None = None,
) -> LifestyleReport:
    """Read one user's analysis window and build the lifestyle report.

    Args:
        source:   Where episodes and records come from.
        user_id:  Owner of the data.
        days:     Window length, counted back from ``as_of``.
        as_of:    End of the window; today (UTC) by default.
        config:   Threshold override.
    """
    as_of = as_of or datetime.now(timezone.utc).date()
    since = as_of - timedelta(days=days)

    episodes, records = await asyncio.gather(
        source.fetch_episodes(user_id, since),
        source.fetch_health_records(user_id, since),
    )
    logger.info(
        "Loaded %d episodes and %d health records for user %s since %s",
        len(episodes),
        len(records),
        user_id,
        since.isoformat(),
    )
    return analyze_lifestyle(episodes, records, config)
