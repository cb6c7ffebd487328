"""Request / response schemas for cycle imports and lifestyle analysis."""

from __future__ import annotations

import datetime as dt

from pydantic import Field

from cyclesense.analysis.models import Episode, ExternalHealthRecord, HealthSignal
from cyclesense.models.base import CycleSenseBase


class EpisodeIn(CycleSenseBase):
    id: str | None = None
    start_time: dt.datetime
    pain_intensity: float | None = Field(default=None, ge=0, le=10)
    triggers: list[str] = Field(default_factory=list)

    def to_domain(self) -> Episode:
        return Episode.from_row(self.model_dump())


class HealthRecordIn(CycleSenseBase):
    date: dt.date
    data_type: HealthSignal
    source: str = "unknown"
    sleep_quality_score: float | None = Field(default=None, ge=0, le=100)
    sleep_duration_minutes: int | None = Field(default=None, ge=0)
    menstrual_phase: str | None = None
    period_flow: str | None = None
    cycle_day: int | None = Field(default=None, ge=1, le=45)

    def to_domain(self) -> ExternalHealthRecord:
        return ExternalHealthRecord.from_row(self.model_dump())


class LifestyleAnalysisRequest(CycleSenseBase):
    """Body for ``POST /analysis/lifestyle``."""

    episodes: list[EpisodeIn] = Field(default_factory=list)
    health_records: list[HealthRecordIn] = Field(default_factory=list)


class CycleImportResponse(CycleSenseBase):
    """Serialised import outcome returned to the client."""

    succeeded: bool
    detected_format: str
    rows_total: int
    rows_valid: int
    entries: list[dict]
    warnings: list[str]
    error: str | None = None
    records: int = 0
