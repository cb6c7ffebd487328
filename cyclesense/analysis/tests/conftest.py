"""Shared fixtures and builders for the lifestyle analysis tests."""

from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from cyclesense.analysis.config_loader import ThresholdConfig, load_thresholds
from cyclesense.analysis.models import Episode, ExternalHealthRecord, HealthSignal
from cyclesense.imports.base import Phase

BASE_DATE = date(2024, 3, 1)


def episode(
    day: int,
    pain: float | None = 5,
    triggers: tuple[str, ...] = (),
    hour: int = 14,
) -> Episode:
    """Episode starting ``day`` days after BASE_DATE."""
    d = BASE_DATE + timedelta(days=day)
    return Episode(
        start_time=datetime(d.year, d.month, d.day, hour),
        pain_intensity=pain,
        triggers=triggers,
    )


def sleep_record(day: int, score: float | None, source: str = "oura") -> ExternalHealthRecord:
    return ExternalHealthRecord(
        date=BASE_DATE + timedelta(days=day),
        data_type=HealthSignal.SLEEP,
        source=source,
        sleep_quality_score=score,
    )


def cycle_record(day: int, phase: Phase | None, source: str = "csv_clue") -> ExternalHealthRecord:
    return ExternalHealthRecord(
        date=BASE_DATE + timedelta(days=day),
        data_type=HealthSignal.MENSTRUAL,
        source=source,
        menstrual_phase=phase,
    )


@pytest.fixture
def thresholds() -> ThresholdConfig:
    """Load the bundled thresholds for tests."""
    return load_thresholds()
