"""Data models for the lifestyle correlation engine.

Episodes and unified health records are read-only inputs owned by external
stores.  Buckets, category analyses and reports are derived values, rebuilt
on every analysis request and never persisted.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum, IntEnum
from typing import Any

from cyclesense.imports.base import Flow, Phase
from cyclesense.imports.normalizer import normalize_flow, normalize_phase


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class HealthSignal(str, Enum):
    """``data_type`` values of the unified health store used by the analysis."""

    SLEEP = "sleep"
    MENSTRUAL = "menstrual"


class SleepQuality(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class CorrelationStrength(str, Enum):
    STRONG = "strong"
    MODERATE = "moderate"
    WEAK = "weak"
    NONE = "none"


class RiskLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class AnalysisTier(IntEnum):
    """Which path produced a category's buckets.

    UNIFIED : Tier 1, joined against structured unified health records.
    TRIGGERS: Tier 2, extracted from free-text episode triggers.
    """

    UNIFIED = 1
    TRIGGERS = 2


class DataSource(str, Enum):
    """Provenance of a whole report.

    ``TRIGGERS`` is an alias of ``HEURISTIC``.
    """

    UNIFIED = "unified"
    HEURISTIC = "heuristic"
    TRIGGERS = "heuristic"
    MIXED = "mixed"
    NONE = "none"


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


def _as_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _as_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def _as_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    return float(value)


@dataclass(frozen=True)
class Episode:
    """A logged health episode.

    Attributes:
        start_time:      Onset timestamp; its own calendar date is used for
                         joins, without zone conversion.
        pain_intensity:  0–10, or None when not logged.
        triggers:        Free-text trigger labels as entered by the user.
        id:              Store identifier, if any.
    """

    start_time: datetime
    pain_intensity: float | None = None
    triggers: tuple[str, ...] = ()
    id: str | None = None

    @property
    def date(self) -> date:
        return self.start_time.date()

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Episode":
        """Build an Episode from a store row or JSON mapping."""
        raw_id = row.get("id")
        return cls(
            start_time=_as_datetime(row["start_time"]),
            pain_intensity=_as_float(row.get("pain_intensity")),
            triggers=tuple(t for t in (row.get("triggers") or ()) if t),
            id=str(raw_id) if raw_id is not None else None,
        )


@dataclass(frozen=True)
class ExternalHealthRecord:
    """One unified health record: a single signal for a single day.

    Attributes:
        date:                   Calendar date the signal belongs to.
        data_type:              Signal type (sleep or menstrual).
        source:                 Originating source (e.g. ``oura``, ``csv_clue``).
        sleep_quality_score:    0–100 sleep score (sleep records).
        sleep_duration_minutes: Total sleep (sleep records).
        menstrual_phase:        Canonical phase (menstrual records).
        period_flow:            Canonical flow (menstrual records).
        cycle_day:              1-based cycle day (menstrual records).
    """

    date: date
    data_type: HealthSignal
    source: str = "unknown"
    sleep_quality_score: float | None = None
    sleep_duration_minutes: int | None = None
    menstrual_phase: Phase | None = None
    period_flow: Flow | None = None
    cycle_day: int | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "ExternalHealthRecord":
        """Build a record from a ``unified_health_data`` row.

        Phase and flow are stored as free text by some sources, so they are
        run through the same vocabulary normalizer as CSV imports.

        Raises:
            ValueError: If ``data_type`` is not a supported signal.
        """
        duration = row.get("sleep_duration_minutes")
        cycle_day = row.get("cycle_day")
        return cls(
            date=_as_date(row["date"]),
            data_type=HealthSignal(row["data_type"]),
            source=row.get("source") or "unknown",
            sleep_quality_score=_as_float(row.get("sleep_quality_score")),
            sleep_duration_minutes=int(duration) if duration is not None else None,
            menstrual_phase=normalize_phase(row.get("menstrual_phase")),
            period_flow=normalize_flow(row.get("period_flow")),
            cycle_day=int(cycle_day) if cycle_day is not None else None,
        )


# ---------------------------------------------------------------------------
# Derived values
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CorrelationBucket:
    """Episodes grouped under one categorical signal value.

    Attributes:
        category:               Signal value (``"poor"``, ``"luteal"``, ...).
        episode_count:          Episodes that fell into this bucket.
        avg_pain_intensity:     Mean pain of those episodes (unrounded).
        percentage_of_episodes: Share of all analysed episodes, 0–100.
    """

    category: str
    episode_count: int
    avg_pain_intensity: float
    percentage_of_episodes: int

    @property
    def label(self) -> str:
        return self.category.capitalize()

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "label": self.label,
            "episode_count": self.episode_count,
            "avg_pain_intensity": round(self.avg_pain_intensity, 1),
            "percentage_of_episodes": self.percentage_of_episodes,
        }


@dataclass(frozen=True)
class SleepCorrelation(CorrelationBucket):
    strength: CorrelationStrength = CorrelationStrength.NONE

    def to_dict(self) -> dict:
        return {**super().to_dict(), "strength": self.strength.value}


@dataclass(frozen=True)
class MenstrualCorrelation(CorrelationBucket):
    risk: RiskLevel = RiskLevel.LOW

    def to_dict(self) -> dict:
        return {**super().to_dict(), "risk": self.risk.value}


@dataclass(frozen=True)
class CategoryAnalysis:
    """Buckets for one category plus the tier that produced them.

    ``tier`` is None when neither tier produced a bucket.
    """

    buckets: tuple[CorrelationBucket, ...] = ()
    tier: AnalysisTier | None = None

    def find(self, category: str) -> CorrelationBucket | None:
        for bucket in self.buckets:
            if bucket.category == category:
                return bucket
        return None


@dataclass(frozen=True)
class CorrelationResult:
    """Raw output of the correlation engine, before insight synthesis."""

    sleep: CategoryAnalysis
    menstrual: CategoryAnalysis
    data_source: DataSource
    total_episodes: int


@dataclass
class LifestyleReport:
    """Display-ready lifestyle correlation report.

    Attributes:
        sleep_correlations:        Sleep buckets, most episodes first.
        menstrual_correlations:    Menstrual buckets, most episodes first.
        data_source:               Report provenance.
        sleep_tier:                Tier behind the sleep buckets, if any.
        menstrual_tier:            Tier behind the menstrual buckets, if any.
        sleep_quality_impact:      Sentence on poor-sleep pain, if notable.
        high_risk_menstrual_phase: Phase classified high risk, if any.
        recommendations:           Rule-ordered recommendation strings.
        total_episodes:            Episodes analysed.
    """

    sleep_correlations: list[SleepCorrelation] = field(default_factory=list)
    menstrual_correlations: list[MenstrualCorrelation] = field(default_factory=list)
    data_source: DataSource = DataSource.NONE
    sleep_tier: AnalysisTier | None = None
    menstrual_tier: AnalysisTier | None = None
    sleep_quality_impact: str | None = None
    high_risk_menstrual_phase: Phase | None = None
    recommendations: list[str] = field(default_factory=list)
    total_episodes: int = 0

    @property
    def has_sleep_data(self) -> bool:
        return bool(self.sleep_correlations)

    @property
    def has_menstrual_data(self) -> bool:
        return bool(self.menstrual_correlations)

    @property
    def has_data(self) -> bool:
        return self.total_episodes > 0

    def to_dict(self) -> dict:
        return {
            "sleep_correlations": [b.to_dict() for b in self.sleep_correlations],
            "menstrual_correlations": [b.to_dict() for b in self.menstrual_correlations],
            "data_source": self.data_source.value,
            "sleep_tier": self.sleep_tier.name.lower() if self.sleep_tier else None,
            "menstrual_tier": self.menstrual_tier.name.lower() if self.menstrual_tier else None,
            "sleep_quality_impact": self.sleep_quality_impact,
            "high_risk_menstrual_phase": (
                self.high_risk_menstrual_phase.value
                if self.high_risk_menstrual_phase
                else None
            ),
            "has_sleep_data": self.has_sleep_data,
            "has_menstrual_data": self.has_menstrual_data,
            "has_data": self.has_data,
            "recommendations": self.recommendations,
            "total_episodes": self.total_episodes,
        }
