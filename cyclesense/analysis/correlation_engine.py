"""Lifestyle correlation engine.

Groups a user's episodes by the sleep quality and menstrual phase in effect
on the day each episode started, to surface patterns like:
- "Most of your episodes follow nights scored below 40"
- "Episodes in the luteal phase are both frequent and intense"

Each category is analysed with a two-step strategy.  Tier 1 joins episodes
against structured unified health records by calendar date.  Tier 2 runs only
when Tier 1 produced no buckets, and reads the episode's free-text triggers.
The tier that produced the buckets is recorded for provenance.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import date

from cyclesense.analysis.config_loader import (
    MenstrualThresholds,
    SleepThresholds,
    ThresholdConfig,
    get_thresholds,
)
from cyclesense.analysis.models import (
    AnalysisTier,
    CategoryAnalysis,
    CorrelationResult,
    CorrelationStrength,
    DataSource,
    Episode,
    ExternalHealthRecord,
    HealthSignal,
    MenstrualCorrelation,
    RiskLevel,
    SleepCorrelation,
    SleepQuality,
)
from cyclesense.imports.base import Phase

logger = logging.getLogger("cyclesense.analysis.correlation_engine")

# Category label for one episode, or None when the episode has no signal
Classifier = Callable[[Episode], "str | None"]


@dataclass
class _Tally:
    count: int = 0
    pain_sum: float = 0.0

    def add(self, pain: float | None) -> None:
        self.count += 1
        self.pain_sum += pain or 0.0

    @property
    def avg_pain(self) -> float:
        return self.pain_sum / self.count if self.count else 0.0


# ---------------------------------------------------------------------------
# Classification rules
# ---------------------------------------------------------------------------


def classify_sleep_strength(
    quality: str, count: int, avg_pain: float, cfg: SleepThresholds
) -> CorrelationStrength:
    """Rate how strongly a sleep bucket is associated with pain.

    Example::

        classify_sleep_strength("poor", 5, 7.0, cfg)   # STRONG
        classify_sleep_strength("poor", 5, 6.99, cfg)  # MODERATE
    """
    if quality == SleepQuality.POOR and avg_pain >= cfg.strong_poor_min_pain:
        return CorrelationStrength.STRONG
    if quality == SleepQuality.POOR and avg_pain >= cfg.moderate_poor_min_pain:
        return CorrelationStrength.MODERATE
    if quality == SleepQuality.FAIR and avg_pain >= cfg.moderate_fair_min_pain:
        return CorrelationStrength.MODERATE
    if count >= cfg.weak_min_count:
        return CorrelationStrength.WEAK
    return CorrelationStrength.NONE


def classify_menstrual_risk(
    count: int, avg_pain: float, cfg: MenstrualThresholds
) -> RiskLevel:
    """Rate a menstrual-phase bucket by frequency and intensity."""
    if count >= cfg.high_min_count and avg_pain >= cfg.high_min_pain:
        return RiskLevel.HIGH
    if count >= cfg.medium_min_count or avg_pain >= cfg.medium_min_pain:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def resolve_data_source(
    sleep: CategoryAnalysis, menstrual: CategoryAnalysis, total_episodes: int
) -> DataSource:
    """Tag report provenance from the tiers that actually produced buckets."""
    if total_episodes == 0:
        return DataSource.NONE
    tiers = {a.tier for a in (sleep, menstrual) if a.tier is not None}
    if not tiers:
        return DataSource.NONE
    if tiers == {AnalysisTier.UNIFIED}:
        return DataSource.UNIFIED
    if tiers == {AnalysisTier.TRIGGERS}:
        return DataSource.HEURISTIC
    return DataSource.MIXED


def _tally(episodes: Iterable[Episode], classify: Classifier) -> dict[str, _Tally]:
    tallies: dict[str, _Tally] = {}
    for episode in episodes:
        category = classify(episode)
        if category is None:
            continue
        tallies.setdefault(category, _Tally()).add(episode.pain_intensity)
    return tallies


def _two_tier(
    episodes: Sequence[Episode],
    structured: Classifier,
    heuristic: Classifier,
) -> tuple[dict[str, _Tally], AnalysisTier | None]:
    """Run Tier 1, falling back to Tier 2 only when Tier 1 is empty."""
    tallies = _tally(episodes, structured)
    if tallies:
        return tallies, AnalysisTier.UNIFIED
    tallies = _tally(episodes, heuristic)
    if tallies:
        return tallies, AnalysisTier.TRIGGERS
    return {}, None


def _percentage(count: int, total: int) -> int:
    # half-up, so 2/8 → 25 and 1/8 → 13
    return int(100 * count / total + 0.5) if total else 0


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class CorrelationEngine:
    """Correlate episodes with sleep quality and menstrual phase.

    Usage::

        engine = CorrelationEngine()
        result = engine.analyze(episodes, records)
        result.sleep.tier          # AnalysisTier.UNIFIED
        result.data_source         # DataSource.MIXED
    """

    def __init__(self, config: ThresholdConfig | None = None) -> None:
        self.config = config or get_thresholds()

    def analyze(
        self,
        episodes: Sequence[Episode],
        records: Iterable[ExternalHealthRecord] = (),
    ) -> CorrelationResult:
        """Run both category analyses and tag provenance.

        Never raises for missing data; absent signals degrade to Tier 2 and
        then to empty buckets.
        """
        records = list(records)
        total = len(episodes)
        if total == 0:
            logger.info("No episodes to analyse")
            empty = CategoryAnalysis()
            return CorrelationResult(empty, empty, DataSource.NONE, 0)

        sleep = self.analyze_sleep(episodes, records)
        menstrual = self.analyze_menstrual(episodes, records)
        data_source = resolve_data_source(sleep, menstrual, total)

        logger.info(
            "Correlation analysis: %d episodes, %d records → sleep=%d buckets (tier %s), "
            "menstrual=%d buckets (tier %s), source=%s",
            total,
            len(records),
            len(sleep.buckets),
            sleep.tier.name.lower() if sleep.tier else "-",
            len(menstrual.buckets),
            menstrual.tier.name.lower() if menstrual.tier else "-",
            data_source.value,
        )
        return CorrelationResult(sleep, menstrual, data_source, total)

    # ------------------------------------------------------------------
    # Sleep
    # ------------------------------------------------------------------

    def analyze_sleep(
        self, episodes: Sequence[Episode], records: Iterable[ExternalHealthRecord]
    ) -> CategoryAnalysis:
        cfg = self.config.sleep
        scores = _first_per_date(
            records,
            HealthSignal.SLEEP,
            lambda r: r.sleep_quality_score,
        )

        def structured(episode: Episode) -> str | None:
            score = scores.get(episode.date)
            return cfg.band_for(score).value if score is not None else None

        tallies, tier = _two_tier(episodes, structured, self.sleep_from_triggers)
        total = len(episodes)
        buckets = [
            SleepCorrelation(
                category=quality,
                episode_count=t.count,
                avg_pain_intensity=t.avg_pain,
                percentage_of_episodes=_percentage(t.count, total),
                strength=classify_sleep_strength(quality, t.count, t.avg_pain, cfg),
            )
            for quality, t in tallies.items()
        ]
        return CategoryAnalysis(_by_count(buckets), tier)

    def sleep_from_triggers(self, episode: Episode) -> str | None:
        """Extract a sleep quality from free-text triggers.

        A trigger naming a quality band alongside a sleep keyword wins
        outright (``"poor sleep"`` → poor).  Otherwise a sleep keyword plus
        a polarity word decides (``"lack of sleep"`` → poor).  The first
        qualifying trigger is used.
        """
        cfg = self.config.sleep
        for trigger in episode.triggers:
            text = trigger.lower()
            if not any(k in text for k in cfg.keywords):
                continue
            for quality in SleepQuality:
                if quality.value in text:
                    return quality.value
            if any(w in text for w in cfg.poor_words):
                return SleepQuality.POOR.value
            if any(w in text for w in cfg.good_words):
                return SleepQuality.GOOD.value
        return None

    # ------------------------------------------------------------------
    # Menstrual
    # ------------------------------------------------------------------

    def analyze_menstrual(
        self, episodes: Sequence[Episode], records: Iterable[ExternalHealthRecord]
    ) -> CategoryAnalysis:
        cfg = self.config.menstrual
        phases = _first_per_date(
            records,
            HealthSignal.MENSTRUAL,
            lambda r: r.menstrual_phase,
        )

        def structured(episode: Episode) -> str | None:
            phase = phases.get(episode.date)
            return phase.value if phase is not None else None

        tallies, tier = _two_tier(episodes, structured, self.phase_from_triggers)
        total = len(episodes)
        buckets = [
            MenstrualCorrelation(
                category=phase,
                episode_count=t.count,
                avg_pain_intensity=t.avg_pain,
                percentage_of_episodes=_percentage(t.count, total),
                risk=classify_menstrual_risk(t.count, t.avg_pain, cfg),
            )
            for phase, t in tallies.items()
        ]
        return CategoryAnalysis(_by_count(buckets), tier)

    def phase_from_triggers(self, episode: Episode) -> str | None:
        """Extract a cycle phase from free-text triggers.

        The first trigger that names a phase or mentions the cycle decides.
        A bare ``"period"`` mention means menstrual; a bare ``"cycle"``
        mention stops the scan without naming a phase.
        """
        cfg = self.config.menstrual
        for trigger in episode.triggers:
            text = trigger.lower()
            named = next((p for p in Phase if p.value in text), None)
            if named is not None:
                return named.value
            if any(k in text for k in cfg.mention_keywords):
                if any(k in text for k in cfg.menstrual_keywords):
                    return Phase.MENSTRUAL.value
                return None
        return None


def _first_per_date(
    records: Iterable[ExternalHealthRecord],
    signal: HealthSignal,
    value: Callable[[ExternalHealthRecord], object],
) -> dict[date, object]:
    """Index the first usable value of one signal type per calendar date."""
    indexed: dict[date, object] = {}
    for record in records:
        if record.data_type is not signal or record.date in indexed:
            continue
        v = value(record)
        if v is not None:
            indexed[record.date] = v
    return indexed


def _by_count(buckets: list) -> tuple:
    # stable: ties keep first-seen order
    return tuple(sorted(buckets, key=lambda b: b.episode_count, reverse=True))
