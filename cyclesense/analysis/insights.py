"""Turn correlation buckets into a display-ready lifestyle report.

Pure derivation: no ranking beyond the fixed rule order below and at most
one recommendation per rule.  Statements are descriptive associations, never
diagnoses.
"""

from __future__ import annotations

import logging

from cyclesense.analysis.config_loader import ThresholdConfig, get_thresholds
from cyclesense.analysis.models import (
    AnalysisTier,
    CategoryAnalysis,
    CorrelationResult,
    CorrelationStrength,
    DataSource,
    LifestyleReport,
    MenstrualCorrelation,
    RiskLevel,
    SleepCorrelation,
    SleepQuality,
)
from cyclesense.imports.base import Phase

logger = logging.getLogger("cyclesense.analysis.insights")

SLEEP_IMPACT_TEMPLATE = "Poor sleep is associated with {pain}/10 average pain intensity"
SLEEP_HYGIENE_RECOMMENDATION = (
    "Consider improving sleep hygiene - poor sleep appears to be a significant trigger"
)
PHASE_TRACKING_TEMPLATE = "Track {phase} phase closely - higher episode risk detected"
IMPORT_CYCLE_DATA_RECOMMENDATION = (
    "Import your cycle data from Clue, Flo or a CSV file for more accurate "
    "menstrual phase correlations"
)
CONNECT_SLEEP_TRACKER_RECOMMENDATION = (
    "Connect a sleep tracker for more accurate sleep quality correlations"
)


def format_pain(value: float) -> str:
    """Render a pain average with at most one decimal: 8.0 → "8", 6.25 → "6.3"."""
    text = f"{value + 1e-9:.1f}"
    return text[:-2] if text.endswith(".0") else text


class InsightSynthesizer:
    """Derive impact statements and recommendations from correlation output."""

    def __init__(self, config: ThresholdConfig | None = None) -> None:
        self.config = config or get_thresholds()

    def synthesize(
        self,
        sleep: CategoryAnalysis,
        menstrual: CategoryAnalysis,
        data_source: DataSource,
        total_episodes: int,
    ) -> LifestyleReport:
        sleep_buckets: list[SleepCorrelation] = list(sleep.buckets)
        menstrual_buckets: list[MenstrualCorrelation] = list(menstrual.buckets)

        poor = sleep.find(SleepQuality.POOR.value)
        impact = None
        if poor is not None and poor.strength is not CorrelationStrength.NONE:
            impact = SLEEP_IMPACT_TEMPLATE.format(pain=format_pain(poor.avg_pain_intensity))

        high_risk = next(
            (b for b in menstrual_buckets if b.risk is RiskLevel.HIGH), None
        )

        recommendations: list[str] = []
        if poor is not None and poor.episode_count >= self.config.insights.sleep_hygiene_min_count:
            recommendations.append(SLEEP_HYGIENE_RECOMMENDATION)
        if high_risk is not None:
            recommendations.append(PHASE_TRACKING_TEMPLATE.format(phase=high_risk.category))
        if menstrual.tier is AnalysisTier.TRIGGERS:
            recommendations.append(IMPORT_CYCLE_DATA_RECOMMENDATION)
        if sleep.tier is AnalysisTier.TRIGGERS:
            recommendations.append(CONNECT_SLEEP_TRACKER_RECOMMENDATION)

        report = LifestyleReport(
            sleep_correlations=sleep_buckets,
            menstrual_correlations=menstrual_buckets,
            data_source=data_source,
            sleep_tier=sleep.tier,
            menstrual_tier=menstrual.tier,
            sleep_quality_impact=impact,
            high_risk_menstrual_phase=Phase(high_risk.category) if high_risk else None,
            recommendations=recommendations,
            total_episodes=total_episodes,
        )
        logger.debug(
            "Synthesized report: %d recommendations, impact=%s, high_risk=%s",
            len(recommendations),
            impact is not None,
            report.high_risk_menstrual_phase,
        )
        return report

    def from_result(self, result: CorrelationResult) -> LifestyleReport:
        return self.synthesize(
            result.sleep, result.menstrual, result.data_source, result.total_episodes
        )
