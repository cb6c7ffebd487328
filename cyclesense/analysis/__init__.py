"""CycleSense lifestyle correlation analysis: public API.

Usage::

    from cyclesense.analysis import analyze_lifestyle

    report = analyze_lifestyle(episodes, records)
    report.data_source          # DataSource.UNIFIED
    report.recommendations      # ["Consider improving sleep hygiene - ..."]
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from cyclesense.analysis.config_loader import (
    ConfigValidationError,
    ThresholdConfig,
    get_thresholds,
    reload_thresholds,
)
from cyclesense.analysis.correlation_engine import CorrelationEngine
from cyclesense.analysis.insights import InsightSynthesizer
from cyclesense.analysis.models import (
    AnalysisTier,
    DataSource,
    Episode,
    ExternalHealthRecord,
    LifestyleReport,
)

__all__ = [
    "analyze_lifestyle",
    "AnalysisTier",
    "ConfigValidationError",
    "CorrelationEngine",
    "DataSource",
    "Episode",
    "ExternalHealthRecord",
    "InsightSynthesizer",
    "LifestyleReport",
    "ThresholdConfig",
    "get_thresholds",
    "reload_thresholds",
]


def analyze_lifestyle(
    episodes: Sequence[Episode],
    records: Iterable[ExternalHealthRecord] = (),
    config: ThresholdConfig | None = None,
) -> LifestyleReport:
    """Correlate episodes with sleep and cycle signals and build the report.

    Args:
        episodes: Episodes in the analysis window.
        records:  Unified sleep / menstrual records from the same window.
        config:   Threshold override; the bundled thresholds by default.
    """
    config = config or get_thresholds()
    result = CorrelationEngine(config).analyze(episodes, records)
    return InsightSynthesizer(config).from_result(result)
