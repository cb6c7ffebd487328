"""Tests for the two-tier lifestyle correlation engine."""

from __future__ import annotations

import pytest

from cyclesense.analysis.config_loader import ThresholdConfig
from cyclesense.analysis.correlation_engine import (
    CorrelationEngine,
    classify_menstrual_risk,
    classify_sleep_strength,
    resolve_data_source,
)
from cyclesense.analysis.models import (
    AnalysisTier,
    CategoryAnalysis,
    CorrelationStrength,
    DataSource,
    RiskLevel,
)
from cyclesense.analysis.tests.conftest import cycle_record, episode, sleep_record
from cyclesense.imports.base import Phase


@pytest.fixture
def engine(thresholds: ThresholdConfig) -> CorrelationEngine:
    return CorrelationEngine(thresholds)


# ---------------------------------------------------------------------------
# Classification rules
# ---------------------------------------------------------------------------


class TestSleepStrength:
    @pytest.mark.parametrize(
        "quality, count, avg, expected",
        [
            ("poor", 1, 7.0, CorrelationStrength.STRONG),
            ("poor", 1, 6.99, CorrelationStrength.MODERATE),
            ("poor", 1, 5.0, CorrelationStrength.MODERATE),
            ("poor", 1, 4.99, CorrelationStrength.NONE),
            ("poor", 3, 4.0, CorrelationStrength.WEAK),
            ("fair", 1, 6.0, CorrelationStrength.MODERATE),
            ("fair", 1, 5.99, CorrelationStrength.NONE),
            ("good", 3, 9.0, CorrelationStrength.WEAK),
            ("excellent", 2, 9.0, CorrelationStrength.NONE),
        ],
    )
    def test_boundaries(self, thresholds, quality, count, avg, expected) -> None:
        assert classify_sleep_strength(quality, count, avg, thresholds.sleep) is expected


class TestMenstrualRisk:
    @pytest.mark.parametrize(
        "count, avg, expected",
        [
            (5, 6.0, RiskLevel.HIGH),
            (5, 5.99, RiskLevel.MEDIUM),
            (4, 9.0, RiskLevel.MEDIUM),
            (3, 1.0, RiskLevel.MEDIUM),
            (2, 5.0, RiskLevel.MEDIUM),
            (2, 4.99, RiskLevel.LOW),
        ],
    )
    def test_boundaries(self, thresholds, count, avg, expected) -> None:
        assert classify_menstrual_risk(count, avg, thresholds.menstrual) is expected


class TestResolveDataSource:
    unified = CategoryAnalysis((), AnalysisTier.UNIFIED)
    triggers = CategoryAnalysis((), AnalysisTier.TRIGGERS)
    empty = CategoryAnalysis()

    def test_all_unified(self) -> None:
        assert resolve_data_source(self.unified, self.unified, 3) is DataSource.UNIFIED

    def test_single_category_unified(self) -> None:
        assert resolve_data_source(self.unified, self.empty, 3) is DataSource.UNIFIED

    def test_all_triggers(self) -> None:
        assert resolve_data_source(self.empty, self.triggers, 3) is DataSource.HEURISTIC
        assert DataSource.TRIGGERS is DataSource.HEURISTIC

    def test_mixed(self) -> None:
        assert resolve_data_source(self.unified, self.triggers, 3) is DataSource.MIXED

    def test_none(self) -> None:
        assert resolve_data_source(self.empty, self.empty, 3) is DataSource.NONE
        assert resolve_data_source(self.unified, self.unified, 0) is DataSource.NONE


# ---------------------------------------------------------------------------
# Tier 1: structured records
# ---------------------------------------------------------------------------


class TestSleepTier1:
    def test_poor_sleep_strong(self, engine: CorrelationEngine) -> None:
        episodes = [episode(i, pain=8) for i in range(5)]
        records = [sleep_record(i, 30) for i in range(5)]
        result = engine.analyze(episodes, records)

        assert result.sleep.tier is AnalysisTier.UNIFIED
        poor = result.sleep.find("poor")
        assert poor.episode_count == 5
        assert poor.avg_pain_intensity == 8
        assert poor.percentage_of_episodes == 100
        assert poor.strength is CorrelationStrength.STRONG

    def test_buckets_sorted_by_count(self, engine: CorrelationEngine) -> None:
        episodes = [episode(i) for i in range(6)]
        records = [sleep_record(0, 90)] + [sleep_record(i, 65) for i in range(1, 6)]
        buckets = engine.analyze(episodes, records).sleep.buckets
        assert [b.category for b in buckets] == ["good", "excellent"]

    def test_join_uses_episode_calendar_date(self, engine: CorrelationEngine) -> None:
        late = episode(0, hour=23)
        result = engine.analyze([late, episode(1)], [sleep_record(0, 20)])
        assert result.sleep.find("poor").episode_count == 1

    def test_missing_pain_counts_as_zero(self, engine: CorrelationEngine) -> None:
        episodes = [episode(0, pain=None), episode(1, pain=8)]
        records = [sleep_record(0, 10), sleep_record(1, 10)]
        poor = engine.analyze(episodes, records).sleep.find("poor")
        assert poor.avg_pain_intensity == 4

    def test_percentage_rounds_half_up(self, engine: CorrelationEngine) -> None:
        episodes = [episode(i) for i in range(8)]
        poor = engine.analyze(episodes, [sleep_record(0, 10)]).sleep.find("poor")
        assert poor.percentage_of_episodes == 13   # 12.5 → 13

    def test_record_without_score_is_ignored(self, engine: CorrelationEngine) -> None:
        result = engine.analyze([episode(0, triggers=("poor sleep",))], [sleep_record(0, None)])
        assert result.sleep.tier is AnalysisTier.TRIGGERS

    def test_first_record_per_date_wins(self, engine: CorrelationEngine) -> None:
        records = [sleep_record(0, 90, "oura"), sleep_record(0, 10, "fitbit")]
        result = engine.analyze([episode(0)], records)
        assert [b.category for b in result.sleep.buckets] == ["excellent"]


class TestMenstrualTier1:
    def test_high_risk_phase(self, engine: CorrelationEngine) -> None:
        episodes = [episode(i, pain=7) for i in range(5)] + [episode(10, pain=2)]
        records = [cycle_record(i, Phase.LUTEAL) for i in range(5)] + [
            cycle_record(10, Phase.FOLLICULAR)
        ]
        result = engine.analyze(episodes, records)
        assert result.menstrual.tier is AnalysisTier.UNIFIED
        luteal, follicular = result.menstrual.buckets
        assert luteal.category == "luteal"
        assert luteal.risk is RiskLevel.HIGH
        assert follicular.risk is RiskLevel.LOW
        assert luteal.percentage_of_episodes == 83

    def test_record_without_phase_is_ignored(self, engine: CorrelationEngine) -> None:
        result = engine.analyze([episode(0)], [cycle_record(0, None)])
        assert result.menstrual.buckets == ()
        assert result.menstrual.tier is None


# ---------------------------------------------------------------------------
# Tier 2: free-text triggers
# ---------------------------------------------------------------------------


class TestSleepTier2:
    @pytest.mark.parametrize(
        "trigger, expected",
        [
            ("Poor sleep", "poor"),
            ("fair sleep", "fair"),
            ("excellent rest", "excellent"),
            ("Lack of sleep", "poor"),
            ("bad night, tired", "poor"),
            ("slept well, rested", "good"),
            ("insomnia", None),
            ("stress", None),
            ("poor diet", None),
        ],
    )
    def test_trigger_extraction(self, engine, trigger, expected) -> None:
        assert engine.sleep_from_triggers(episode(0, triggers=(trigger,))) == expected

    def test_first_qualifying_trigger_wins(self, engine: CorrelationEngine) -> None:
        ep = episode(0, triggers=("stress", "lack of sleep", "good sleep"))
        assert engine.sleep_from_triggers(ep) == "poor"

    def test_tier2_used_only_without_tier1(self, engine: CorrelationEngine) -> None:
        episodes = [episode(0, triggers=("poor sleep",)), episode(1, triggers=("poor sleep",))]
        with_records = engine.analyze(episodes, [sleep_record(0, 90)])
        assert with_records.sleep.tier is AnalysisTier.UNIFIED
        assert [b.category for b in with_records.sleep.buckets] == ["excellent"]

        without = engine.analyze(episodes, [])
        assert without.sleep.tier is AnalysisTier.TRIGGERS
        assert without.sleep.find("poor").episode_count == 2


class TestMenstrualTier2:
    @pytest.mark.parametrize(
        "trigger, expected",
        [
            ("luteal phase", "luteal"),
            ("Ovulation", "ovulation"),
            ("period", "menstrual"),
            ("period started", "menstrual"),
            ("cycle", None),
            ("weather", None),
        ],
    )
    def test_trigger_extraction(self, engine, trigger, expected) -> None:
        assert engine.phase_from_triggers(episode(0, triggers=(trigger,))) == expected

    def test_named_phase_beats_period_mention(self, engine: CorrelationEngine) -> None:
        ep = episode(0, triggers=("luteal, before period",))
        assert engine.phase_from_triggers(ep) == "luteal"

    def test_cycle_mention_stops_scan(self, engine: CorrelationEngine) -> None:
        ep = episode(0, triggers=("cycle changes", "period"))
        assert engine.phase_from_triggers(ep) is None

    def test_one_bucket_per_episode(self, engine: CorrelationEngine) -> None:
        ep = episode(0, triggers=("period", "luteal"))
        result = engine.analyze([ep], [])
        assert [(b.category, b.episode_count) for b in result.menstrual.buckets] == [
            ("menstrual", 1)
        ]


# ---------------------------------------------------------------------------
# Provenance
# ---------------------------------------------------------------------------


class TestProvenance:
    def test_structured_sleep_with_trigger_menstrual_is_mixed(self, engine) -> None:
        episodes = [episode(0, triggers=("period",)), episode(1, triggers=("period",))]
        result = engine.analyze(episodes, [sleep_record(0, 30), sleep_record(1, 30)])
        assert result.sleep.tier is AnalysisTier.UNIFIED
        assert result.menstrual.tier is AnalysisTier.TRIGGERS
        assert result.data_source is DataSource.MIXED

    def test_no_episodes(self, engine: CorrelationEngine) -> None:
        result = engine.analyze([], [sleep_record(0, 30)])
        assert result.data_source is DataSource.NONE
        assert result.total_episodes == 0
        assert result.sleep.buckets == ()

    def test_episodes_without_any_signal(self, engine: CorrelationEngine) -> None:
        result = engine.analyze([episode(0, triggers=("stress",))], [])
        assert result.data_source is DataSource.NONE
        assert result.total_episodes == 1
