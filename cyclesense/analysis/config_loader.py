"""Load, validate, and hot-reload the lifestyle correlation thresholds.

The thresholds live in ``thresholds.yaml`` alongside this module.  They are
loaded once on first use and cached.  Call ``reload_thresholds()`` to re-read
from disk after an edit; no restart required.

Usage::

    from cyclesense.analysis.config_loader import get_thresholds

    config = get_thresholds()
    config.sleep.band_for(35)             # SleepQuality.POOR
    config.menstrual.high_min_count       # 5
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from cyclesense.analysis.models import SleepQuality

logger = logging.getLogger("cyclesense.analysis.config")

# Path to the YAML file sitting next to this module
_CONFIG_PATH = Path(__file__).parent / "thresholds.yaml"


# ---------------------------------------------------------------------------
# Typed config sections
# ---------------------------------------------------------------------------


@dataclass
class SleepThresholds:
    """Sleep banding, trigger vocabulary and strength cut-offs."""

    excellent_min_score: float
    good_min_score: float
    fair_min_score: float
    keywords: list[str]
    poor_words: list[str]
    good_words: list[str]
    strong_poor_min_pain: float = 7.0
    moderate_poor_min_pain: float = 5.0
    moderate_fair_min_pain: float = 6.0
    weak_min_count: int = 3

    def band_for(self, score: float) -> SleepQuality:
        """Map a 0–100 sleep score onto a quality band."""
        if score >= self.excellent_min_score:
            return SleepQuality.EXCELLENT
        if score >= self.good_min_score:
            return SleepQuality.GOOD
        if score >= self.fair_min_score:
            return SleepQuality.FAIR
        return SleepQuality.POOR


@dataclass
class MenstrualThresholds:
    """Cycle-mention vocabulary and risk cut-offs."""

    mention_keywords: list[str]
    menstrual_keywords: list[str]
    high_min_count: int = 5
    high_min_pain: float = 6.0
    medium_min_count: int = 3
    medium_min_pain: float = 5.0


@dataclass
class InsightThresholds:
    sleep_hygiene_min_count: int = 3


@dataclass
class ThresholdConfig:
    """Complete, validated threshold configuration.

    Attributes:
        version:    Config schema version string.
        sleep:      Sleep banding and strength settings.
        menstrual:  Menstrual risk settings.
        insights:   Recommendation rule settings.
    """

    version: str
    sleep: SleepThresholds
    menstrual: MenstrualThresholds
    insights: InsightThresholds
    _raw: dict = field(default_factory=dict, repr=False)


# ---------------------------------------------------------------------------
# Loader / validation
# ---------------------------------------------------------------------------


class ConfigValidationError(ValueError):
    """Raised when thresholds.yaml fails validation."""


def _load_yaml(path: Path) -> dict:
    """Read and parse a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If the YAML is malformed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Threshold config not found: {path}")

    with path.open("r", encoding="utf-8") as fh:
        try:
            loaded = yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigValidationError(f"YAML parse error in {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise ConfigValidationError(f"{path} must contain a mapping at the top level")
    return loaded


def _validate_and_build(raw: dict) -> ThresholdConfig:
    """Validate the raw YAML dict and construct a ThresholdConfig.

    All problems are collected and reported together.

    Raises:
        ConfigValidationError: If any value is missing, mistyped or out of range.
    """
    errors: list[str] = []

    def _number(section: dict, key: str, path: str, default: float, lo: float, hi: float) -> float:
        value = section.get(key, default)
        try:
            number = float(value)
        except (TypeError, ValueError):
            errors.append(f"{path}.{key} must be a number, got {value!r}")
            return default
        if not (lo <= number <= hi):
            errors.append(f"{path}.{key} = {number} is out of range [{lo}, {hi}]")
        return number

    def _count(section: dict, key: str, path: str, default: int) -> int:
        value = section.get(key, default)
        if isinstance(value, bool) or not isinstance(value, int):
            errors.append(f"{path}.{key} must be an integer, got {value!r}")
            return default
        if value < 1:
            errors.append(f"{path}.{key} = {value} must be at least 1")
        return value

    def _words(section: dict, key: str, path: str, default: list[str]) -> list[str]:
        value = section.get(key, default)
        if not isinstance(value, list) or not value or not all(
            isinstance(w, str) and w.strip() for w in value
        ):
            errors.append(f"{path}.{key} must be a non-empty list of strings")
            return list(default)
        return [w.strip().lower() for w in value]

    def _section(d: dict, key: str, path: str) -> dict:
        value = d.get(key, {})
        if not isinstance(value, dict):
            errors.append(f"{path}{key} must be a mapping")
            return {}
        return value

    version = str(raw.get("version", "1.0"))

    # ── Sleep ──
    sleep_raw = _section(raw, "sleep", "")
    bands_raw = _section(sleep_raw, "quality_bands", "sleep.")
    polarity_raw = _section(sleep_raw, "polarity", "sleep.")
    strength_raw = _section(sleep_raw, "strength", "sleep.")

    excellent = _number(bands_raw, "excellent", "sleep.quality_bands", 80, 0, 100)
    good = _number(bands_raw, "good", "sleep.quality_bands", 60, 0, 100)
    fair = _number(bands_raw, "fair", "sleep.quality_bands", 40, 0, 100)
    if not (excellent > good > fair):
        errors.append(
            "sleep.quality_bands must be strictly descending "
            f"(excellent > good > fair), got {excellent}/{good}/{fair}"
        )

    sleep = SleepThresholds(
        excellent_min_score=excellent,
        good_min_score=good,
        fair_min_score=fair,
        keywords=_words(
            sleep_raw, "keywords", "sleep", ["sleep", "tired", "fatigue", "insomnia", "rest"]
        ),
        poor_words=_words(polarity_raw, "poor", "sleep.polarity", ["lack", "poor", "bad"]),
        good_words=_words(polarity_raw, "good", "sleep.polarity", ["good", "well"]),
        strong_poor_min_pain=_number(
            strength_raw, "strong_poor_min_pain", "sleep.strength", 7, 0, 10
        ),
        moderate_poor_min_pain=_number(
            strength_raw, "moderate_poor_min_pain", "sleep.strength", 5, 0, 10
        ),
        moderate_fair_min_pain=_number(
            strength_raw, "moderate_fair_min_pain", "sleep.strength", 6, 0, 10
        ),
        weak_min_count=_count(strength_raw, "weak_min_count", "sleep.strength", 3),
    )
    if sleep.moderate_poor_min_pain > sleep.strong_poor_min_pain:
        errors.append(
            "sleep.strength.moderate_poor_min_pain must not exceed strong_poor_min_pain"
        )

    # ── Menstrual ──
    menstrual_raw = _section(raw, "menstrual", "")
    risk_raw = _section(menstrual_raw, "risk", "menstrual.")
    menstrual = MenstrualThresholds(
        mention_keywords=_words(
            menstrual_raw, "mention_keywords", "menstrual", ["period", "cycle"]
        ),
        menstrual_keywords=_words(
            menstrual_raw, "menstrual_keywords", "menstrual", ["period"]
        ),
        high_min_count=_count(risk_raw, "high_min_count", "menstrual.risk", 5),
        high_min_pain=_number(risk_raw, "high_min_pain", "menstrual.risk", 6, 0, 10),
        medium_min_count=_count(risk_raw, "medium_min_count", "menstrual.risk", 3),
        medium_min_pain=_number(risk_raw, "medium_min_pain", "menstrual.risk", 5, 0, 10),
    )

    # ── Insights ──
    insights_raw = _section(raw, "insights", "")
    insights = InsightThresholds(
        sleep_hygiene_min_count=_count(
            insights_raw, "sleep_hygiene_min_count", "insights", 3
        ),
    )

    if errors:
        raise ConfigValidationError(
            f"thresholds.yaml has {len(errors)} validation error(s):\n"
            + "\n".join(f"  • {e}" for e in errors)
        )

    return ThresholdConfig(
        version=version,
        sleep=sleep,
        menstrual=menstrual,
        insights=insights,
        _raw=raw,
    )


def load_thresholds(path: Path | None = None) -> ThresholdConfig:
    """Load and validate the threshold config from disk.

    Args:
        path: Override path to YAML. Uses the bundled thresholds.yaml by default.
    """
    target = path or _CONFIG_PATH
    raw = _load_yaml(target)
    config = _validate_and_build(raw)
    logger.info("Loaded threshold config v%s from %s", config.version, target)
    return config


# ---------------------------------------------------------------------------
# Global singleton with hot-reload support
# ---------------------------------------------------------------------------

_config: ThresholdConfig | None = None
_config_lock = threading.Lock()


def get_thresholds() -> ThresholdConfig:
    """Return the global ThresholdConfig singleton, loading it on first call.

    Thread-safe.  Use ``reload_thresholds()`` to refresh after YAML changes.
    """
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:  # double-checked locking
                _config = load_thresholds()
    return _config


def reload_thresholds(path: Path | None = None) -> ThresholdConfig:
    """Reload the thresholds from disk and replace the global singleton.

    If validation fails, the old config is retained and the error re-raised.

    Raises:
        ConfigValidationError: If the new config is invalid.
        FileNotFoundError:     If the config file is missing.
    """
    global _config
    new_config = load_thresholds(path)  # validate before acquiring lock
    with _config_lock:
        old_version = _config.version if _config else "none"
        _config = new_config
    logger.info("Reloaded threshold config: %s → %s", old_version, new_config.version)
    return new_config
