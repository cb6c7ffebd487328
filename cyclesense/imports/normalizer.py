"""Menstrual phase and period flow vocabulary normalisation.

Trackers export phase and flow as free text ("PMS", "Ovulation Day 3",
"very light").  Each value is resolved in three steps:

1. exact lookup in an alias table,
2. exact membership in the canonical set,
3. substring containment of a canonical value, in canonical order.

Anything else resolves to ``None``, which callers treat as "no signal".
All matching is case-insensitive on trimmed input.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TypeVar

from cyclesense.imports.base import Flow, Phase

logger = logging.getLogger("cyclesense.imports.normalizer")

_E = TypeVar("_E", bound=Enum)

# ---------------------------------------------------------------------------
# Alias tables
# All keys are stored lowercase; matching is done on lowercased input.
# ---------------------------------------------------------------------------

PHASE_ALIASES: dict[str, Phase] = {
    "period": Phase.MENSTRUAL,
    "bleeding": Phase.MENSTRUAL,
    "menstruation": Phase.MENSTRUAL,
    "ovulatory": Phase.OVULATION,
    "pre-ovulation": Phase.FOLLICULAR,
    "post-ovulation": Phase.LUTEAL,
    "pre-menstrual": Phase.LUTEAL,
    "pms": Phase.LUTEAL,
}

FLOW_ALIASES: dict[str, Flow] = {
    "very light": Flow.LIGHT,
    "very heavy": Flow.HEAVY,
    "moderate": Flow.MEDIUM,
    "normal": Flow.MEDIUM,
    "spot": Flow.SPOTTING,
}


def _normalize(text: str | None, aliases: dict[str, _E], canonical: type[_E]) -> _E | None:
    if text is None:
        return None
    if isinstance(text, canonical):
        return text
    value = text.lower().strip()
    if not value:
        return None

    if value in aliases:
        return aliases[value]

    for member in canonical:
        if value == member.value:
            return member

    for member in canonical:
        if member.value in value:
            return member

    return None


def normalize_phase(text: str | None) -> Phase | None:
    """Map free-text phase vocabulary to a canonical Phase.

    Example::

        normalize_phase("PMS")               # Phase.LUTEAL
        normalize_phase("Ovulation Day 3")   # Phase.OVULATION
        normalize_phase("luteal")            # Phase.LUTEAL
        normalize_phase("tired")             # None
    """
    return _normalize(text, PHASE_ALIASES, Phase)


def normalize_flow(text: str | None) -> Flow | None:
    """Map free-text flow vocabulary to a canonical Flow.

    Example::

        normalize_flow("Very Light")   # Flow.LIGHT
        normalize_flow("moderate")     # Flow.MEDIUM
        normalize_flow("none")         # Flow.NONE
    """
    return _normalize(text, FLOW_ALIASES, Flow)
