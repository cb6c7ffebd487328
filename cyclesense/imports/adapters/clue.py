"""Clue cycle-tracker CSV adapter.

Clue exports carry a date, a period/flow column and the day of the cycle, but
no phase.  The phase is inferred: any flow other than ``none`` means the
menstrual phase, otherwise the cycle day is banded into a phase.

Example layout::

    Date,Period,Flow,Cycle Day,Notes
    2024-01-01,yes,medium,1,"cramps, tired"
    2024-01-09,,,9,
"""

from __future__ import annotations

import logging
from datetime import date

from cyclesense.imports.base import (
    BaseCycleParser,
    Flow,
    NormalizedCycleEntry,
    Phase,
    SourceTag,
)
from cyclesense.imports.detection import (
    CLUE_KEYWORDS,
    NAMED_SCHEMA_THRESHOLD,
    ColumnMap,
    count_keyword_matches,
)
from cyclesense.imports.normalizer import normalize_flow

logger = logging.getLogger("cyclesense.imports.clue")

# Upper cycle-day bound (inclusive) → phase.  Days past the last bound are luteal.
CYCLE_DAY_PHASE_BANDS: tuple[tuple[int, Phase], ...] = (
    (5, Phase.MENSTRUAL),
    (13, Phase.FOLLICULAR),
    (16, Phase.OVULATION),
)


def phase_for_cycle_day(
    cycle_day: int,
    bands: tuple[tuple[int, Phase], ...] = CYCLE_DAY_PHASE_BANDS,
) -> Phase:
    """Estimate the phase from a 1-based cycle day.

    Example::

        phase_for_cycle_day(5)    # Phase.MENSTRUAL
        phase_for_cycle_day(6)    # Phase.FOLLICULAR
        phase_for_cycle_day(16)   # Phase.OVULATION
        phase_for_cycle_day(17)   # Phase.LUTEAL
    """
    for upper, phase in bands:
        if cycle_day <= upper:
            return phase
    return Phase.LUTEAL


class ClueParser(BaseCycleParser):
    """Adapter for Clue CSV exports."""

    SOURCE = SourceTag.CLUE
    PRIORITY = 20
    DISPLAY_NAME = "Clue"
    COLUMN_RULES = {
        "date": [("date",)],
        "flow": [("flow",), ("period",)],
        "cycle_day": [("cycle day",), ("day",)],
    }

    def __init__(self, phase_bands: tuple[tuple[int, Phase], ...] = CYCLE_DAY_PHASE_BANDS) -> None:
        self._phase_bands = phase_bands

    def can_parse(self, headers: list[str]) -> bool:
        # Clue never exports a phase; a phase column means a richer layout
        # that this adapter would silently drop
        if any("phase" in h for h in headers):
            return False
        return count_keyword_matches(headers, CLUE_KEYWORDS) >= NAMED_SCHEMA_THRESHOLD

    def build_entry(
        self, entry_date: date, values: list[str], columns: ColumnMap
    ) -> NormalizedCycleEntry:
        flow: Flow | None = None
        phase: Phase | None = None
        cycle_day: int | None = None

        raw_flow = self._cell(values, columns.get("flow"))
        if raw_flow:
            flow = normalize_flow(raw_flow)
            if flow is not None and flow is not Flow.NONE:
                phase = Phase.MENSTRUAL

        raw_day = self._cell(values, columns.get("cycle_day"))
        if raw_day:
            cycle_day = self._parse_cycle_day(raw_day)
            if cycle_day is not None and phase is None:
                phase = phase_for_cycle_day(cycle_day, self._phase_bands)

        return NormalizedCycleEntry(
            date=entry_date,
            source=self.SOURCE,
            cycle_day=cycle_day,
            menstrual_phase=phase,
            period_flow=flow,
        )
