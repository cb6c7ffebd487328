"""Flo cycle-tracker CSV adapter.

Flo exports name the phase directly, so no cycle-day inference is done.

Example layout::

    Date,Period Flow,Cycle Phase
    03/01/2024,Heavy,Menstruation
    03/14/2024,,Ovulation Day
"""

from __future__ import annotations

from datetime import date

from cyclesense.imports.base import BaseCycleParser, NormalizedCycleEntry, SourceTag
from cyclesense.imports.detection import (
    FLO_KEYWORDS,
    NAMED_SCHEMA_THRESHOLD,
    ColumnMap,
    count_keyword_matches,
)
from cyclesense.imports.normalizer import normalize_flow, normalize_phase


class FloParser(BaseCycleParser):
    """Adapter for Flo CSV exports.

    Tried before Clue: every Flo header set also satisfies the looser Clue
    keywords ("period flow" contains both "period" and "flow").
    """

    SOURCE = SourceTag.FLO
    PRIORITY = 10
    DISPLAY_NAME = "Flo"
    COLUMN_RULES = {
        "date": [("date",)],
        "flow": [("flow",)],
        "phase": [("phase",)],
    }

    def can_parse(self, headers: list[str]) -> bool:
        return count_keyword_matches(headers, FLO_KEYWORDS) >= NAMED_SCHEMA_THRESHOLD

    def build_entry(
        self, entry_date: date, values: list[str], columns: ColumnMap
    ) -> NormalizedCycleEntry:
        raw_flow = self._cell(values, columns.get("flow"))
        raw_phase = self._cell(values, columns.get("phase"))
        return NormalizedCycleEntry(
            date=entry_date,
            source=self.SOURCE,
            menstrual_phase=normalize_phase(raw_phase) if raw_phase else None,
            period_flow=normalize_flow(raw_flow) if raw_flow else None,
        )
