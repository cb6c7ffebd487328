"""Generic fallback CSV adapter.

Used for any CSV with a date column plus at least one recognisable cycle
column, and as the last resort when no layout is detected at all.  Unlike the
Clue adapter, a cycle-day column is kept as-is and never used to infer phase:
without knowing the exporting app there is no safe banding rule.

Example layout::

    date,phase,flow,cycle_day
    2024-01-01,period,medium,1
    2024-01-10,ovulation,none,10
"""

from __future__ import annotations

from datetime import date

from cyclesense.imports.base import BaseCycleParser, NormalizedCycleEntry, SourceTag
from cyclesense.imports.detection import (
    GENERIC_KEYWORDS,
    ColumnMap,
    count_keyword_matches,
    has_date_header,
)
from cyclesense.imports.normalizer import normalize_flow, normalize_phase


class GenericCycleParser(BaseCycleParser):
    """Catch-all adapter for user-assembled cycle CSVs.

    Priority is highest (90) so it is always tried last.
    """

    SOURCE = SourceTag.GENERIC
    PRIORITY = 90
    DISPLAY_NAME = "Generic CSV"
    COLUMN_RULES = {
        "date": [("date",)],
        "phase": [("phase",), ("menstrual",)],
        "flow": [("flow",)],
        "cycle_day": [("cycle", "day")],
    }

    def can_parse(self, headers: list[str]) -> bool:
        return has_date_header(headers) and count_keyword_matches(headers, GENERIC_KEYWORDS) >= 1

    def build_entry(
        self, entry_date: date, values: list[str], columns: ColumnMap
    ) -> NormalizedCycleEntry:
        raw_phase = self._cell(values, columns.get("phase"))
        raw_flow = self._cell(values, columns.get("flow"))
        raw_day = self._cell(values, columns.get("cycle_day"))
        return NormalizedCycleEntry(
            date=entry_date,
            source=self.SOURCE,
            cycle_day=self._parse_cycle_day(raw_day) if raw_day else None,
            menstrual_phase=normalize_phase(raw_phase) if raw_phase else None,
            period_flow=normalize_flow(raw_flow) if raw_flow else None,
        )
