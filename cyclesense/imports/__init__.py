"""CycleSense cycle-data import engine: public API.

Usage::

    from cyclesense.imports import parse_cycle_csv

    with open("clue_export.csv", "rb") as f:
        outcome = parse_cycle_csv(f.read())

    print(outcome.detected_format)   # SourceTag.CLUE
    print(outcome.rows_valid)        # e.g. 84
    for entry in outcome.entries:
        print(entry.date, entry.menstrual_phase, entry.period_flow)
"""

from __future__ import annotations

from cyclesense.imports.base import (
    BaseCycleParser,
    Flow,
    ImportOutcome,
    NormalizedCycleEntry,
    Phase,
    SourceTag,
)
from cyclesense.imports.dates import parse_date
from cyclesense.imports.normalizer import normalize_flow, normalize_phase
from cyclesense.imports.records import entries_to_records
from cyclesense.imports.registry import get_registry

__all__ = [
    "parse_cycle_csv",
    "detect_format",
    "parse_date",
    "normalize_phase",
    "normalize_flow",
    "entries_to_records",
    "BaseCycleParser",
    "Flow",
    "ImportOutcome",
    "NormalizedCycleEntry",
    "Phase",
    "SourceTag",
]


def parse_cycle_csv(
    content: str | bytes,
    forced_format: SourceTag | str | None = None,
) -> ImportOutcome:
    """Parse a cycle-tracker CSV export and return normalized entries.

    This is the single entry point for cycle imports.  It detects the export
    layout from the header row and dispatches to the matching adapter, unless
    ``forced_format`` names one explicitly.

    Args:
        content:        CSV text or raw UTF-8 bytes.  No file I/O is done here.
        forced_format:  ``"clue"``, ``"flo"`` or ``"generic"`` to skip detection.

    Returns:
        :class:`ImportOutcome`.  Bad rows and unknown layouts are reported in
        ``warnings`` / ``error``, never raised.

    Example::

        outcome = parse_cycle_csv("date,phase,flow\\n2024-01-01,period,medium")
        if outcome.succeeded:
            store.upsert(entries_to_records(outcome.entries, user_id))
    """
    return get_registry().route(content, forced_format)


def detect_format(headers: list[str]) -> SourceTag:
    """Classify a tokenized header row without parsing any data rows."""
    return get_registry().detect_format(headers)
