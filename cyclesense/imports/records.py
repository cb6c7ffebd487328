"""Row payloads for the ``unified_health_data`` store.

The store is an external collaborator that upserts on its UNIQUE constraint
``(user_id, date, data_type)``.  Postgres rejects an upsert batch that hits
the same key twice, so duplicate dates within one import are collapsed here:
the last row for a date wins, matching the store's own overwrite semantics.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from uuid import UUID

from cyclesense.imports.base import NormalizedCycleEntry

logger = logging.getLogger("cyclesense.imports.records")

MENSTRUAL_DATA_TYPE = "menstrual"


def record_key(user_id: UUID | str, entry: NormalizedCycleEntry) -> str:
    """Dedup key matching the store's ``(user_id, date, data_type)`` constraint."""
    return f"{user_id}:{entry.date.isoformat()}:{MENSTRUAL_DATA_TYPE}"


def entries_to_records(
    entries: Iterable[NormalizedCycleEntry], user_id: UUID | str
) -> list[dict]:
    """Convert normalized entries to upsert payloads for one user.

    Args:
        entries: Entries from a successful ImportOutcome, in file order.
        user_id: Owner of the imported data.

    Returns:
        One dict per distinct date, in first-seen date order.

    Example::

        entries_to_records(outcome.entries, user_id)
        # [{"user_id": "...", "date": "2024-01-01", "data_type": "menstrual",
        #   "source": "csv_generic", "cycle_day": None,
        #   "menstrual_phase": "menstrual", "period_flow": "medium"}, ...]
    """
    records: dict[str, dict] = {}
    duplicates = 0
    for entry in entries:
        key = record_key(user_id, entry)
        if key in records:
            duplicates += 1
        records[key] = {
            "user_id": str(user_id),
            "date": entry.date.isoformat(),
            "data_type": MENSTRUAL_DATA_TYPE,
            "source": f"csv_{entry.source.value}",
            "cycle_day": entry.cycle_day,
            "menstrual_phase": entry.menstrual_phase.value if entry.menstrual_phase else None,
            "period_flow": entry.period_flow.value if entry.period_flow else None,
        }

    if duplicates:
        logger.info("Collapsed %d duplicate-date rows for user %s", duplicates, user_id)
    return list(records.values())
