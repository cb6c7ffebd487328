"""Base classes and data models for the CycleSense cycle-data import engine.

Every import adapter must subclass BaseCycleParser and return ImportOutcome /
NormalizedCycleEntry instances.  These types are the single source of truth
consumed by the API layer and by the record builder that prepares rows for
the ``unified_health_data`` store.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import ClassVar

from cyclesense.imports.dates import parse_date
from cyclesense.imports.detection import ColumnMap, ColumnRules, locate_columns

logger = logging.getLogger("cyclesense.imports")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class Phase(str, Enum):
    """Canonical menstrual cycle phases, in cycle order."""

    MENSTRUAL = "menstrual"
    FOLLICULAR = "follicular"
    OVULATION = "ovulation"
    LUTEAL = "luteal"


class Flow(str, Enum):
    """Canonical period flow levels."""

    LIGHT = "light"
    MEDIUM = "medium"
    HEAVY = "heavy"
    SPOTTING = "spotting"
    NONE = "none"


class SourceTag(str, Enum):
    """Known export layouts.

    ``UNKNOWN`` is only ever a detection result; entries always carry one of
    the concrete tags.
    """

    CLUE = "clue"
    FLO = "flo"
    GENERIC = "generic"
    UNKNOWN = "unknown"


# ---------------------------------------------------------------------------
# Entry / outcome
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NormalizedCycleEntry:
    """One day of cycle data, normalized from any supported export.

    Attributes:
        date:            Calendar date the row describes (no time, no zone).
        source:          Layout the row was read from.
        cycle_day:       1-based day within the cycle (1–45), if exported.
        menstrual_phase: Canonical phase, given or derived.
        period_flow:     Canonical flow level.
    """

    date: date
    source: SourceTag
    cycle_day: int | None = None
    menstrual_phase: Phase | None = None
    period_flow: Flow | None = None

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "source": self.source.value,
            "cycle_day": self.cycle_day,
            "menstrual_phase": self.menstrual_phase.value if self.menstrual_phase else None,
            "period_flow": self.period_flow.value if self.period_flow else None,
        }


@dataclass
class ImportOutcome:
    """Top-level result returned by any import adapter.

    ``rows_valid`` and ``succeeded`` are derived from ``entries`` so an outcome
    can never claim more valid rows than it carries.

    Attributes:
        entries:          Successfully normalized rows, in file order.
        detected_format:  Layout the content was parsed as.
        rows_total:       Number of non-empty data lines (header excluded).
        warnings:         Row-level and file-level issues, human readable.
        error:            Fatal explanation when nothing could be imported.
    """

    entries: list[NormalizedCycleEntry] = field(default_factory=list)
    detected_format: SourceTag = SourceTag.UNKNOWN
    rows_total: int = 0
    warnings: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def rows_valid(self) -> int:
        return len(self.entries)

    @property
    def succeeded(self) -> bool:
        return self.rows_valid > 0

    @classmethod
    def failure(
        cls,
        message: str,
        detected_format: SourceTag = SourceTag.UNKNOWN,
        rows_total: int = 0,
    ) -> "ImportOutcome":
        """Build a zero-entry outcome carrying a single explanatory warning."""
        return cls(
            entries=[],
            detected_format=detected_format,
            rows_total=rows_total,
            warnings=[message],
            error=message,
        )

    def to_dict(self) -> dict:
        return {
            "succeeded": self.succeeded,
            "detected_format": self.detected_format.value,
            "rows_total": self.rows_total,
            "rows_valid": self.rows_valid,
            "entries": [e.to_dict() for e in self.entries],
            "warnings": self.warnings,
            "error": self.error,
        }


# ---------------------------------------------------------------------------
# CSV tokenization
# ---------------------------------------------------------------------------

_LINE_SPLIT_RE = re.compile(r"\r?\n")
_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")

EMPTY_FILE_MESSAGE = "CSV file is empty or has no data rows"
NO_DATE_COLUMN_MESSAGE = "No date column found in CSV"


def split_lines(content: str) -> list[str]:
    """Split CSV text into its non-blank lines, dropping a UTF-8 BOM."""
    content = content.lstrip("\ufeff")
    return [line for line in _LINE_SPLIT_RE.split(content) if line.strip()]


def parse_csv_line(line: str, delimiter: str = ",") -> list[str]:
    """Split one CSV line into trimmed cells.

    A double quote toggles the in-quotes state, so a quoted cell may contain
    the delimiter.  Inside quotes, ``""`` is a literal quote character.
    """
    cells: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0
    while i < len(line):
        char = line[i]
        if char == '"':
            if in_quotes and i + 1 < len(line) and line[i + 1] == '"':
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            cells.append("".join(current).strip())
            current = []
        else:
            current.append(char)
        i += 1

    cells.append("".join(current).strip())
    return cells


def normalize_headers(headers: list[str]) -> list[str]:
    return [h.lower().strip() for h in headers]


# ---------------------------------------------------------------------------
# Base parser
# ---------------------------------------------------------------------------


class BaseCycleParser(ABC):
    """Abstract base class for all cycle-export adapters.

    Subclasses declare how their columns are found (``COLUMN_RULES``) and how
    a dated row becomes an entry (``build_entry``).  The registry calls
    ``can_parse`` on the header row to route content to the right adapter
    before calling ``parse``.

    Class-level attributes:
        SOURCE:        SourceTag stamped on every entry this adapter emits.
        PRIORITY:      Lower = tried first.  The generic adapter is last.
        DISPLAY_NAME:  Human-readable name of the export.
        COLUMN_RULES:  Header lookup table, see ``detection.locate_columns``.
    """

    SOURCE: ClassVar[SourceTag] = SourceTag.UNKNOWN
    PRIORITY: ClassVar[int] = 50
    DISPLAY_NAME: ClassVar[str] = "Unknown"
    COLUMN_RULES: ClassVar[ColumnRules] = {}

    @abstractmethod
    def can_parse(self, headers: list[str]) -> bool:
        """Return True if this adapter recognises the (normalized) header row."""

    @abstractmethod
    def build_entry(
        self, entry_date: date, values: list[str], columns: ColumnMap
    ) -> NormalizedCycleEntry:
        """Build the entry for one dated row.

        Args:
            entry_date: Parsed calendar date of the row.
            values:     Tokenized cells of the row.
            columns:    Column indices located from the header.
        """

    def parse(self, content: str) -> ImportOutcome:
        """Parse CSV text into an ImportOutcome.

        Rows with an unparsable date are skipped with a warning; a header with
        no locatable date column fails the whole file.
        """
        lines = split_lines(content)
        if len(lines) < 2:
            return ImportOutcome.failure(EMPTY_FILE_MESSAGE, detected_format=self.SOURCE)

        rows_total = len(lines) - 1
        headers = normalize_headers(parse_csv_line(lines[0]))
        columns = locate_columns(headers, self.COLUMN_RULES)

        if columns.get("date") is None:
            logger.info("%s import aborted: no date column in %s", self.SOURCE.value, headers)
            return ImportOutcome.failure(
                NO_DATE_COLUMN_MESSAGE,
                detected_format=self.SOURCE,
                rows_total=rows_total,
            )

        entries: list[NormalizedCycleEntry] = []
        warnings: list[str] = []

        for row_number, line in enumerate(lines[1:], start=2):
            values = parse_csv_line(line)
            raw_date = self._cell(values, columns.get("date"))
            if not raw_date:
                continue

            entry_date = parse_date(raw_date)
            if entry_date is None:
                warnings.append(f"Row {row_number}: invalid date '{raw_date}'")
                continue

            entries.append(self.build_entry(entry_date, values, columns))

        logger.debug(
            "%s parser: %d/%d rows valid, %d warnings",
            self.SOURCE.value,
            len(entries),
            rows_total,
            len(warnings),
        )

        return ImportOutcome(
            entries=entries,
            detected_format=self.SOURCE,
            rows_total=rows_total,
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    # Shared helpers for all adapters
    # ------------------------------------------------------------------

    @staticmethod
    def _cell(values: list[str], index: int | None) -> str:
        """Return the cell at ``index``, or ``""`` if missing."""
        if index is None or index >= len(values):
            return ""
        return values[index]

    @staticmethod
    def _parse_cycle_day(text: str, max_day: int = 45) -> int | None:
        """Parse the leading integer of a cycle-day cell.

        ``"14"`` → 14, ``"14 (ovulation)"`` → 14, ``"0"`` / ``"60"`` / ``"n/a"`` → None.
        """
        m = _LEADING_INT_RE.match(text)
        if not m:
            return None
        day = int(m.group(1))
        if 0 < day <= max_day:
            return day
        return None
