"""Header-row inspection: export layout keywords and column discovery.

Both functions here are pure and operate on a header row that has already
been tokenized and lower-cased.  Adapters own their keyword sets and column
rules; changing a layout means editing its lookup table, not the parse loop.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

# field name → alternatives; an alternative matches a header when every
# substring in it occurs in that header
ColumnRules = Mapping[str, Sequence[Sequence[str]]]
ColumnMap = dict[str, int | None]

# Keyword sets per layout (case-insensitive substring match against headers)
CLUE_KEYWORDS: tuple[str, ...] = ("date", "period", "flow", "cycle day")
FLO_KEYWORDS: tuple[str, ...] = ("date", "period flow", "cycle phase")
GENERIC_KEYWORDS: tuple[str, ...] = (
    "phase",
    "flow",
    "cycle_day",
    "cycle day",
    "menstrual_phase",
)

NAMED_SCHEMA_THRESHOLD = 2


def count_keyword_matches(headers: Iterable[str], keywords: Iterable[str]) -> int:
    """Count how many keywords occur (as substrings) in at least one header.

    Example::

        count_keyword_matches(["date", "period flow"], FLO_KEYWORDS)   # 2
    """
    headers = list(headers)
    return sum(1 for kw in keywords if any(kw in h for h in headers))


def has_date_header(headers: Iterable[str]) -> bool:
    return any(h == "date" or "date" in h for h in headers)


def locate_columns(headers: Sequence[str], rules: ColumnRules) -> ColumnMap:
    """Resolve each field of ``rules`` to a column index.

    Alternatives are tried in the order given; the first alternative that
    matches any header wins, and within it the leftmost matching header.  So
    with ``"flow": [("flow",), ("period",)]`` a ``Flow`` column is preferred
    over a ``Period`` column wherever they sit in the file.

    Args:
        headers: Lower-cased header cells in file order.
        rules:   Field name → list of alternatives (see ``ColumnRules``).

    Returns:
        Field name → column index, or ``None`` when no header matches.

    Example::

        locate_columns(["date", "period", "flow"], {"flow": [("flow",), ("period",)]})
        # {"flow": 2}
    """
    columns: ColumnMap = {}
    for name, alternatives in rules.items():
        columns[name] = _first_match(headers, alternatives)
    return columns


def _first_match(headers: Sequence[str], alternatives: Sequence[Sequence[str]]) -> int | None:
    for alt in alternatives:
        for index, header in enumerate(headers):
            if all(part in header for part in alt):
                return index
    return None
