"""Date parsing for third-party cycle exports.

Exports disagree on date layout, so each cell is tried against a fixed list of
patterns in order.  A pattern only wins if it both matches the shape of the
string and produces a real calendar date; ``13/01/2024`` matches the US shape
but has no month 13, so it falls through to the next pattern and finally to
``dateutil``.

Dates are calendar dates only.  Time-of-day and zone information in the cell
is ignored, never converted.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime

from dateutil import parser as dtparser

logger = logging.getLogger("cyclesense.imports.dates")

# (label, regex, group order); group order names which match group holds
# year / month / day
_DATE_PATTERNS: list[tuple[str, re.Pattern[str], tuple[str, str, str]]] = [
    ("iso", re.compile(r"^(\d{4})-(\d{2})-(\d{2})"), ("year", "month", "day")),
    ("us", re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})"), ("month", "day", "year")),
    ("eu_dot", re.compile(r"^(\d{1,2})\.(\d{1,2})\.(\d{4})"), ("day", "month", "year")),
    ("dash", re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})"), ("day", "month", "year")),
]

# Two distinct fill values for dateutil; see the end of parse_date
_FILL_A = datetime(2000, 1, 1)
_FILL_B = datetime(2001, 2, 2)


def parse_date(text: str | None) -> date | None:
    """Parse a date-like cell into a calendar date.

    Tries, in order: ISO ``YYYY-MM-DD`` (prefix), US ``MM/DD/YYYY``,
    European ``DD.MM.YYYY``, ``DD-MM-YYYY``, then a generic ``dateutil`` parse
    for layouts such as ``"March 5, 2024"``.  The fallback only accepts cells
    that name a full year, month and day.

    Args:
        text: Raw cell text.

    Returns:
        The parsed date, or None if nothing produced a valid date.

    Example::

        parse_date("2024-03-05")   # date(2024, 3, 5)
        parse_date("05.03.2024")   # date(2024, 3, 5)
        parse_date("not a date")   # None
    """
    if text is None:
        return None
    text = text.strip()
    if not text:
        return None

    for label, pattern, order in _DATE_PATTERNS:
        m = pattern.match(text)
        if not m:
            continue
        parts = dict(zip(order, (int(g) for g in m.groups())))
        try:
            return date(parts["year"], parts["month"], parts["day"])
        except ValueError:
            logger.debug("Date %r matched %s layout but is not a valid date", text, label)

    # dateutil fills missing fields from its default; a cell whose result
    # depends on the default is incomplete, not a date
    try:
        first = dtparser.parse(text, default=_FILL_A).date()
        second = dtparser.parse(text, default=_FILL_B).date()
    except (ValueError, OverflowError):
        return None
    if first != second:
        logger.debug("Date %r is missing a year, month or day", text)
        return None
    return first
