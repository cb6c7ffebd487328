"""Shared fixtures and synthetic exports for the cycle import test suite.

No real tracker exports are committed for privacy reasons.  The samples
below mirror the header layouts of actual Clue and Flo CSV exports.
"""

from __future__ import annotations

import pytest

from cyclesense.imports.registry import ImportRegistry, _build_default_registry


# ---------------------------------------------------------------------------
# Synthetic Clue export: date, period/flow and cycle day, no phase
# ---------------------------------------------------------------------------

CLUE_CSV = """\
Date,Period,Flow,Cycle Day,Notes
2024-01-01,yes,medium,1,"cramps, tired"
2024-01-02,yes,heavy,2,
2024-01-09,,,9,
2024-01-15,,,15,"mild ""twinge"" today"
2024-01-22,,none,22,
"""

# ---------------------------------------------------------------------------
# Synthetic Flo export: phase named directly, US dates
# ---------------------------------------------------------------------------

FLO_CSV = """\
Date,Period Flow,Cycle Phase
03/01/2024,Heavy,Menstruation
03/02/2024,Very Light,Period
03/14/2024,,Ovulation Day
03/20/2024,,PMS
"""

# ---------------------------------------------------------------------------
# Generic, user-assembled CSVs
# ---------------------------------------------------------------------------

GENERIC_CSV = "date,phase,flow\n2024-01-01,period,medium\n2024-01-10,ovulation,none"

GENERIC_CYCLE_DAY_CSV = """\
Date,Menstrual_Phase,Cycle_Day
05.02.2024,luteal,20
06.02.2024,follicular,3
"""

MIXED_VALIDITY_CSV = """\
date,phase,flow
2024-01-01,period,medium
soon,luteal,
,follicular,
2024-01-03,bleeding,heavy
"""

NO_DATE_COLUMN_CSV = "day,phase,flow\n1,period,medium\n2,period,light"

UNKNOWN_LAYOUT_CSV = "timestamp,mood,energy\n2024-01-01,happy,high"


@pytest.fixture
def registry() -> ImportRegistry:
    """A fresh registry with the built-in adapters, isolated from the singleton."""
    return _build_default_registry()
