"""Cycle-export adapter implementations.

All adapters are automatically registered by ``registry._build_default_registry()``.
This module exposes them for direct import convenience.
"""

from cyclesense.imports.adapters.clue import ClueParser
from cyclesense.imports.adapters.flo import FloParser
from cyclesense.imports.adapters.generic import GenericCycleParser

__all__ = [
    "ClueParser",
    "FloParser",
    "GenericCycleParser",
]
