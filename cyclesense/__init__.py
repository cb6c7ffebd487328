"""CycleSense: cycle-tracker imports and lifestyle correlation analysis."""

__version__ = "0.1.0"
