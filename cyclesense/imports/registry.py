"""Import registry: format detection and routing.

The registry holds all registered adapters sorted by priority.  When
``parse_cycle_csv`` is called, it tries each adapter's ``can_parse()`` on the
header row in priority order and dispatches to the first match.  If no
adapter matches, the generic adapter is still given a chance before the
content is rejected with guidance on the expected layout.
"""

from __future__ import annotations

import logging
import time
from dataclasses import replace

from cyclesense.imports.base import (
    BaseCycleParser,
    ImportOutcome,
    SourceTag,
    normalize_headers,
    parse_csv_line,
    split_lines,
)

logger = logging.getLogger("cyclesense.imports.registry")

EMPTY_CONTENT_MESSAGE = "CSV file is empty"
UNDECODABLE_MESSAGE = "File is not valid UTF-8 text"
UNKNOWN_FORMAT_MESSAGE = (
    'Could not detect CSV format. Please ensure your CSV has a "date" column '
    'and optionally "phase", "flow", or "cycle_day" columns.'
)


class ImportRegistry:
    """Registry of all cycle-export adapters.

    Usage::

        registry = ImportRegistry()
        registry.register(FloParser())
        registry.register(ClueParser())
        registry.register(GenericCycleParser())   # catch-all, highest PRIORITY

        outcome = registry.route(csv_text)
    """

    def __init__(self) -> None:
        self._parsers: list[BaseCycleParser] = []

    def register(self, parser: BaseCycleParser) -> None:
        """Add an adapter and keep the list sorted by priority (ascending)."""
        self._parsers.append(parser)
        self._parsers.sort(key=lambda p: p.PRIORITY)
        logger.debug(
            "Registered import adapter %s (priority=%d)",
            parser.SOURCE.value,
            parser.PRIORITY,
        )

    def get(self, source: SourceTag | str) -> BaseCycleParser:
        """Return the adapter registered for ``source``.

        Raises:
            ValueError: If ``source`` is not a known tag or has no adapter.
        """
        tag = SourceTag(source)
        for parser in self._parsers:
            if parser.SOURCE is tag:
                return parser
        raise ValueError(f"No import adapter registered for format '{tag.value}'")

    def detect_parser(self, headers: list[str]) -> BaseCycleParser | None:
        """Return the first adapter that claims the header row, or None."""
        normalized = normalize_headers(headers)
        for parser in self._parsers:
            try:
                if parser.can_parse(normalized):
                    logger.info("Format detected: %s → %s", normalized, parser.SOURCE.value)
                    return parser
            except Exception as exc:
                logger.warning(
                    "Adapter %s raised during can_parse: %s",
                    parser.SOURCE.value,
                    exc,
                )
        return None

    def detect_format(self, headers: list[str]) -> SourceTag:
        """Classify a header row as one of the known layouts or ``UNKNOWN``."""
        parser = self.detect_parser(headers)
        return parser.SOURCE if parser else SourceTag.UNKNOWN

    def route(
        self,
        content: str | bytes,
        forced_format: SourceTag | str | None = None,
    ) -> ImportOutcome:
        """Detect the layout of ``content`` and dispatch to the matching adapter.

        Args:
            content:        CSV text, or its UTF-8 bytes.
            forced_format:  Skip detection and use this adapter.

        Returns:
            ImportOutcome from the winning adapter, or a failure outcome.
            Never raises for bad content.

        Raises:
            ValueError: If ``forced_format`` names no registered adapter.
        """
        t0 = time.monotonic()

        forced = self.get(forced_format) if forced_format is not None else None

        if isinstance(content, bytes):
            try:
                content = content.decode("utf-8-sig")
            except UnicodeDecodeError as exc:
                logger.info("Rejected undecodable import: %s", exc)
                return ImportOutcome.failure(UNDECODABLE_MESSAGE)

        lines = split_lines(content)
        if not lines:
            return ImportOutcome.failure(EMPTY_CONTENT_MESSAGE)

        if forced is not None:
            outcome = self._run(forced, content)
        else:
            matched = self.detect_parser(parse_csv_line(lines[0]))
            if matched is not None:
                outcome = self._run(matched, content)
            else:
                outcome = self._fallback(content, rows_total=len(lines) - 1)

        logger.info(
            "Parsed cycle import → format=%s, %d/%d rows valid, %d warnings, time=%dms",
            outcome.detected_format.value,
            outcome.rows_valid,
            outcome.rows_total,
            len(outcome.warnings),
            int((time.monotonic() - t0) * 1000),
        )
        return outcome

    def _fallback(self, content: str, rows_total: int) -> ImportOutcome:
        """Last resort for undetected layouts: try the generic adapter."""
        try:
            generic = self.get(SourceTag.GENERIC)
        except ValueError:
            return ImportOutcome.failure(UNKNOWN_FORMAT_MESSAGE, rows_total=rows_total)

        outcome = self._run(generic, content)
        if outcome.succeeded:
            return replace(outcome, detected_format=SourceTag.GENERIC)

        logger.info("Generic fallback found no rows; format unknown")
        return ImportOutcome.failure(UNKNOWN_FORMAT_MESSAGE, rows_total=rows_total)

    @staticmethod
    def _run(parser: BaseCycleParser, content: str) -> ImportOutcome:
        try:
            return parser.parse(content)
        except Exception as exc:
            logger.exception(
                "Adapter %s raised an unhandled exception: %s",
                parser.SOURCE.value,
                exc,
            )
            return ImportOutcome.failure(
                f"{parser.DISPLAY_NAME} import failed: {exc}",
                detected_format=parser.SOURCE,
            )

    @property
    def registered(self) -> list[str]:
        """Return registered adapter tags in priority order."""
        return [p.SOURCE.value for p in self._parsers]


# ---------------------------------------------------------------------------
# Singleton registry
# ---------------------------------------------------------------------------

_registry: ImportRegistry | None = None


def get_registry() -> ImportRegistry:
    """Return the global registry instance, creating it if needed."""
    global _registry
    if _registry is None:
        _registry = _build_default_registry()
    return _registry


def _build_default_registry() -> ImportRegistry:
    """Instantiate and register all built-in adapters."""
    from cyclesense.imports.adapters.clue import ClueParser
    from cyclesense.imports.adapters.flo import FloParser
    from cyclesense.imports.adapters.generic import GenericCycleParser

    registry = ImportRegistry()
    registry.register(FloParser())
    registry.register(ClueParser())
    registry.register(GenericCycleParser())  # catch-all, always last
    return registry
