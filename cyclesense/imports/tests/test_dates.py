"""Tests for date-cell parsing across export layouts."""

from __future__ import annotations

from datetime import date

import pytest

from cyclesense.imports.dates import parse_date


class TestPatternPrecedence:
    def test_iso(self) -> None:
        assert parse_date("2024-03-05") == date(2024, 3, 5)

    def test_iso_prefix_ignores_time(self) -> None:
        assert parse_date("2024-03-05T23:30:00-08:00") == date(2024, 3, 5)

    def test_us_is_month_first(self) -> None:
        assert parse_date("03/05/2024") == date(2024, 3, 5)

    def test_us_single_digits(self) -> None:
        assert parse_date("3/5/2024") == date(2024, 3, 5)

    def test_eu_dot_is_day_first(self) -> None:
        assert parse_date("05.03.2024") == date(2024, 3, 5)

    def test_dash_is_day_first(self) -> None:
        assert parse_date("05-03-2024") == date(2024, 3, 5)

    def test_invalid_us_month_falls_through(self) -> None:
        """13/01/2024 has no month 13; a later rule still finds a real date."""
        assert parse_date("13/01/2024") == date(2024, 1, 13)

    def test_invalid_iso_day_falls_through_to_none(self) -> None:
        assert parse_date("2024-02-30") is None


class TestFallback:
    def test_month_name(self) -> None:
        assert parse_date("March 5, 2024") == date(2024, 3, 5)

    def test_surrounding_whitespace(self) -> None:
        assert parse_date("  2024-03-05  ") == date(2024, 3, 5)

    @pytest.mark.parametrize("text", ["", "   ", None, "not a date", "yes"])
    def test_unparsable_returns_none(self, text) -> None:
        assert parse_date(text) is None

    @pytest.mark.parametrize("text", ["14", "2024", "March 2024", "Monday", "March 5"])
    def test_partial_date_returns_none(self, text) -> None:
        """A cell missing a year, month or day is not completed from the clock."""
        assert parse_date(text) is None
