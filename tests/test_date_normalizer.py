"""
tests/test_date_normalizer.py

Pytest unit tests for DateNormalizer and find_date_fragment.

Coverage
--------
- Literal date-parsing table
- Strategy order (explicit, year+month, year only, numeric)
- URL fallback and today fallback with their date sources
- Fragment extraction from row text
"""

from __future__ import annotations

from datetime import date

import pytest

from app.scraping.parsing import DateNormalizer, find_date_fragment
from app.scraping.types import DateSource


@pytest.fixture()
def normalizer() -> DateNormalizer:
    return DateNormalizer()


# ---------------------------------------------------------------------------
# Literal table
# ---------------------------------------------------------------------------


class TestDateTable:
    @pytest.mark.parametrize(
        ("fragment", "expected"),
        [
            ("03/15/2024", date(2024, 3, 15)),
            ("March 2024", date(2024, 3, 1)),
            ("2024", date(2024, 1, 1)),
            ("15.03.24", date(2024, 3, 15)),
            ("03.15.24", date(2024, 3, 15)),
        ],
    )
    def test_literal_cases(self, normalizer: DateNormalizer, fragment: str, expected: date) -> None:
        assert normalizer.parse(fragment) == expected

    def test_iso_date(self, normalizer: DateNormalizer) -> None:
        assert normalizer.parse("2023-11-02") == date(2023, 11, 2)

    def test_long_month_name_with_day(self, normalizer: DateNormalizer) -> None:
        assert normalizer.parse("January 10, 2024") == date(2024, 1, 10)

    def test_abbreviated_month_with_day(self, normalizer: DateNormalizer) -> None:
        assert normalizer.parse("Feb 7, 2024") == date(2024, 2, 7)

    def test_two_digit_year_before_fifty_is_this_century(self, normalizer: DateNormalizer) -> None:
        assert normalizer.parse("04/01/24") == date(2024, 4, 1)

    def test_two_digit_year_from_fifty_is_last_century(self, normalizer: DateNormalizer) -> None:
        assert normalizer.parse("25.12.99") == date(1999, 12, 25)


# ---------------------------------------------------------------------------
# Strategy order
# ---------------------------------------------------------------------------


class TestStrategyOrder:
    def test_month_name_inside_longer_text(self, normalizer: DateNormalizer) -> None:
        assert normalizer.parse("Investor Day - September 2023 webcast") == date(2023, 9, 1)

    def test_year_only_wins_over_numeric_with_four_digit_year(
        self, normalizer: DateNormalizer
    ) -> None:
        assert normalizer.parse("15.03.2024") == date(2024, 1, 1)

    def test_invalid_numeric_date_is_none(self, normalizer: DateNormalizer) -> None:
        assert normalizer.parse("31.02.24") is None

    def test_three_digit_year_is_rejected(self, normalizer: DateNormalizer) -> None:
        assert normalizer.parse("01.02.024") is None

    def test_empty_and_noise_are_none(self, normalizer: DateNormalizer) -> None:
        assert normalizer.parse("") is None
        assert normalizer.parse("Quarterly results") is None


# ---------------------------------------------------------------------------
# Fallbacks
# ---------------------------------------------------------------------------


class TestNormalize:
    def test_text_source(self, normalizer: DateNormalizer) -> None:
        parsed = normalizer.normalize("March 2024", today=date(2024, 6, 1))
        assert parsed.value == date(2024, 3, 1)
        assert parsed.source == DateSource.TEXT
        assert parsed.is_estimated is False

    def test_dashed_url_date(self, normalizer: DateNormalizer) -> None:
        parsed = normalizer.normalize(
            "",
            url="https://ir.example.com/2024-02-20/deck.pdf",
            today=date(2024, 6, 1),
        )
        assert parsed.value == date(2024, 2, 20)
        assert parsed.source == DateSource.URL

    def test_slashed_url_date(self, normalizer: DateNormalizer) -> None:
        parsed = normalizer.normalize("", url="https://ir.example.com/2023/11/05/deck.pdf")
        assert parsed.value == date(2023, 11, 5)
        assert parsed.source == DateSource.URL

    def test_compact_url_date(self, normalizer: DateNormalizer) -> None:
        parsed = normalizer.normalize("", url="https://cdn.example.com/files/20240115_results.pdf")
        assert parsed.value == date(2024, 1, 15)

    def test_today_fallback_is_marked_estimated(self, normalizer: DateNormalizer) -> None:
        parsed = normalizer.normalize(
            "no date here",
            url="https://ir.example.com/deck.pdf",
            today=date(2024, 6, 1),
        )
        assert parsed.value == date(2024, 6, 1)
        assert parsed.source == DateSource.FALLBACK
        assert parsed.is_estimated is True


class TestFindDateFragment:
    def test_extracts_from_table_row_text(self) -> None:
        assert find_date_fragment("January 10, 2024 Q4 2023 Earnings Presentation") == (
            "January 10, 2024"
        )

    def test_extracts_numeric_fragment(self) -> None:
        assert find_date_fragment("Posted 03/15/2024 by IR") == "03/15/2024"

    def test_extracts_month_year(self) -> None:
        assert find_date_fragment("Conference deck (May 2024)") == "May 2024"

    def test_no_fragment(self) -> None:
        assert find_date_fragment("Download the deck") == ""
        assert find_date_fragment("") == ""
