"""
Heuristic publication-date normalization for presentation links.

Strategies run in a fixed order and the first success wins:

1. explicit formats (``03/15/2024``, ``2024-03-15``, ``March 15, 2024``, ...)
2. a 19xx/20xx year plus a month name -> first day of that month
3. a year alone -> January 1st
4. bare numeric ``D.D.Y`` groups, month-first unless the first group is > 12
5. the same steps against a date-like substring of the file url
6. today's date, marked as a fallback
"""

from __future__ import annotations

import re
from datetime import date, datetime

from app.scraping.types import DateSource, ParsedDate

EXPLICIT_FORMATS = (
    "%m/%d/%Y",
    "%m-%d-%Y",
    "%Y-%m-%d",
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %Y",
    "%b %Y",
    "%m/%d/%y",
    "%m-%d-%y",
)

MONTHS = ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec")

YEAR_REGEX = re.compile(r"\b(?:19|20)\d{2}\b")
MONTH_REGEX = re.compile(
    r"\b(Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*\b",
    flags=re.IGNORECASE,
)
NUMERIC_REGEX = re.compile(r"\b(\d{1,2})[./-](\d{1,2})[./-](\d{2,4})\b")

FRAGMENT_REGEX = re.compile(
    r"\b\d{4}-\d{2}-\d{2}\b"
    r"|\b\d{1,2}[./-]\d{1,2}[./-]\d{2,4}\b"
    r"|\b(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*\.? \d{1,2},? \d{4}\b"
    r"|\b(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]* \d{4}\b",
    flags=re.IGNORECASE,
)
URL_DASHED_REGEX = re.compile(r"(?<!\d)(\d{4})[-/](\d{2})[-/](\d{2})(?!\d)")
URL_COMPACT_REGEX = re.compile(r"(?<!\d)(\d{4})(\d{2})(\d{2})(?!\d)")


def find_date_fragment(text: str) -> str:
    """
    Return the first date-like token inside free text, or an empty string.
    """

    if not text:
        return ""
    match = FRAGMENT_REGEX.search(text)
    return match.group(0) if match else ""


class DateNormalizer:
    """
    Converts short text fragments near a file link into calendar dates.
    """

    def parse(self, fragment: str) -> date | None:
        compact = re.sub(r"\s+", " ", fragment or "").strip().strip(".,;:()[]")
        if not compact:
            return None

        return (
            self._parse_explicit(compact)
            or self._parse_year_month(compact)
            or self._parse_numeric(compact)
        )

    def parse_url(self, url: str) -> date | None:
        """
        Parse a ``yyyy-MM-dd``, ``yyyy/MM/dd`` or ``yyyymmdd`` token from a url.
        """

        if not url:
            return None

        dashed = URL_DASHED_REGEX.search(url)
        if dashed is not None:
            parsed = self.parse(dashed.group(0).replace("/", "-"))
            if parsed is not None:
                return parsed

        for match in URL_COMPACT_REGEX.finditer(url):
            year, month, day = (int(group) for group in match.groups())
            if not 1900 <= year <= 2099:
                continue
            try:
                return date(year, month, day)
            except ValueError:
                continue
        return None

    def normalize(self, fragment: str, *, url: str = "", today: date | None = None) -> ParsedDate:
        """
        Run every strategy in order; fall back to ``today`` as a last resort.
        """

        parsed = self.parse(fragment)
        if parsed is not None:
            return ParsedDate(value=parsed, source=DateSource.TEXT)

        parsed = self.parse_url(url)
        if parsed is not None:
            return ParsedDate(value=parsed, source=DateSource.URL)

        return ParsedDate(value=today or date.today(), source=DateSource.FALLBACK)

    @staticmethod
    def _parse_explicit(value: str) -> date | None:
        for pattern in EXPLICIT_FORMATS:
            try:
                return datetime.strptime(value, pattern).date()
            except ValueError:
                continue
        return None

    @staticmethod
    def _parse_year_month(value: str) -> date | None:
        year_match = YEAR_REGEX.search(value)
        if year_match is None:
            return None

        year = int(year_match.group(0))
        month_match = MONTH_REGEX.search(value)
        if month_match is None:
            return date(year, 1, 1)
        month = MONTHS.index(month_match.group(1).lower()) + 1
        return date(year, month, 1)

    @staticmethod
    def _parse_numeric(value: str) -> date | None:
        match = NUMERIC_REGEX.search(value)
        if match is None:
            return None

        first, second, raw_year = match.groups()
        if len(raw_year) == 3:
            return None
        year = int(raw_year)
        if len(raw_year) == 2:
            year = 2000 + year if year < 50 else 1900 + year

        # US convention unless the first group cannot be a month.
        if int(first) <= 12:
            month, day = int(first), int(second)
        else:
            month, day = int(second), int(first)
        try:
            return date(year, month, day)
        except ValueError:
            return None
