"""
Normalization of file candidate links into presentation records.
"""

from __future__ import annotations

import calendar
import logging
import re
from dataclasses import replace
from datetime import date, datetime, timezone
from urllib.parse import unquote, urlparse

from app.scraping.config.models import Strategy, UndatedPolicy
from app.scraping.errors import ExtractionNoise
from app.scraping.logging_utils import log_event
from app.scraping.parsing.classifier import LinkClassifier
from app.scraping.parsing.dates import DateNormalizer, find_date_fragment
from app.scraping.types import CandidateLink, Company, PresentationRecord

logger = logging.getLogger(__name__)

_BYTES_PER_KB = 1024
_BYTES_PER_MB = 1024 * 1024

TAG_RULES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Earnings", ("earnings",)),
    ("Investor Day", ("investor day",)),
    ("Conference", ("conference",)),
    ("Annual", ("annual",)),
    ("Strategy", ("strategic", "strategy")),
    ("Financial", ("financial",)),
)
QUARTER_RULES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Q1", ("q1", "first quarter")),
    ("Q2", ("q2", "second quarter")),
    ("Q3", ("q3", "third quarter")),
    ("Q4", ("q4", "fourth quarter")),
)


def subtract_quarters(value: date, quarters: int) -> date:
    """
    Shift a date back by whole quarters, clamping to the end of short months.
    """

    months = value.year * 12 + (value.month - 1) - quarters * 3
    year, month_index = divmod(months, 12)
    month = month_index + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def format_file_size(size_bytes: int | None) -> str:
    if size_bytes is None or size_bytes < 0:
        return "Unknown"
    if size_bytes >= _BYTES_PER_MB:
        return f"{size_bytes / _BYTES_PER_MB:.1f} MB"
    return f"{size_bytes / _BYTES_PER_KB:.1f} KB"


def derive_tags(title: str) -> tuple[str, ...]:
    lowered = title.lower()
    tags: list[str] = []
    for tag, needles in QUARTER_RULES:
        if any(needle in lowered for needle in needles):
            tags.append(tag)
            break
    for tag, needles in TAG_RULES:
        if any(needle in lowered for needle in needles):
            tags.append(tag)
    return tuple(tags)


def estimate_slide_count(title: str, size_bytes: int | None) -> int:
    """
    Rough slide count from file size (about ten slides per MB) and title.
    """

    size_mb = (size_bytes or 0) / _BYTES_PER_MB
    estimate = round(size_mb * 10)

    lowered = title.lower()
    if "quarterly" in lowered or "earnings" in lowered:
        estimate = max(estimate, 25)
    elif "investor day" in lowered or "overview" in lowered:
        estimate = max(estimate, 50)
    return min(max(estimate, 10), 100)


class MetadataExtractor:
    """
    Builds filtered PresentationRecords from file candidate links.
    """

    def __init__(
        self,
        *,
        strategy: Strategy,
        classifier: LinkClassifier,
        date_normalizer: DateNormalizer | None = None,
    ) -> None:
        self._strategy = strategy
        self._classifier = classifier
        self._dates = date_normalizer or DateNormalizer()
        self._extension_regex = re.compile(
            "(?:" + "|".join(re.escape(ext) for ext in strategy.file_extensions) + r")\s*$",
            flags=re.IGNORECASE,
        )

    def cutoff_date(self, now: datetime) -> date:
        return subtract_quarters(now.date(), self._strategy.cutoff_quarters)

    def extract(
        self,
        links: list[CandidateLink],
        *,
        company: Company,
        now: datetime,
    ) -> list[PresentationRecord]:
        """
        Build records for every link that survives the noise and recency rules.

        Links that fail a rule are skipped individually; the returned list is
        unique by url and sorted newest first.
        """

        records: list[PresentationRecord] = []
        seen: set[str] = set()
        for link in links:
            try:
                record = self.build_record(link, company=company, now=now)
            except ExtractionNoise as exc:
                log_event(
                    logger,
                    logging.DEBUG,
                    "presentation_link_skipped",
                    company=company.name,
                    href=exc.href,
                    reason=exc.reason,
                )
                continue
            if record.url in seen:
                continue
            seen.add(record.url)
            records.append(record)

        records.sort(key=lambda item: item.publication_date, reverse=True)
        return records

    def build_record(
        self,
        link: CandidateLink,
        *,
        company: Company,
        now: datetime,
    ) -> PresentationRecord:
        file_format = self._classifier.file_format(link.href)
        if file_format is None:
            raise ExtractionNoise(link.href, "unsupported file type")

        title = self.title_for(link)
        self._check_title(link.href, title)

        fragment = (
            link.date_text
            or find_date_fragment(link.container_text)
            or find_date_fragment(link.anchor_text)
        )
        parsed = self._dates.normalize(fragment, url=link.href, today=now.date())
        if parsed.is_estimated and self._strategy.undated_policy == UndatedPolicy.REJECT:
            raise ExtractionNoise(link.href, "no publication date")

        cutoff = self.cutoff_date(now)
        if parsed.value <= cutoff:
            raise ExtractionNoise(
                link.href,
                f"published {parsed.value.isoformat()} on or before cutoff {cutoff.isoformat()}",
            )

        discovered_at = now if now.tzinfo is not None else now.replace(tzinfo=timezone.utc)
        return PresentationRecord(
            url=link.href,
            title=title,
            publication_date=parsed.value,
            file_format=file_format,
            company_id=company.id,
            company_symbol=company.symbol,
            discovered_at=discovered_at,
            date_source=parsed.source,
            slide_count_estimate=estimate_slide_count(title, None),
            tags=derive_tags(title),
        )

    @staticmethod
    def with_file_size(record: PresentationRecord, size_bytes: int | None) -> PresentationRecord:
        return replace(
            record,
            file_size_bytes=size_bytes,
            file_size=format_file_size(size_bytes),
            slide_count_estimate=estimate_slide_count(record.title, size_bytes),
        )

    def title_for(self, link: CandidateLink) -> str:
        anchor_text = link.anchor_text.strip()
        if len(anchor_text) >= self._strategy.min_anchor_title_length:
            raw = anchor_text
        elif link.container_text.strip():
            raw = link.container_text
        else:
            raw = unquote(urlparse(link.href).path.rstrip("/").rsplit("/", 1)[-1])
        return self.clean_title(raw)

    def clean_title(self, raw: str) -> str:
        collapsed = re.sub(r"\s+", " ", raw).strip()
        return re.sub(r"\s+", " ", self._extension_regex.sub("", collapsed)).strip()

    def _check_title(self, href: str, title: str) -> None:
        lowered = title.lower()
        if not lowered:
            raise ExtractionNoise(href, "empty title")
        if lowered in self._strategy.generic_titles:
            raise ExtractionNoise(href, f"generic title '{title}'")
        for term in self._strategy.noise_terms:
            if term in lowered:
                raise ExtractionNoise(href, f"non-presentation document '{term}'")
