"""
Shared scraping runtime data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime


@dataclass(frozen=True)
class Company:
    """
    One Company Directory row eligible for crawling.
    """

    id: str
    name: str
    symbol: str
    ir_url: str


@dataclass(frozen=True)
class Anchor:
    """
    One anchor element captured from a rendered page.
    """

    href: str
    text: str
    container_text: str = ""
    # Date fragment from the full container text, found before truncation.
    date_text: str = ""


@dataclass(frozen=True)
class PageSnapshot:
    """
    Browser-independent view of a rendered page.
    """

    url: str
    title: str
    anchors: list[Anchor] = field(default_factory=list)
    text: str = ""


class LinkClassification:
    NAVIGATION = "navigation"
    FILE = "file"
    IGNORED = "ignored"


@dataclass(frozen=True)
class CandidateLink:
    href: str
    anchor_text: str
    container_text: str
    classification: str
    date_text: str = ""


class DateSource:
    TEXT = "text"
    URL = "url"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class ParsedDate:
    value: date
    source: str

    @property
    def is_estimated(self) -> bool:
        return self.source == DateSource.FALLBACK


@dataclass(frozen=True)
class PresentationRecord:
    """
    One discovered presentation document ready for the catalog.
    """

    url: str
    title: str
    publication_date: date
    file_format: str
    company_id: str
    company_symbol: str
    discovered_at: datetime
    date_source: str = DateSource.TEXT
    file_size_bytes: int | None = None
    file_size: str = "Unknown"
    slide_count_estimate: int = 10
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class CompanyCrawlResult:
    """
    Outcome of one successful (or politely skipped) company crawl.
    """

    company: Company
    presentations: list[PresentationRecord] = field(default_factory=list)
    skipped_reason: str | None = None


@dataclass(frozen=True)
class CrawlFailure:
    """
    Structured failure for a company whose crawl never succeeded.
    """

    company: str
    symbol: str
    error: str
    timestamp: datetime

    def to_dict(self) -> dict[str, str]:
        return {
            "company": self.company,
            "symbol": self.symbol,
            "error": self.error,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class CompanyTaskResult:
    """
    Resolved result of a RetryingTask: exactly one of result/failure is set.
    """

    company: Company
    attempts: int
    result: CompanyCrawlResult | None = None
    failure: CrawlFailure | None = None

    @property
    def succeeded(self) -> bool:
        return self.failure is None
