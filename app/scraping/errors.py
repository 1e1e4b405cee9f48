"""
Scraping pipeline exception taxonomy.
"""

from __future__ import annotations


class ScraperError(Exception):
    """Base exception for presentation scraping failures."""


class FetchError(ScraperError):
    """Raised when a page cannot be navigated, loaded or awaited."""

    def __init__(self, url: str, cause: BaseException | str) -> None:
        self.url = url
        self.cause = cause
        super().__init__(f"Failed to fetch {url}: {cause}")


class PolicyDisallowed(ScraperError):
    """Raised when robots.txt forbids crawling a site for our user agent."""

    def __init__(self, url: str, user_agent: str) -> None:
        self.url = url
        self.user_agent = user_agent
        super().__init__("robots.txt disallows scraping")


class ExtractionNoise(ScraperError):
    """Raised when one link fails metadata rules and must be skipped."""

    def __init__(self, href: str, reason: str) -> None:
        self.href = href
        self.reason = reason
        super().__init__(f"{reason}: {href}")


class PersistenceConflict(ScraperError):
    """Raised when a presentation url is already present in the catalog."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"Presentation already exists: {url}")


class FatalSetupError(ScraperError):
    """Raised when the run cannot start: no browser, no company directory."""
