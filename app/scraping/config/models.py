"""
Scraping configuration models.
"""

from __future__ import annotations

from dataclasses import dataclass


class UndatedPolicy:
    ASSUME_TODAY = "assume_today"
    REJECT = "reject"


@dataclass(frozen=True)
class Strategy:
    """
    Heuristic knobs for one crawl pipeline variant.
    """

    name: str
    navigation_keywords: tuple[str, ...]
    file_extensions: tuple[str, ...] = (".pdf", ".ppt", ".pptx")
    noise_terms: tuple[str, ...] = (
        "press release",
        "earnings release",
        "annual report",
        "10-k",
        "10-q",
        "8-k",
        "proxy statement",
    )
    generic_titles: tuple[str, ...] = ("download", "view")
    cutoff_quarters: int = 4
    batch_size: int = 5
    max_navigation_pages: int = 3
    min_anchor_title_length: int = 5
    undated_policy: str = UndatedPolicy.ASSUME_TODAY


@dataclass(frozen=True)
class PresentationScrapingSettings:
    """
    Runtime settings for presentation scraping.
    """

    user_agent: str
    strategy: Strategy
    max_concurrency: int = 2
    max_retries: int = 3
    retry_delay_seconds: float = 1.0
    navigation_timeout_seconds: float = 30.0
    robots_timeout_seconds: float = 5.0
    batch_delay_seconds: float = 3.0
    request_delay_seconds: float = 1.5
    respect_robots_txt: bool = True
    headless: bool = True
    output_dir: str = "data/presentations"
    job_reschedule_days: int = 30
    companies_file: str | None = None
