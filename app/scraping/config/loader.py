"""
Environment config loader for presentation scraping.
"""

from __future__ import annotations

import os
from dataclasses import replace
from functools import lru_cache
from pathlib import Path

from app.scraping.config.models import PresentationScrapingSettings, Strategy, UndatedPolicy
from db.config import load_env_files

STRATEGIES: dict[str, Strategy] = {
    "default": Strategy(
        name="default",
        navigation_keywords=(
            "presentation",
            "investor",
            "webcast",
            "event",
            "conference",
            "slide",
        ),
    ),
    "compact": Strategy(
        name="compact",
        navigation_keywords=("presentation", "investor", "event", "webcast"),
        noise_terms=(
            "press release",
            "earnings release",
            "annual report",
            "form 10-",
            "proxy statement",
        ),
    ),
    "events": Strategy(
        name="events",
        navigation_keywords=(
            "presentation",
            "investor",
            "webcast",
            "slide",
            "event",
            "calendar",
            "conference",
        ),
    ),
}


def _get_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_optional_int_env(name: str) -> int | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def _get_float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    stripped = raw.strip()
    return stripped if stripped else default


def _project_root() -> Path:
    return Path(__file__).resolve().parents[3]


def resolve_project_path(raw_path: str) -> Path:
    candidate = Path(raw_path)
    if candidate.is_absolute():
        return candidate
    return (_project_root() / candidate).resolve()


def get_strategy(
    name: str,
    *,
    cutoff_quarters: int | None = None,
    batch_size: int | None = None,
    undated_policy: str | None = None,
) -> Strategy:
    """
    Resolve a named strategy preset and apply optional overrides.
    """

    strategy = STRATEGIES.get(name.strip().lower())
    if strategy is None:
        allowed = ", ".join(sorted(STRATEGIES))
        raise ValueError(f"Unknown scrape strategy '{name}'. Allowed strategies: {allowed}.")

    overrides: dict[str, object] = {}
    if cutoff_quarters is not None:
        overrides["cutoff_quarters"] = max(1, cutoff_quarters)
    if batch_size is not None:
        overrides["batch_size"] = max(1, batch_size)
    if undated_policy is not None:
        normalized = undated_policy.strip().lower()
        if normalized not in {UndatedPolicy.ASSUME_TODAY, UndatedPolicy.REJECT}:
            raise ValueError(f"Unknown undated policy '{undated_policy}'.")
        overrides["undated_policy"] = normalized
    return replace(strategy, **overrides) if overrides else strategy


@lru_cache(maxsize=1)
def get_presentation_scraping_settings() -> PresentationScrapingSettings:
    """
    Return cached scraper settings from environment variables.
    """

    load_env_files()
    undated_raw = os.getenv("PRESENTATION_SCRAPE_UNDATED_POLICY")
    strategy = get_strategy(
        _get_str_env("PRESENTATION_SCRAPE_STRATEGY", "default"),
        cutoff_quarters=_get_optional_int_env("PRESENTATION_SCRAPE_CUTOFF_QUARTERS"),
        batch_size=_get_optional_int_env("PRESENTATION_SCRAPE_BATCH_SIZE"),
        undated_policy=undated_raw.strip() if undated_raw and undated_raw.strip() else None,
    )
    companies_file = os.getenv("PRESENTATION_SCRAPE_COMPANIES_FILE", "").strip()
    return PresentationScrapingSettings(
        user_agent=_get_str_env(
            "PRESENTATION_SCRAPE_USER_AGENT",
            "SlideInsight/1.0 (https://slideinsight.com; webmaster@slideinsight.com)",
        ),
        strategy=strategy,
        max_concurrency=max(1, _get_int_env("PRESENTATION_SCRAPE_MAX_CONCURRENCY", 2)),
        max_retries=max(1, _get_int_env("PRESENTATION_SCRAPE_MAX_RETRIES", 3)),
        retry_delay_seconds=max(
            0.0,
            _get_float_env("PRESENTATION_SCRAPE_RETRY_DELAY_SECONDS", 1.0),
        ),
        navigation_timeout_seconds=max(
            1.0,
            _get_float_env("PRESENTATION_SCRAPE_NAVIGATION_TIMEOUT_SECONDS", 30.0),
        ),
        robots_timeout_seconds=max(
            1.0,
            _get_float_env("PRESENTATION_SCRAPE_ROBOTS_TIMEOUT_SECONDS", 5.0),
        ),
        batch_delay_seconds=max(
            0.0,
            _get_float_env("PRESENTATION_SCRAPE_BATCH_DELAY_SECONDS", 3.0),
        ),
        request_delay_seconds=max(
            0.0,
            _get_float_env("PRESENTATION_SCRAPE_REQUEST_DELAY_SECONDS", 1.5),
        ),
        respect_robots_txt=_get_bool_env("PRESENTATION_SCRAPE_RESPECT_ROBOTS_TXT", True),
        headless=_get_bool_env("PRESENTATION_SCRAPE_HEADLESS", True),
        output_dir=str(
            resolve_project_path(
                _get_str_env("PRESENTATION_SCRAPE_OUTPUT_DIR", "data/presentations")
            )
        ),
        job_reschedule_days=max(1, _get_int_env("PRESENTATION_SCRAPE_RESCHEDULE_DAYS", 30)),
        companies_file=str(resolve_project_path(companies_file)) if companies_file else None,
    )
