"""
app/scheduler/jobs.py

APScheduler-based scheduler for periodic presentation scraping.

Schedule (all times UTC)
--------------------------
  daily_presentation_scrape: 04:00 every day, due-only

A due-only run crawls companies without a job, with a pending job, or whose
``next_scheduled`` time has passed. Every finished company is rescheduled
``PRESENTATION_SCRAPE_RESCHEDULE_DAYS`` ahead, so a daily trigger visits each
IR site about once a month.

Lifecycle
----------
Call ``build_scheduler()`` once to get a configured ``BackgroundScheduler``.
Start it on app boot; shut it down gracefully on app shutdown.
The scheduler is wired into FastAPI via the ``lifespan`` context in main.py.
"""

from __future__ import annotations

import logging
import os

from apscheduler.schedulers.background import BackgroundScheduler

from app.services.presentation_scraping_service import (
    InlineTaskExecutor,
    ScrapeRunInProgressError,
    get_presentation_scraping_service,
)

logger = logging.getLogger(__name__)


def _get_int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


# ---------------------------------------------------------------------------
# Job: Daily due-only presentation scrape
# ---------------------------------------------------------------------------


def run_daily_presentation_scrape() -> None:
    """
    Crawl every company whose job is due. Skips when a run is already active.
    """
    logger.info("Scheduler: daily_presentation_scrape starting")
    service = get_presentation_scraping_service()
    try:
        service.start_run(executor=InlineTaskExecutor(), due_only=True)
    except ScrapeRunInProgressError:
        logger.warning("Scheduler: daily_presentation_scrape skipped, a run is already active")
        return

    logger.info("Scheduler: daily_presentation_scrape complete")


# ---------------------------------------------------------------------------
# Scheduler factory
# ---------------------------------------------------------------------------


def build_scheduler() -> BackgroundScheduler:
    """
    Build and register the periodic scrape job.

    Returns a configured but *not yet started* ``BackgroundScheduler``.
    The run hour defaults to 04:00 UTC and can be moved with
    ``PRESENTATION_SCRAPE_SCHEDULE_HOUR``.
    """
    scheduler = BackgroundScheduler(timezone="UTC")

    hour = min(23, max(0, _get_int_env("PRESENTATION_SCRAPE_SCHEDULE_HOUR", 4)))
    scheduler.add_job(
        run_daily_presentation_scrape,
        trigger="cron",
        hour=hour,
        minute=0,
        id="daily_presentation_scrape",
        name="Daily due-only presentation scrape",
        replace_existing=True,
        misfire_grace_time=3600,
        max_instances=1,
    )

    return scheduler
