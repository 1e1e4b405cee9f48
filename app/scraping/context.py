"""
Explicit per-run context threaded through the scraping pipeline.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timezone

import requests

from app.scraping.config.models import PresentationScrapingSettings, Strategy
from app.scraping.queue import CancellationToken, ConcurrencyQueue
from app.scraping.robots import PolitenessGuard
from app.scraping.stats import StatsAggregator


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class RunContext:
    """
    Run-scoped collaborators and shared state.

    The robots cache and the stats aggregator are the only mutable state
    shared between company tasks.
    """

    settings: PresentationScrapingSettings
    strategy: Strategy
    logger: logging.Logger
    queue: ConcurrencyQueue
    robots: PolitenessGuard
    stats: StatsAggregator
    cancel_token: CancellationToken
    clock: Callable[[], datetime] = utc_now
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    @classmethod
    def create(
        cls,
        *,
        settings: PresentationScrapingSettings,
        session: requests.Session | None = None,
        cancel_token: CancellationToken | None = None,
        clock: Callable[[], datetime] = utc_now,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        logger: logging.Logger | None = None,
    ) -> RunContext:
        token = cancel_token or CancellationToken()
        return cls(
            settings=settings,
            strategy=settings.strategy,
            logger=logger or logging.getLogger("app.scraping.run"),
            queue=ConcurrencyQueue(concurrency=settings.max_concurrency, cancel_token=token),
            robots=PolitenessGuard(
                session=session or requests.Session(),
                timeout_seconds=settings.robots_timeout_seconds,
            ),
            stats=StatsAggregator(),
            cancel_token=token,
            clock=clock,
            sleep=sleep,
        )
