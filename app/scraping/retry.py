"""Fixed-delay retry wrapper for one company crawl.

Attempts report a tagged outcome instead of raising:

- ``Ok``: the crawl finished; stop.
- ``Retryable``: transient failure (navigation timeout, DNS, unexpected error);
  try again after the fixed delay while attempts remain.
- ``Terminal``: do not try again. A robots.txt disallow resolves to a
  zero-result success with a skipped reason; anything else is a failure.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Union

from app.scraping.errors import PolicyDisallowed
from app.scraping.logging_utils import log_event
from app.scraping.types import (
    Company,
    CompanyCrawlResult,
    CompanyTaskResult,
    CrawlFailure,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Ok:
    value: CompanyCrawlResult


@dataclass(frozen=True)
class Retryable:
    error: Exception


@dataclass(frozen=True)
class Terminal:
    error: Exception


Outcome = Union[Ok, Retryable, Terminal]

Sleep = Callable[[float], Awaitable[None]]
Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RetryingTask:
    """
    Runs one company's attempt function under a bounded fixed-delay policy.

    Never raises for crawl errors: exhaustion becomes a CrawlFailure so one
    company cannot abort the batch. Exceptions raised by the attempt function
    itself (FatalSetupError) propagate unchanged.
    """

    def __init__(
        self,
        *,
        max_retries: int = 3,
        retry_delay_seconds: float = 1.0,
        sleep: Sleep = asyncio.sleep,
        clock: Clock = _utc_now,
    ) -> None:
        self._max_attempts = max(1, max_retries)
        self._retry_delay_seconds = max(0.0, retry_delay_seconds)
        self._sleep = sleep
        self._clock = clock

    async def run(
        self,
        company: Company,
        attempt: Callable[[], Awaitable[Outcome]],
    ) -> CompanyTaskResult:
        last_error: Exception | None = None

        for attempt_number in range(1, self._max_attempts + 1):
            outcome = await attempt()

            if isinstance(outcome, Ok):
                return CompanyTaskResult(
                    company=company,
                    attempts=attempt_number,
                    result=outcome.value,
                )

            if isinstance(outcome, Terminal):
                if isinstance(outcome.error, PolicyDisallowed):
                    return CompanyTaskResult(
                        company=company,
                        attempts=attempt_number,
                        result=CompanyCrawlResult(
                            company=company,
                            skipped_reason=str(outcome.error),
                        ),
                    )
                return self._failure(company, attempt_number, outcome.error)

            last_error = outcome.error
            remaining = self._max_attempts - attempt_number
            log_event(
                logger,
                logging.WARNING,
                "company_attempt_failed",
                company=company.name,
                attempt=attempt_number,
                attempts_left=remaining,
                error=str(outcome.error),
            )
            if remaining > 0:
                await self._sleep(self._retry_delay_seconds)

        return self._failure(
            company,
            self._max_attempts,
            last_error or RuntimeError("crawl failed without an error"),
        )

    def _failure(self, company: Company, attempts: int, error: Exception) -> CompanyTaskResult:
        failure = CrawlFailure(
            company=company.name,
            symbol=company.symbol,
            error=str(error),
            timestamp=self._clock(),
        )
        log_event(
            logger,
            logging.ERROR,
            "company_crawl_failed",
            company=company.name,
            attempts=attempts,
            error=failure.error,
        )
        return CompanyTaskResult(company=company, attempts=attempts, failure=failure)
