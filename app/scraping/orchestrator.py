"""
Presentation scraping batch orchestrator.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace
from datetime import datetime, timedelta

from app.scraping.context import RunContext
from app.scraping.crawler import PresentationCrawler
from app.scraping.errors import FatalSetupError
from app.scraping.fetcher import BrowserRenderer
from app.scraping.logging_utils import log_event
from app.scraping.normalization import Deduplicator, normalize_url
from app.scraping.retry import RetryingTask
from app.scraping.stats import RunStats, StatsSnapshotWriter
from app.scraping.storage import CatalogStore
from app.scraping.types import Company, CompanyTaskResult, CrawlFailure
from db.models.scraping_job import ScrapingJobStatus


def split_batches(companies: Sequence[Company], batch_size: int) -> list[list[Company]]:
    size = max(1, batch_size)
    return [list(companies[index : index + size]) for index in range(0, len(companies), size)]


def unique_companies(companies: Sequence[Company]) -> list[Company]:
    selected: list[Company] = []
    seen: set[str] = set()
    for company in companies:
        if company.id in seen:
            continue
        seen.add(company.id)
        selected.append(company)
    return selected


class BatchOrchestrator:
    """
    Runs the company list through the crawl pipeline in fixed-size batches.

    Each batch is drained through the concurrency queue before the next one
    starts. A stats snapshot is written after every batch and once more at
    the end, including when the run is cancelled or aborted by a
    FatalSetupError, which is re-raised after the final snapshot.
    """

    def __init__(
        self,
        *,
        context: RunContext,
        renderer: BrowserRenderer,
        store: CatalogStore,
        crawler: PresentationCrawler | None = None,
        snapshot_writer: StatsSnapshotWriter | None = None,
    ) -> None:
        self._context = context
        self._store = store
        self._crawler = crawler or PresentationCrawler(context=context, renderer=renderer)
        self._deduplicator = Deduplicator(store)
        self._snapshots = snapshot_writer or StatsSnapshotWriter(
            output_dir=context.settings.output_dir
        )
        self._retrying = RetryingTask(
            max_retries=context.settings.max_retries,
            retry_delay_seconds=context.settings.retry_delay_seconds,
            sleep=context.sleep,
            clock=context.clock,
        )
        self._logger = context.logger

    async def run(self, companies: Sequence[Company]) -> RunStats:
        selected = unique_companies(companies)
        started_at = self._context.clock()
        stats = self._context.stats
        stats.start(total=len(selected), started_at=started_at)
        run_label = started_at.strftime("%Y%m%dT%H%M%SZ")

        batches = split_batches(selected, self._context.strategy.batch_size)
        log_event(
            self._logger,
            logging.INFO,
            "scrape_run_started",
            companies=len(selected),
            batches=len(batches),
            strategy=self._context.strategy.name,
            max_concurrency=self._context.queue.concurrency,
        )

        try:
            await self._run_batches(batches, run_label=run_label)
        except FatalSetupError as exc:
            result = stats.finish(completed_at=self._context.clock())
            self._snapshots.write(result, prefix=f"final-{run_label}")
            log_event(
                self._logger,
                logging.CRITICAL,
                "scrape_run_aborted",
                processed=result.processed,
                total=result.total,
                error=str(exc),
            )
            raise

        result = stats.finish(completed_at=self._context.clock())
        self._snapshots.write(result, prefix=f"final-{run_label}")
        log_event(
            self._logger,
            logging.INFO,
            "scrape_run_completed",
            total=result.total,
            processed=result.processed,
            succeeded=result.succeeded,
            failed=result.failed,
            skipped=result.skipped,
            presentations_found=result.presentations_found,
            presentations_saved=result.presentations_saved,
        )
        return result

    async def _run_batches(self, batches: list[list[Company]], *, run_label: str) -> None:
        stats = self._context.stats
        for number, batch in enumerate(batches, start=1):
            if self._context.cancel_token.cancelled:
                log_event(
                    self._logger,
                    logging.WARNING,
                    "scrape_run_cancelled",
                    remaining_batches=len(batches) - number + 1,
                )
                return

            await self._context.queue.drain(
                [self._company_factory(company) for company in batch]
            )
            self._snapshots.write(stats.stats, prefix=f"batch-{number}-{run_label}")
            log_event(
                self._logger,
                logging.INFO,
                "batch_completed",
                batch=number,
                processed=stats.stats.processed,
                total=stats.stats.total,
            )

            if number < len(batches) and not self._context.cancel_token.cancelled:
                await self._context.sleep(self._context.settings.batch_delay_seconds)

    def _company_factory(self, company: Company):
        async def factory() -> None:
            await self.process_company(company)

        return factory

    async def process_company(self, company: Company) -> CompanyTaskResult:
        """
        Crawl one company under the retry policy and persist its outcome.

        Catalog failures are folded into the company's failure record so one
        company never aborts the batch.
        """

        started_at = self._context.clock()
        try:
            self._store.mark_job_started(company, started_at=started_at)
        except Exception as exc:
            return self._persistence_failure(company, exc)

        task_result = await self._retrying.run(
            company,
            lambda: self._crawler.attempt(company),
        )

        try:
            self._record_outcome(task_result)
        except Exception as exc:
            return self._persistence_failure(company, exc)
        return task_result

    def _record_outcome(self, task_result: CompanyTaskResult) -> None:
        company = task_result.company
        completed_at = self._context.clock()
        next_scheduled = self._next_scheduled(completed_at)

        if task_result.failure is not None:
            self._store.mark_job_finished(
                company,
                status=ScrapingJobStatus.FAILED,
                completed_at=completed_at,
                next_scheduled=next_scheduled,
                error=task_result.failure.error,
            )
            self._context.stats.record_failure(task_result.failure)
            return

        crawl = task_result.result
        records = crawl.presentations if crawl is not None else []
        saved = 0
        for record in records:
            canonical = replace(record, url=normalize_url(record.url))
            if not self._deduplicator.admit(canonical.url):
                continue
            if self._store.save(canonical):
                saved += 1

        skipped_reason = crawl.skipped_reason if crawl is not None else None
        self._store.mark_job_finished(
            company,
            status=ScrapingJobStatus.SUCCESS,
            completed_at=completed_at,
            next_scheduled=next_scheduled,
            presentations_found=len(records),
            skipped_reason=skipped_reason,
        )
        self._context.stats.record_success(
            presentations_found=len(records),
            presentations_saved=saved,
            skipped=skipped_reason is not None,
        )
        log_event(
            self._logger,
            logging.INFO,
            "company_processed",
            company=company.name,
            attempts=task_result.attempts,
            presentations_found=len(records),
            presentations_saved=saved,
            skipped_reason=skipped_reason,
        )

    def _persistence_failure(self, company: Company, exc: Exception) -> CompanyTaskResult:
        completed_at = self._context.clock()
        failure = CrawlFailure(
            company=company.name,
            symbol=company.symbol,
            error=f"catalog write failed: {exc}",
            timestamp=completed_at,
        )
        self._context.stats.record_failure(failure)
        log_event(
            self._logger,
            logging.ERROR,
            "company_persistence_failed",
            company=company.name,
            error_type=type(exc).__name__,
            error=str(exc),
        )
        self._close_failed_job(company, failure, completed_at=completed_at)
        return CompanyTaskResult(company=company, attempts=0, failure=failure)

    def _close_failed_job(
        self,
        company: Company,
        failure: CrawlFailure,
        *,
        completed_at: datetime,
    ) -> None:
        # Best effort: a job left in_progress is only picked up again once stale.
        try:
            self._store.mark_job_finished(
                company,
                status=ScrapingJobStatus.FAILED,
                completed_at=completed_at,
                next_scheduled=self._next_scheduled(completed_at),
                error=failure.error,
            )
        except Exception as exc:
            log_event(
                self._logger,
                logging.ERROR,
                "company_job_close_failed",
                company=company.name,
                error_type=type(exc).__name__,
                error=str(exc),
            )

    def _next_scheduled(self, completed_at: datetime) -> datetime:
        return completed_at + timedelta(days=self._context.settings.job_reschedule_days)
