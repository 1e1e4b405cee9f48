"""
app/services/presentation_scraping_service.py

Service orchestration for IR presentation scraping runs.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable
from contextlib import AsyncExitStack
from dataclasses import replace
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Protocol

import requests
from fastapi import BackgroundTasks
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.scraping.config import (
    PresentationScrapingSettings,
    get_presentation_scraping_settings,
    get_strategy,
)
from app.scraping.context import RunContext
from app.scraping.directory import (
    CompanyDirectory,
    JsonCompanyDirectory,
    SQLAlchemyCompanyDirectory,
)
from app.scraping.fetcher import BrowserRenderer, PlaywrightRenderer
from app.scraping.logging_utils import log_event
from app.scraping.orchestrator import BatchOrchestrator
from app.scraping.queue import CancellationToken
from app.scraping.stats import RunStats
from app.scraping.storage import SQLAlchemyCatalogStore
from app.scraping.types import Company
from db.models.scraping_job import ScrapingJob
from db.repositories.presentation_repository import PresentationRepository
from db.repositories.scraping_job_repository import ScrapingJobRepository

logger = logging.getLogger(__name__)

RendererFactory = Callable[[PresentationScrapingSettings], BrowserRenderer]


class ScrapeRunInProgressError(RuntimeError):
    """Raised when a run is requested while another one is still active."""


class ScrapeTaskExecutor(Protocol):
    def submit(self, task: Callable[..., None], *args: Any, **kwargs: Any) -> None:
        ...


class FastAPIBackgroundTaskExecutor:
    def __init__(self, background_tasks: BackgroundTasks) -> None:
        self._background_tasks = background_tasks

    def submit(self, task: Callable[..., None], *args: Any, **kwargs: Any) -> None:
        self._background_tasks.add_task(task, *args, **kwargs)


class InlineTaskExecutor:
    def submit(self, task: Callable[..., None], *args: Any, **kwargs: Any) -> None:
        task(*args, **kwargs)


def build_playwright_renderer(settings: PresentationScrapingSettings) -> BrowserRenderer:
    return PlaywrightRenderer(
        headless=settings.headless,
        navigation_timeout_seconds=settings.navigation_timeout_seconds,
    )


class PresentationScrapingService:
    """
    Wires the company directory, catalog store, browser and orchestrator for
    one run, and tracks the single active run so it can be cancelled.
    """

    def __init__(
        self,
        *,
        settings: PresentationScrapingSettings | None = None,
        session_factory: Callable[[], Session] | None = None,
        renderer_factory: RendererFactory | None = None,
        http_session: requests.Session | None = None,
    ) -> None:
        self._settings = settings or get_presentation_scraping_settings()
        if session_factory is None:
            from db.session import SessionLocal

            self._session_factory = SessionLocal
        else:
            self._session_factory = session_factory
        self._renderer_factory = renderer_factory or build_playwright_renderer
        self._http_session = http_session
        self._lock = threading.Lock()
        self._active_token: CancellationToken | None = None

    @property
    def settings(self) -> PresentationScrapingSettings:
        return self._settings

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._active_token is not None

    def settings_for(self, *, strategy: str | None = None) -> PresentationScrapingSettings:
        """
        Return settings with the named strategy preset swapped in.

        Raises ValueError for unknown strategy names.
        """

        if not strategy:
            return self._settings
        base = self._settings.strategy
        selected = get_strategy(
            strategy,
            cutoff_quarters=base.cutoff_quarters,
            batch_size=base.batch_size,
            undated_policy=base.undated_policy,
        )
        return replace(self._settings, strategy=selected)

    def directory_for(self, *, db: Session, companies_file: str | None = None) -> CompanyDirectory:
        path = companies_file or self._settings.companies_file
        if path:
            return JsonCompanyDirectory(path=path)
        return SQLAlchemyCompanyDirectory(session=db)

    async def run_async(
        self,
        *,
        db: Session,
        strategy: str | None = None,
        due_only: bool = False,
        companies_file: str | None = None,
        reset_catalog: bool = False,
        cancel_token: CancellationToken | None = None,
    ) -> RunStats:
        settings = self.settings_for(strategy=strategy)
        companies = self.load_companies(db=db, due_only=due_only, companies_file=companies_file)

        context = RunContext.create(
            settings=settings,
            session=self._http_session,
            cancel_token=cancel_token,
        )
        renderer = self._renderer_factory(settings)
        async with AsyncExitStack() as stack:
            if companies:
                await stack.enter_async_context(renderer)
            else:
                log_event(logger, logging.WARNING, "no_companies_to_scrape", due_only=due_only)

            # Only wipe the catalog once the browser is known to start.
            if reset_catalog:
                self.reset_catalog(db=db)

            orchestrator = BatchOrchestrator(
                context=context,
                renderer=renderer,
                store=SQLAlchemyCatalogStore(session=db),
            )
            return await orchestrator.run(companies)

    def run(self, **kwargs: Any) -> RunStats:
        """
        Blocking wrapper around run_async for threads without an event loop.
        """

        return asyncio.run(self.run_async(**kwargs))

    def start_run(
        self,
        *,
        executor: ScrapeTaskExecutor,
        strategy: str | None = None,
        due_only: bool = False,
    ) -> CancellationToken:
        self.settings_for(strategy=strategy)
        with self._lock:
            if self._active_token is not None:
                raise ScrapeRunInProgressError("A presentation scrape run is already in progress.")
            token = CancellationToken()
            self._active_token = token

        executor.submit(
            self._run_tracked,
            token=token,
            strategy=strategy,
            due_only=due_only,
        )
        return token

    def cancel_active_run(self) -> bool:
        with self._lock:
            token = self._active_token
        if token is None:
            return False
        token.cancel()
        log_event(logger, logging.WARNING, "scrape_run_cancel_requested")
        return True

    def _run_tracked(
        self,
        *,
        token: CancellationToken,
        strategy: str | None,
        due_only: bool,
    ) -> None:
        try:
            with self._session_factory() as db:
                self.run(db=db, strategy=strategy, due_only=due_only, cancel_token=token)
        except Exception as exc:  # noqa: BLE001
            log_event(
                logger,
                logging.ERROR,
                "scrape_run_failed",
                error_type=type(exc).__name__,
                error=str(exc),
            )
        finally:
            with self._lock:
                if self._active_token is token:
                    self._active_token = None

    def retry_failed(self, *, db: Session) -> int:
        """
        Reset failed crawl jobs to pending so the next due-only run retries them.
        """

        try:
            reset = ScrapingJobRepository(db).reset_failed(now=datetime.now(timezone.utc))
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        log_event(logger, logging.INFO, "failed_jobs_reset", jobs_reset=reset)
        return reset

    def reset_catalog(self, *, db: Session) -> int:
        try:
            deleted = PresentationRepository(db).delete_all()
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        log_event(logger, logging.WARNING, "catalog_reset", presentations_deleted=deleted)
        return deleted

    def list_jobs(
        self,
        *,
        db: Session,
        limit: int = 100,
        status: str | None = None,
    ) -> list[ScrapingJob]:
        return ScrapingJobRepository(db).list_jobs(limit=limit, status=status)

    def load_companies(
        self,
        *,
        db: Session,
        due_only: bool = False,
        companies_file: str | None = None,
    ) -> list[Company]:
        return self.directory_for(db=db, companies_file=companies_file).load(due_only=due_only)


@lru_cache(maxsize=1)
def get_presentation_scraping_service() -> PresentationScrapingService:
    """
    Build and cache the presentation scraping service.
    """

    return PresentationScrapingService()
