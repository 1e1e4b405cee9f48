"""
Per-company crawl of an investor relations site.
"""

from __future__ import annotations

import logging

from app.scraping.context import RunContext
from app.scraping.errors import FatalSetupError, FetchError, PolicyDisallowed
from app.scraping.fetcher import BrowserRenderer, PageFetcher
from app.scraping.logging_utils import log_event
from app.scraping.normalization import MetadataExtractor
from app.scraping.parsing import LinkClassifier
from app.scraping.retry import Ok, Outcome, Retryable, Terminal
from app.scraping.types import (
    CandidateLink,
    Company,
    CompanyCrawlResult,
    PresentationRecord,
)


class PresentationCrawler:
    """
    Finds recent presentation documents on one company's IR site.

    The landing page is rendered first; up to the strategy's navigation
    fan-out of linked pages are then scanned for file links. When those
    pages yield nothing, the landing page's own file links are used.
    """

    def __init__(
        self,
        *,
        context: RunContext,
        renderer: BrowserRenderer,
        classifier: LinkClassifier | None = None,
        extractor: MetadataExtractor | None = None,
    ) -> None:
        self._context = context
        self._renderer = renderer
        self._classifier = classifier or LinkClassifier(context.strategy)
        self._extractor = extractor or MetadataExtractor(
            strategy=context.strategy,
            classifier=self._classifier,
        )
        self._logger = context.logger
        self._user_agent = context.settings.user_agent

    async def attempt(self, company: Company) -> Outcome:
        """
        Run one crawl attempt and tag its outcome for the retry policy.

        FatalSetupError is not an outcome: it propagates and aborts the run.
        """

        try:
            return Ok(await self.crawl(company))
        except PolicyDisallowed as exc:
            log_event(
                self._logger,
                logging.INFO,
                "company_skipped_by_robots",
                company=company.name,
                ir_url=company.ir_url,
            )
            return Terminal(exc)
        except FatalSetupError:
            raise
        except FetchError as exc:
            return Retryable(exc)
        except Exception as exc:
            log_event(
                self._logger,
                logging.WARNING,
                "company_crawl_unexpected_error",
                company=company.name,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return Retryable(exc)

    async def crawl(self, company: Company) -> CompanyCrawlResult:
        if not await self._is_allowed(company.ir_url):
            raise PolicyDisallowed(company.ir_url, self._user_agent)

        now = self._context.clock()
        async with self._renderer.page(user_agent=self._user_agent) as fetcher:
            landing = await fetcher.render(
                company.ir_url,
                timeout_seconds=self._context.settings.navigation_timeout_seconds,
            )
            landing_links = self._classifier.classify_all(landing.anchors)

            linked_files = await self._scan_navigation_pages(
                fetcher,
                company=company,
                links=landing_links,
            )
            records = self._extractor.extract(linked_files, company=company, now=now)
            if not records:
                records = self._extractor.extract(
                    self._classifier.file_candidates(landing_links),
                    company=company,
                    now=now,
                )

            sized = [await self._with_size(fetcher, record) for record in records]

        log_event(
            self._logger,
            logging.INFO,
            "company_crawl_completed",
            company=company.name,
            symbol=company.symbol,
            presentations_found=len(sized),
        )
        return CompanyCrawlResult(company=company, presentations=sized)

    async def _scan_navigation_pages(
        self,
        fetcher: PageFetcher,
        *,
        company: Company,
        links: list[CandidateLink],
    ) -> list[CandidateLink]:
        found: list[CandidateLink] = []
        for index, link in enumerate(self._classifier.navigation_candidates(links)):
            if not await self._is_allowed(link.href):
                log_event(
                    self._logger,
                    logging.INFO,
                    "navigation_page_disallowed",
                    company=company.name,
                    url=link.href,
                )
                continue

            if index > 0:
                await self._context.sleep(self._context.settings.request_delay_seconds)
            try:
                snapshot = await fetcher.render(
                    link.href,
                    timeout_seconds=self._context.settings.navigation_timeout_seconds,
                )
            except FetchError as exc:
                log_event(
                    self._logger,
                    logging.WARNING,
                    "navigation_page_failed",
                    company=company.name,
                    url=link.href,
                    error=str(exc),
                )
                continue

            files = self._classifier.file_candidates(self._classifier.classify_all(snapshot.anchors))
            log_event(
                self._logger,
                logging.DEBUG,
                "navigation_page_scanned",
                company=company.name,
                url=link.href,
                file_links=len(files),
            )
            found.extend(files)
        return found

    async def _is_allowed(self, url: str) -> bool:
        if not self._context.settings.respect_robots_txt:
            return True
        return await self._context.robots.allowed(url, self._user_agent)

    async def _with_size(self, fetcher: PageFetcher, record: PresentationRecord) -> PresentationRecord:
        size_bytes = await fetcher.probe_size(record.url)
        return self._extractor.with_file_size(record, size_bytes)
