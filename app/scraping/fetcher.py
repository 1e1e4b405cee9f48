"""
Page rendering abstraction and its Playwright implementation.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from app.scraping.errors import FatalSetupError, FetchError
from app.scraping.logging_utils import log_event
from app.scraping.parsing.html_parsers import build_snapshot
from app.scraping.types import PageSnapshot

logger = logging.getLogger(__name__)

BROWSER_ARGS = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--disable-gpu",
)


class PageFetcher(ABC):
    """
    One isolated page: renders urls and probes file sizes.
    """

    @abstractmethod
    async def render(self, url: str, *, timeout_seconds: float) -> PageSnapshot:
        """
        Navigate to `url` and return its snapshot; raise FetchError on failure.
        """

    @abstractmethod
    async def probe_size(self, url: str) -> int | None:
        """
        HEAD `url` and return its Content-Length, or None when unknown.
        """


class BrowserRenderer(ABC):
    """
    Long-lived browser shared by a run; hands out isolated pages.
    """

    @abstractmethod
    async def start(self) -> None:
        """
        Launch the browser; raise FatalSetupError when it cannot start.
        """

    @abstractmethod
    async def close(self) -> None:
        """
        Shut the browser down.
        """

    @abstractmethod
    def page(self, *, user_agent: str) -> Any:
        """
        Async context manager yielding a PageFetcher closed on every exit path.
        """

    async def __aenter__(self) -> BrowserRenderer:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


class PlaywrightPageFetcher(PageFetcher):
    def __init__(self, page: Page, *, probe_timeout_seconds: float = 10.0) -> None:
        self._page = page
        self._probe_timeout_ms = probe_timeout_seconds * 1000

    async def render(self, url: str, *, timeout_seconds: float) -> PageSnapshot:
        timeout_ms = timeout_seconds * 1000
        try:
            await self._page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
            await self._page.wait_for_selector("body", timeout=timeout_ms)
            html = await self._page.content()
            title = await self._page.title()
        except PlaywrightError as exc:
            raise FetchError(url, exc) from exc
        return build_snapshot(html, self._page.url or url, title=title)

    async def probe_size(self, url: str) -> int | None:
        try:
            response = await self._page.request.head(url, timeout=self._probe_timeout_ms)
        except PlaywrightError as exc:
            log_event(logger, logging.DEBUG, "file_size_probe_failed", url=url, error=str(exc))
            return None

        if not response.ok:
            return None
        raw_length = response.headers.get("content-length")
        try:
            return int(raw_length) if raw_length is not None else None
        except ValueError:
            return None


class PlaywrightRenderer(BrowserRenderer):
    """
    Headless Chromium via Playwright; one browser context per company page.
    """

    def __init__(
        self,
        *,
        headless: bool = True,
        navigation_timeout_seconds: float = 30.0,
    ) -> None:
        self._headless = headless
        self._navigation_timeout_ms = navigation_timeout_seconds * 1000
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None

    async def start(self) -> None:
        if self._browser is not None:
            return
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self._headless,
                args=list(BROWSER_ARGS),
            )
        except PlaywrightError as exc:
            await self.close()
            raise FatalSetupError(f"Unable to launch browser: {exc}") from exc
        log_event(logger, logging.INFO, "browser_started", headless=self._headless)

    async def close(self) -> None:
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    @asynccontextmanager
    async def page(self, *, user_agent: str) -> AsyncIterator[PageFetcher]:
        if self._browser is None:
            raise FatalSetupError("Browser is not started.")

        context: BrowserContext = await self._browser.new_context(user_agent=user_agent)
        try:
            page = await context.new_page()
            page.set_default_navigation_timeout(self._navigation_timeout_ms)
            page.set_default_timeout(self._navigation_timeout_ms)
            yield PlaywrightPageFetcher(page)
        finally:
            await context.close()
