"""
tests/conftest.py

Shared fakes for the scraping pipeline: no browser, no network, no database
server. Pages are plain HTML strings turned into snapshots by build_snapshot.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import pytest
import requests
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import db.models  # noqa: F401 registers all ORM models on Base.metadata
from app.scraping.config import STRATEGIES, PresentationScrapingSettings
from app.scraping.context import RunContext
from app.scraping.errors import FetchError
from app.scraping.fetcher import BrowserRenderer, PageFetcher
from app.scraping.parsing.html_parsers import build_snapshot
from app.scraping.storage.base import CatalogStore
from app.scraping.types import Company, PageSnapshot, PresentationRecord
from db.base import Base

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
USER_AGENT = "SlideInsight/1.0 (https://slideinsight.com; webmaster@slideinsight.com)"

LANDING_HTML = """
<html><head><title>Acme Investor Relations</title></head><body>
  <ul>
    <li><a href="/events-presentations">Events &amp; Presentations</a></li>
    <li><a href="mailto:ir@acme.example">Contact investor relations</a></li>
    <li><a href="/careers">Careers</a></li>
  </ul>
</body></html>
"""

EVENTS_HTML = """
<html><head><title>Events</title></head><body>
  <table>
    <tr><td>January 10, 2024</td>
        <td><a href="/files/q4-2023-earnings-presentation.pdf">Q4 2023 Earnings Presentation</a></td></tr>
    <tr><td>June 1, 2022</td>
        <td><a href="/files/investor-day-2022.pdf">Investor Day 2022</a></td></tr>
    <tr><td>March 5, 2024</td>
        <td><a href="/files/q4-2023-press-release.pdf">Q4 2023 Press Release</a></td></tr>
    <tr><td><a href="/files/deck.pptx">Download</a></td></tr>
  </table>
</body></html>
"""

KEPT_URL = "https://ir.acme.example/files/q4-2023-earnings-presentation.pdf"


# ---------------------------------------------------------------------------
# Browser fakes
# ---------------------------------------------------------------------------


class FakePageFetcher(PageFetcher):
    def __init__(self, renderer: FakeRenderer) -> None:
        self._renderer = renderer

    async def render(self, url: str, *, timeout_seconds: float) -> PageSnapshot:
        self._renderer.rendered.append(url)
        if self._renderer.render_delay:
            await asyncio.sleep(self._renderer.render_delay)
        if self._renderer.on_render is not None:
            self._renderer.on_render(url)
        if url in self._renderer.failing_urls:
            raise FetchError(url, "net::ERR_NAME_NOT_RESOLVED")
        html = self._renderer.pages.get(url)
        if html is None:
            raise FetchError(url, "Timeout 30000ms exceeded")
        return build_snapshot(html, url)

    async def probe_size(self, url: str) -> int | None:
        self._renderer.probed.append(url)
        return self._renderer.sizes.get(url)


class FakeRenderer(BrowserRenderer):
    """
    In-memory site map standing in for a headless browser.
    """

    def __init__(
        self,
        pages: dict[str, str] | None = None,
        *,
        sizes: dict[str, int] | None = None,
        failing_urls: set[str] | None = None,
        render_delay: float = 0.0,
        on_render: Callable[[str], None] | None = None,
    ) -> None:
        self.pages = pages or {}
        self.sizes = sizes or {}
        self.failing_urls = failing_urls or set()
        self.render_delay = render_delay
        self.on_render = on_render
        self.rendered: list[str] = []
        self.probed: list[str] = []
        self.user_agents: list[str] = []
        self.started = False
        self.closed = False
        self.open_pages = 0
        self.pages_opened = 0

    async def start(self) -> None:
        self.started = True

    async def close(self) -> None:
        self.closed = True

    @asynccontextmanager
    async def page(self, *, user_agent: str) -> AsyncIterator[PageFetcher]:
        self.user_agents.append(user_agent)
        self.open_pages += 1
        self.pages_opened += 1
        try:
            yield FakePageFetcher(self)
        finally:
            self.open_pages -= 1


# ---------------------------------------------------------------------------
# robots.txt session fake
# ---------------------------------------------------------------------------


class FakeResponse:
    def __init__(self, status_code: int, text: str = "") -> None:
        self.status_code = status_code
        self.text = text

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400


class FakeRobotsSession:
    """
    Minimal requests.Session stand-in keyed by robots.txt url.

    Unknown urls answer 404. A value of None raises a connection error.
    """

    def __init__(self, robots: dict[str, str | None] | None = None) -> None:
        self.robots = robots or {}
        self.calls: list[str] = []

    def get(self, url: str, timeout: float | None = None) -> FakeResponse:
        self.calls.append(url)
        if url not in self.robots:
            return FakeResponse(404)
        body = self.robots[url]
        if body is None:
            raise requests.ConnectionError(f"Connection refused: {url}")
        return FakeResponse(200, body)


# ---------------------------------------------------------------------------
# Catalog store fake
# ---------------------------------------------------------------------------


class InMemoryCatalogStore(CatalogStore):
    def __init__(self) -> None:
        self.presentations: dict[str, PresentationRecord] = {}
        self.jobs: dict[str, dict] = {}
        self.save_calls = 0

    def exists(self, url: str) -> bool:
        return url in self.presentations

    def save(self, record: PresentationRecord) -> bool:
        self.save_calls += 1
        if record.url in self.presentations:
            return False
        self.presentations[record.url] = record
        return True

    def mark_job_started(self, company: Company, *, started_at: datetime) -> None:
        job = self.jobs.setdefault(company.id, {"presentations_found": 0})
        job.update(status="in_progress", started_at=started_at, error=None)

    def mark_job_finished(
        self,
        company: Company,
        *,
        status: str,
        completed_at: datetime,
        next_scheduled: datetime,
        presentations_found: int = 0,
        error: str | None = None,
        skipped_reason: str | None = None,
    ) -> None:
        job = self.jobs.setdefault(company.id, {"presentations_found": 0})
        job.update(
            status=status,
            completed_at=completed_at,
            next_scheduled=next_scheduled,
            error=error,
            skipped_reason=skipped_reason,
        )
        job["presentations_found"] += presentations_found


class SleepRecorder:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def acme() -> Company:
    return Company(id="acme", name="Acme Corp", symbol="ACME", ir_url="https://ir.acme.example/")


@pytest.fixture()
def acme_site() -> dict[str, str]:
    return {
        "https://ir.acme.example/": LANDING_HTML,
        "https://ir.acme.example/events-presentations": EVENTS_HTML,
    }


@pytest.fixture()
def settings(tmp_path) -> PresentationScrapingSettings:
    return PresentationScrapingSettings(
        user_agent=USER_AGENT,
        strategy=STRATEGIES["default"],
        retry_delay_seconds=1.0,
        batch_delay_seconds=3.0,
        request_delay_seconds=1.5,
        output_dir=str(tmp_path / "stats"),
    )


@pytest.fixture()
def robots_session() -> FakeRobotsSession:
    return FakeRobotsSession()


@pytest.fixture()
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture()
def make_context(settings, robots_session, sleep_recorder):
    def factory(**overrides) -> RunContext:
        return RunContext.create(
            settings=overrides.pop("settings", settings),
            session=overrides.pop("session", robots_session),
            clock=overrides.pop("clock", lambda: NOW),
            sleep=overrides.pop("sleep", sleep_recorder),
            **overrides,
        )

    return factory


@pytest.fixture()
def store() -> InMemoryCatalogStore:
    return InMemoryCatalogStore()


@pytest.fixture()
def session_factory() -> sessionmaker[Session]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, class_=Session, expire_on_commit=False)


@pytest.fixture()
def db_session(session_factory) -> Session:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()
