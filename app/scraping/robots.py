"""
robots.txt politeness guard for IR site crawling.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from urllib.parse import urljoin, urlparse
from urllib.robotparser import RobotFileParser

import requests

from app.scraping.logging_utils import log_event

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RobotsPolicy:
    """
    Parsed robots.txt rules for one origin, fetched once per run.
    """

    domain: str
    fetched_at: datetime
    parser: RobotFileParser
    reachable: bool


class PolitenessGuard:
    """
    Caches robots.txt rules per origin and answers site-level access checks.

    An unreachable or non-2xx robots.txt is treated as allow-all.
    """

    def __init__(
        self,
        *,
        session: requests.Session,
        timeout_seconds: float = 5.0,
    ) -> None:
        self._session = session
        self._timeout_seconds = timeout_seconds
        self._cache: dict[str, RobotsPolicy] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    async def allowed(self, url: str, user_agent: str) -> bool:
        """
        Return whether `user_agent` may crawl the site hosting `url`.

        The rules are evaluated against the origin root, not the page path.
        """

        policy = await self.policy_for(url)
        return policy.parser.can_fetch(user_agent, f"{policy.domain}/")

    async def policy_for(self, url: str) -> RobotsPolicy:
        origin = self._origin(url)
        cached = self._cache.get(origin)
        if cached is not None:
            return cached

        lock = self._locks.setdefault(origin, asyncio.Lock())
        async with lock:
            cached = self._cache.get(origin)
            if cached is None:
                cached = await asyncio.to_thread(self._fetch_policy, origin)
                self._cache[origin] = cached
        return cached

    @property
    def cached_domains(self) -> list[str]:
        return sorted(self._cache)

    def _fetch_policy(self, origin: str) -> RobotsPolicy:
        parser = RobotFileParser()
        robots_url = urljoin(origin, "/robots.txt")
        reachable = False
        try:
            response = self._session.get(
                robots_url,
                timeout=self._timeout_seconds,
            )
            if response.ok:
                parser.set_url(robots_url)
                parser.parse(response.text.splitlines())
                reachable = True
                log_event(
                    logger,
                    logging.INFO,
                    "robots_loaded",
                    origin=origin,
                    robots_url=robots_url,
                )
            else:
                self._apply_fallback_policy(parser)
                log_event(
                    logger,
                    logging.DEBUG,
                    "robots_unavailable",
                    origin=origin,
                    robots_url=robots_url,
                    status_code=response.status_code,
                    fallback_allow=True,
                )
        except requests.RequestException as exc:
            self._apply_fallback_policy(parser)
            log_event(
                logger,
                logging.WARNING,
                "robots_fetch_failed",
                origin=origin,
                robots_url=robots_url,
                fallback_allow=True,
                error=str(exc),
            )

        return RobotsPolicy(
            domain=origin,
            fetched_at=datetime.now(timezone.utc),
            parser=parser,
            reachable=reachable,
        )

    @staticmethod
    def _apply_fallback_policy(parser: RobotFileParser) -> None:
        parser.parse(["User-agent: *", "Allow: /"])

    @staticmethod
    def _origin(url: str) -> str:
        parsed = urlparse(url)
        scheme = parsed.scheme or "https"
        return f"{scheme}://{parsed.netloc.lower()}"
