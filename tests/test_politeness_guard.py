"""
tests/test_politeness_guard.py

Pytest unit tests for PolitenessGuard.

Coverage
--------
- Disallow for our user agent, allow for others
- Origin-level evaluation (page path does not matter)
- Fail-open on non-2xx and on connection errors
- One fetch per origin, including concurrent first access
"""

from __future__ import annotations

import asyncio

from conftest import USER_AGENT, FakeRobotsSession

from app.scraping.robots import PolitenessGuard

ROBOTS_URL = "https://ir.acme.example/robots.txt"


def _guard(robots: dict[str, str | None]) -> tuple[PolitenessGuard, FakeRobotsSession]:
    session = FakeRobotsSession(robots)
    return PolitenessGuard(session=session, timeout_seconds=5.0), session


class TestAllowed:
    def test_disallow_all(self) -> None:
        guard, _ = _guard({ROBOTS_URL: "User-agent: *\nDisallow: /\n"})
        assert asyncio.run(guard.allowed("https://ir.acme.example/investors", USER_AGENT)) is False

    def test_disallow_scoped_to_our_agent(self) -> None:
        guard, _ = _guard({ROBOTS_URL: "User-agent: SlideInsight\nDisallow: /\n"})
        assert asyncio.run(guard.allowed("https://ir.acme.example/", USER_AGENT)) is False
        assert asyncio.run(guard.allowed("https://ir.acme.example/", "OtherBot/2.0")) is True

    def test_evaluated_against_origin_not_path(self) -> None:
        guard, _ = _guard({ROBOTS_URL: "User-agent: *\nDisallow: /private/\n"})
        allowed = asyncio.run(guard.allowed("https://ir.acme.example/private/decks", USER_AGENT))
        assert allowed is True

    def test_missing_robots_is_allowed(self) -> None:
        guard, _ = _guard({})
        assert asyncio.run(guard.allowed("https://ir.acme.example/", USER_AGENT)) is True

    def test_connection_error_is_allowed(self) -> None:
        guard, _ = _guard({ROBOTS_URL: None})
        assert asyncio.run(guard.allowed("https://ir.acme.example/", USER_AGENT)) is True
        policy = asyncio.run(guard.policy_for("https://ir.acme.example/"))
        assert policy.reachable is False


class TestCaching:
    def test_fetches_once_per_origin(self) -> None:
        guard, session = _guard({ROBOTS_URL: "User-agent: *\nAllow: /\n"})

        async def scenario() -> None:
            await guard.allowed("https://ir.acme.example/a", USER_AGENT)
            await guard.allowed("https://IR.ACME.example/b", USER_AGENT)
            await guard.allowed("https://other.example/", USER_AGENT)

        asyncio.run(scenario())
        assert session.calls == [ROBOTS_URL, "https://other.example/robots.txt"]
        assert guard.cached_domains == ["https://ir.acme.example", "https://other.example"]

    def test_concurrent_first_access_fetches_once(self) -> None:
        guard, session = _guard({ROBOTS_URL: "User-agent: *\nAllow: /\n"})

        async def scenario() -> list[bool]:
            return list(
                await asyncio.gather(
                    *(guard.allowed(f"https://ir.acme.example/{n}", USER_AGENT) for n in range(5))
                )
            )

        assert asyncio.run(scenario()) == [True] * 5
        assert session.calls == [ROBOTS_URL]
