"""
tests/test_config_and_cli.py

Environment config, strategy presets, scheduler wiring and CLI exit codes.
"""

from __future__ import annotations

import json
from contextlib import contextmanager

import pytest

from app.scheduler import jobs as scheduler_jobs
from app.scraping.config import (
    STRATEGIES,
    UndatedPolicy,
    get_presentation_scraping_settings,
    get_strategy,
)
from app.scraping.errors import FatalSetupError
from app.scraping.stats import RunStats
from app.services.presentation_scraping_service import ScrapeRunInProgressError
from scripts import run_presentation_scrape


@pytest.fixture()
def fresh_settings():
    get_presentation_scraping_settings.cache_clear()
    yield get_presentation_scraping_settings
    get_presentation_scraping_settings.cache_clear()


# ---------------------------------------------------------------------------
# Strategies and settings
# ---------------------------------------------------------------------------


class TestStrategies:
    def test_presets(self) -> None:
        assert sorted(STRATEGIES) == ["compact", "default", "events"]
        assert get_strategy("  Default ") is STRATEGIES["default"]

    def test_unknown_strategy(self) -> None:
        with pytest.raises(ValueError, match="Allowed strategies: compact, default, events"):
            get_strategy("aggressive")

    def test_overrides_are_clamped(self) -> None:
        strategy = get_strategy("events", cutoff_quarters=0, batch_size=-1, undated_policy="REJECT")
        assert strategy.cutoff_quarters == 1
        assert strategy.batch_size == 1
        assert strategy.undated_policy == UndatedPolicy.REJECT

    def test_unknown_undated_policy(self) -> None:
        with pytest.raises(ValueError, match="undated policy"):
            get_strategy("default", undated_policy="guess")


class TestSettings:
    def test_defaults(self, monkeypatch, fresh_settings) -> None:
        for name in (
            "PRESENTATION_SCRAPE_STRATEGY",
            "PRESENTATION_SCRAPE_MAX_CONCURRENCY",
            "PRESENTATION_SCRAPE_MAX_RETRIES",
            "PRESENTATION_SCRAPE_RESPECT_ROBOTS_TXT",
            "PRESENTATION_SCRAPE_COMPANIES_FILE",
        ):
            monkeypatch.delenv(name, raising=False)

        settings = fresh_settings()

        assert settings.strategy.name == "default"
        assert settings.max_concurrency == 2
        assert settings.max_retries == 3
        assert settings.respect_robots_txt is True
        assert settings.companies_file is None
        assert settings.user_agent.startswith("SlideInsight/1.0")

    def test_environment_overrides(self, monkeypatch, fresh_settings, tmp_path) -> None:
        monkeypatch.setenv("PRESENTATION_SCRAPE_STRATEGY", "compact")
        monkeypatch.setenv("PRESENTATION_SCRAPE_BATCH_SIZE", "10")
        monkeypatch.setenv("PRESENTATION_SCRAPE_MAX_CONCURRENCY", "0")
        monkeypatch.setenv("PRESENTATION_SCRAPE_REQUEST_DELAY_SECONDS", "not-a-number")
        monkeypatch.setenv("PRESENTATION_SCRAPE_RESPECT_ROBOTS_TXT", "false")
        monkeypatch.setenv("PRESENTATION_SCRAPE_OUTPUT_DIR", str(tmp_path))

        settings = fresh_settings()

        assert settings.strategy.name == "compact"
        assert settings.strategy.batch_size == 10
        assert settings.max_concurrency == 1
        assert settings.request_delay_seconds == 1.5
        assert settings.respect_robots_txt is False
        assert settings.output_dir == str(tmp_path)

    def test_invalid_strategy_env_fails_fast(self, monkeypatch, fresh_settings) -> None:
        monkeypatch.setenv("PRESENTATION_SCRAPE_STRATEGY", "nope")
        with pytest.raises(ValueError):
            fresh_settings()


# ---------------------------------------------------------------------------
# Scheduler
# ---------------------------------------------------------------------------


class FakeService:
    def __init__(self, *, busy: bool = False) -> None:
        self.busy = busy
        self.calls: list[dict] = []

    def start_run(self, **kwargs):
        if self.busy:
            raise ScrapeRunInProgressError("busy")
        self.calls.append(kwargs)


class TestScheduler:
    def test_daily_job_registered(self, monkeypatch) -> None:
        monkeypatch.setenv("PRESENTATION_SCRAPE_SCHEDULE_HOUR", "7")

        scheduler = scheduler_jobs.build_scheduler()
        job = scheduler.get_job("daily_presentation_scrape")

        assert job is not None
        assert job.max_instances == 1
        assert "hour='7'" in str(job.trigger)

    def test_daily_run_is_due_only(self, monkeypatch) -> None:
        service = FakeService()
        monkeypatch.setattr(scheduler_jobs, "get_presentation_scraping_service", lambda: service)

        scheduler_jobs.run_daily_presentation_scrape()

        assert len(service.calls) == 1
        assert service.calls[0]["due_only"] is True

    def test_daily_run_skips_when_busy(self, monkeypatch) -> None:
        monkeypatch.setattr(
            scheduler_jobs,
            "get_presentation_scraping_service",
            lambda: FakeService(busy=True),
        )

        scheduler_jobs.run_daily_presentation_scrape()


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


class FakeCliService:
    error: Exception | None = None
    instances: list[FakeCliService] = []

    def __init__(self) -> None:
        self.run_kwargs: dict | None = None
        self.retried = False
        FakeCliService.instances.append(self)

    def retry_failed(self, *, db) -> int:
        self.retried = True
        return 0

    def run(self, **kwargs) -> RunStats:
        self.run_kwargs = kwargs
        if FakeCliService.error is not None:
            raise FakeCliService.error
        return RunStats(total=1, processed=1, succeeded=1)


@contextmanager
def fake_session():
    yield object()


@pytest.fixture()
def cli(monkeypatch):
    FakeCliService.error = None
    FakeCliService.instances = []
    monkeypatch.setattr(run_presentation_scrape, "PresentationScrapingService", FakeCliService)
    monkeypatch.setattr(run_presentation_scrape, "SessionLocal", fake_session)
    monkeypatch.setattr(run_presentation_scrape, "configure_logging", lambda level: None)
    return run_presentation_scrape


class TestCli:
    def test_success_prints_snapshot(self, cli, capsys) -> None:
        exit_code = cli.main(["--strategy", "events", "--due-only", "--retry-failed"])

        assert exit_code == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["succeeded"] == 1
        service = FakeCliService.instances[0]
        assert service.retried is True
        assert service.run_kwargs["strategy"] == "events"
        assert service.run_kwargs["due_only"] is True
        assert service.run_kwargs["reset_catalog"] is False

    def test_fatal_setup_error_exits_non_zero(self, cli, capsys) -> None:
        FakeCliService.error = FatalSetupError("Chromium executable not found")

        assert cli.main([]) == 1
        assert capsys.readouterr().out == ""

    def test_unknown_strategy_is_rejected_by_parser(self, cli) -> None:
        with pytest.raises(SystemExit):
            cli.main(["--strategy", "aggressive"])
