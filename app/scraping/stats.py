"""
Run-level statistics accumulation and JSON snapshots.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from app.scraping.logging_utils import log_event
from app.scraping.types import CrawlFailure

logger = logging.getLogger(__name__)


@dataclass
class RunStats:
    """
    Additive counters for one pipeline execution.
    """

    total: int = 0
    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    presentations_found: int = 0
    presentations_saved: int = 0
    errors: list[CrawlFailure] = field(default_factory=list)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: datetime | None = None

    def to_snapshot(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "processed": self.processed,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "skipped": self.skipped,
            "presentationsFound": self.presentations_found,
            "presentationsSaved": self.presentations_saved,
            "errors": [error.to_dict() for error in self.errors],
            "startedAt": self.started_at.isoformat(),
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
        }


class StatsAggregator:
    """
    Folds per-company outcomes into a RunStats.

    Updates happen from task completion on the event loop, so they never
    interleave.
    """

    def __init__(self, stats: RunStats | None = None) -> None:
        self.stats = stats or RunStats()

    def start(self, *, total: int, started_at: datetime) -> None:
        self.stats.total = total
        self.stats.started_at = started_at

    def record_success(
        self,
        *,
        presentations_found: int,
        presentations_saved: int,
        skipped: bool = False,
    ) -> None:
        self.stats.processed += 1
        self.stats.succeeded += 1
        if skipped:
            self.stats.skipped += 1
        self.stats.presentations_found += presentations_found
        self.stats.presentations_saved += presentations_saved

    def record_failure(self, failure: CrawlFailure) -> None:
        self.stats.processed += 1
        self.stats.failed += 1
        self.stats.errors.append(failure)

    def finish(self, *, completed_at: datetime) -> RunStats:
        self.stats.completed_at = completed_at
        return self.stats


class StatsSnapshotWriter:
    """
    Writes `<output_dir>/<prefix>-stats.json` snapshots.
    """

    def __init__(self, *, output_dir: str | Path) -> None:
        self._output_dir = Path(output_dir)

    def write(self, stats: RunStats, *, prefix: str) -> Path:
        self._output_dir.mkdir(parents=True, exist_ok=True)
        path = self._output_dir / f"{prefix}-stats.json"
        path.write_text(json.dumps(stats.to_snapshot(), indent=2), encoding="utf-8")
        log_event(logger, logging.DEBUG, "stats_snapshot_written", path=str(path))
        return path
