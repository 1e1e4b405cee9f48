"""
Storage layer interfaces for the presentation catalog.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from app.scraping.types import Company, PresentationRecord


class CatalogStore(ABC):
    """
    Storage abstraction for presentation and crawl job writes.
    """

    @abstractmethod
    def exists(self, url: str) -> bool:
        """
        Return whether a presentation with this url is already persisted.
        """

    @abstractmethod
    def save(self, record: PresentationRecord) -> bool:
        """
        Insert one presentation unless its url exists; return True if inserted.
        """

    @abstractmethod
    def mark_job_started(self, company: Company, *, started_at: datetime) -> None:
        """
        Move the company's crawl job to in_progress.
        """

    @abstractmethod
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
        """
        Record the terminal job status and increment presentations_found.
        """
