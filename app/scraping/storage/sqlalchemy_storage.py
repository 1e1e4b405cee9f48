"""
SQLAlchemy-backed catalog storage for discovered presentations.
"""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.scraping.errors import PersistenceConflict
from app.scraping.logging_utils import log_event
from app.scraping.storage.base import CatalogStore
from app.scraping.types import Company, PresentationRecord
from db.models.presentation import Presentation
from db.repositories.presentation_repository import PresentationRepository
from db.repositories.scraping_job_repository import ScrapingJobRepository

logger = logging.getLogger(__name__)


class SQLAlchemyCatalogStore(CatalogStore):
    """
    Persist presentations and job status through repositories and one session.

    Every write commits on its own so a later failure never rolls back
    presentations already saved for earlier companies.
    """

    def __init__(self, *, session: Session) -> None:
        self._session = session
        self._presentations = PresentationRepository(session)
        self._jobs = ScrapingJobRepository(session)

    def exists(self, url: str) -> bool:
        return self._presentations.exists(url)

    def save(self, record: PresentationRecord) -> bool:
        try:
            self._insert(record)
        except PersistenceConflict:
            log_event(logger, logging.DEBUG, "presentation_exists", url=record.url)
            return False
        return True

    def _insert(self, record: PresentationRecord) -> None:
        if self._presentations.exists(record.url):
            raise PersistenceConflict(record.url)

        row = Presentation(
            company_id=record.company_id,
            company_symbol=record.company_symbol,
            title=record.title,
            date=record.publication_date,
            date_source=record.date_source,
            url=record.url,
            file_type=record.file_format.lower(),
            file_size=record.file_size,
            slide_count_estimate=record.slide_count_estimate,
            created_at=record.discovered_at,
        )
        try:
            self._presentations.insert(row, tags=record.tags)
            self._session.commit()
        except IntegrityError as exc:
            self._session.rollback()
            raise PersistenceConflict(record.url) from exc
        except SQLAlchemyError:
            self._session.rollback()
            raise

    def mark_job_started(self, company: Company, *, started_at: datetime) -> None:
        try:
            self._jobs.mark_in_progress(company_id=company.id, started_at=started_at)
            self._session.commit()
        except SQLAlchemyError:
            self._session.rollback()
            raise

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
        try:
            self._jobs.mark_finished(
                company_id=company.id,
                status=status,
                completed_at=completed_at,
                next_scheduled=next_scheduled,
                presentations_found=presentations_found,
                error=error,
                skipped_reason=skipped_reason,
            )
            self._session.commit()
        except SQLAlchemyError:
            self._session.rollback()
            raise
