"""
Repository for Company Directory lookups.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from sqlalchemy import Select, and_, or_, select
from sqlalchemy.orm import Session

from db.models.company import Company
from db.models.scraping_job import ScrapingJob, ScrapingJobStatus

# A job still in_progress after this long is treated as abandoned.
STALE_JOB_AFTER = timedelta(hours=6)


class CompanyRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def list_with_ir_url(self) -> list[Company]:
        stmt: Select[tuple[Company]] = (
            select(Company)
            .where(Company.ir_url.is_not(None))
            .order_by(Company.created_at.asc(), Company.id.asc())
        )
        return list(self._session.scalars(stmt).all())

    def list_due(
        self,
        *,
        now: datetime,
        stale_after: timedelta = STALE_JOB_AFTER,
    ) -> list[Company]:
        """
        Companies with no crawl job yet, a pending job, or a job whose
        next_scheduled time has passed. An in_progress job is skipped unless
        it started more than stale_after ago.
        """

        in_progress = ScrapingJob.status == ScrapingJobStatus.IN_PROGRESS
        stmt: Select[tuple[Company]] = (
            select(Company)
            .outerjoin(ScrapingJob, ScrapingJob.company_id == Company.id)
            .where(Company.ir_url.is_not(None))
            .where(
                or_(
                    ScrapingJob.id.is_(None),
                    and_(
                        in_progress,
                        or_(
                            ScrapingJob.started_at.is_(None),
                            ScrapingJob.started_at <= now - stale_after,
                        ),
                    ),
                    and_(
                        ~in_progress,
                        or_(
                            ScrapingJob.status == ScrapingJobStatus.PENDING,
                            ScrapingJob.next_scheduled.is_(None),
                            ScrapingJob.next_scheduled <= now,
                        ),
                    ),
                )
            )
            .order_by(Company.created_at.asc(), Company.id.asc())
        )
        return list(self._session.scalars(stmt).all())
