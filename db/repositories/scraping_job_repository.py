"""
Repository for per-company scraping job lifecycle persistence.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Select, select, update
from sqlalchemy.orm import Session

from db.models.scraping_job import ScrapingJob, ScrapingJobStatus


class ScrapingJobRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get_for_company(self, company_id: str) -> ScrapingJob | None:
        return self._session.scalar(
            select(ScrapingJob).where(ScrapingJob.company_id == company_id)
        )

    def list_jobs(
        self,
        *,
        limit: int = 100,
        status: str | None = None,
    ) -> list[ScrapingJob]:
        stmt: Select[tuple[ScrapingJob]] = select(ScrapingJob)
        if status:
            stmt = stmt.where(ScrapingJob.status == status)
        stmt = stmt.order_by(ScrapingJob.updated_at.desc()).limit(max(1, limit))
        return list(self._session.scalars(stmt).all())

    def mark_in_progress(self, *, company_id: str, started_at: datetime) -> ScrapingJob:
        job = self.get_for_company(company_id)
        if job is None:
            job = ScrapingJob(company_id=company_id, presentations_found=0)
            self._session.add(job)
        job.status = ScrapingJobStatus.IN_PROGRESS
        job.started_at = started_at
        job.completed_at = None
        job.error = None
        job.skipped_reason = None
        self._session.flush()
        return job

    def mark_finished(
        self,
        *,
        company_id: str,
        status: str,
        completed_at: datetime,
        next_scheduled: datetime,
        presentations_found: int = 0,
        error: str | None = None,
        skipped_reason: str | None = None,
    ) -> ScrapingJob:
        if status not in ScrapingJobStatus.TERMINAL:
            raise ValueError(f"Job status '{status}' is not terminal.")

        job = self.get_for_company(company_id)
        if job is None:
            job = ScrapingJob(
                company_id=company_id,
                presentations_found=0,
                started_at=completed_at,
            )
            self._session.add(job)
        job.status = status
        job.completed_at = completed_at
        job.next_scheduled = next_scheduled
        job.presentations_found = (job.presentations_found or 0) + max(0, presentations_found)
        job.error = error
        job.skipped_reason = skipped_reason
        self._session.flush()
        return job

    def reset_failed(self, *, now: datetime | None = None) -> int:
        """
        Move every failed job back to pending so the next run picks it up.
        """

        result = self._session.execute(
            update(ScrapingJob)
            .where(ScrapingJob.status == ScrapingJobStatus.FAILED)
            .values(
                status=ScrapingJobStatus.PENDING,
                error=None,
                next_scheduled=now or datetime.now(timezone.utc),
            )
        )
        return int(result.rowcount or 0)
