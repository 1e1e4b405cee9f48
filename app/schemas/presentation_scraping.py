"""
app/schemas/presentation_scraping.py

Request and response schemas for presentation scraping operations.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class ScrapeRunAcceptedResponse(BaseModel):
    status: str = "accepted"
    strategy: str
    due_only: bool


class ScrapeRunCancelResponse(BaseModel):
    cancelled: bool


class RetryFailedResponse(BaseModel):
    jobs_reset: int = Field(..., ge=0)


class ScrapingJobResponse(BaseModel):
    """
    API response model for one company's crawl job.
    """

    job_id: UUID
    company_id: str
    status: str
    started_at: datetime | None = None
    completed_at: datetime | None = None
    presentations_found: int = Field(..., ge=0)
    next_scheduled: datetime | None = None
    error: str | None = None
    skipped_reason: str | None = None


class ScrapingJobListResponse(BaseModel):
    jobs: list[ScrapingJobResponse] = Field(default_factory=list)
