"""
app/api/routers/presentation_scraping.py

Presentation scraping run and crawl job endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.schemas.presentation_scraping import (
    RetryFailedResponse,
    ScrapeRunAcceptedResponse,
    ScrapeRunCancelResponse,
    ScrapingJobListResponse,
    ScrapingJobResponse,
)
from app.services.presentation_scraping_service import (
    FastAPIBackgroundTaskExecutor,
    PresentationScrapingService,
    ScrapeRunInProgressError,
    get_presentation_scraping_service,
)
from db.models.scraping_job import ScrapingJob
from db.session import get_db

router = APIRouter(tags=["presentation-scraping"])


@router.post(
    "/scrape-runs",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=ScrapeRunAcceptedResponse,
)
def trigger_scrape_run(
    background_tasks: BackgroundTasks,
    strategy: str | None = Query(default=None, description="Optional strategy preset name"),
    due_only: bool = Query(default=False, description="Only crawl companies whose job is due"),
    scraping_service: PresentationScrapingService = Depends(get_presentation_scraping_service),
) -> ScrapeRunAcceptedResponse:
    """
    Start a presentation scrape in the background.
    """

    try:
        scraping_service.start_run(
            executor=FastAPIBackgroundTaskExecutor(background_tasks),
            strategy=strategy,
            due_only=due_only,
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except ScrapeRunInProgressError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc

    return ScrapeRunAcceptedResponse(
        strategy=scraping_service.settings_for(strategy=strategy).strategy.name,
        due_only=due_only,
    )


@router.post("/scrape-runs/cancel", response_model=ScrapeRunCancelResponse)
def cancel_scrape_run(
    scraping_service: PresentationScrapingService = Depends(get_presentation_scraping_service),
) -> ScrapeRunCancelResponse:
    if not scraping_service.cancel_active_run():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No presentation scrape run is in progress.",
        )
    return ScrapeRunCancelResponse(cancelled=True)


@router.post("/scraping-jobs/retry-failed", response_model=RetryFailedResponse)
def retry_failed_jobs(
    db: Session = Depends(get_db),
    scraping_service: PresentationScrapingService = Depends(get_presentation_scraping_service),
) -> RetryFailedResponse:
    return RetryFailedResponse(jobs_reset=scraping_service.retry_failed(db=db))


@router.get("/scraping-jobs", response_model=ScrapingJobListResponse)
def list_scraping_jobs(
    status_filter: str | None = Query(default=None, alias="status", description="Optional status filter"),
    limit: int = Query(default=100, ge=1, le=500, description="Max jobs returned"),
    db: Session = Depends(get_db),
    scraping_service: PresentationScrapingService = Depends(get_presentation_scraping_service),
) -> ScrapingJobListResponse:
    jobs = scraping_service.list_jobs(db=db, limit=limit, status=status_filter)
    return ScrapingJobListResponse(jobs=[_to_job_response(job) for job in jobs])


def _to_job_response(job: ScrapingJob) -> ScrapingJobResponse:
    return ScrapingJobResponse(
        job_id=job.id,
        company_id=job.company_id,
        status=job.status,
        started_at=job.started_at,
        completed_at=job.completed_at,
        presentations_found=job.presentations_found,
        next_scheduled=job.next_scheduled,
        error=job.error,
        skipped_reason=job.skipped_reason,
    )
