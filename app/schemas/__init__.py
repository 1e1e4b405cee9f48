"""
app/schemas package marker.
"""

from app.schemas.presentation_scraping import (
    RetryFailedResponse,
    ScrapeRunAcceptedResponse,
    ScrapeRunCancelResponse,
    ScrapingJobListResponse,
    ScrapingJobResponse,
)

__all__ = [
    "RetryFailedResponse",
    "ScrapeRunAcceptedResponse",
    "ScrapeRunCancelResponse",
    "ScrapingJobListResponse",
    "ScrapingJobResponse",
]
