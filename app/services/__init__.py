"""
app/services package marker.
"""

from app.services.presentation_scraping_service import (
    PresentationScrapingService,
    ScrapeRunInProgressError,
    get_presentation_scraping_service,
)

__all__ = [
    "PresentationScrapingService",
    "ScrapeRunInProgressError",
    "get_presentation_scraping_service",
]
