"""
app/api/routers package marker.
"""

from app.api.routers.presentation_scraping import router as presentation_scraping_router

__all__ = ["presentation_scraping_router"]
