"""
Config helpers for presentation scraping.
"""

from app.scraping.config.loader import (
    STRATEGIES,
    get_presentation_scraping_settings,
    get_strategy,
    resolve_project_path,
)
from app.scraping.config.models import PresentationScrapingSettings, Strategy, UndatedPolicy

__all__ = [
    "PresentationScrapingSettings",
    "STRATEGIES",
    "Strategy",
    "UndatedPolicy",
    "get_presentation_scraping_settings",
    "get_strategy",
    "resolve_project_path",
]
