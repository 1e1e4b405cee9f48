"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.company import Company
from db.models.presentation import Presentation, PresentationTag
from db.models.scraping_job import ScrapingJob, ScrapingJobStatus

__all__ = [
    "Company",
    "Presentation",
    "PresentationTag",
    "ScrapingJob",
    "ScrapingJobStatus",
]
