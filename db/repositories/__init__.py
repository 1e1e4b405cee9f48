"""
Repository layer exports.
"""

from db.repositories.company_repository import CompanyRepository
from db.repositories.presentation_repository import PresentationRepository
from db.repositories.scraping_job_repository import ScrapingJobRepository

__all__ = [
    "CompanyRepository",
    "PresentationRepository",
    "ScrapingJobRepository",
]
