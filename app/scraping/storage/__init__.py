"""
Storage layer exports.
"""

from app.scraping.storage.base import CatalogStore
from app.scraping.storage.sqlalchemy_storage import SQLAlchemyCatalogStore

__all__ = ["CatalogStore", "SQLAlchemyCatalogStore"]
