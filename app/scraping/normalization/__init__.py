"""
Normalization layer exports.
"""

from app.scraping.normalization.deduplicator import Deduplicator, normalize_url
from app.scraping.normalization.metadata_extractor import (
    MetadataExtractor,
    derive_tags,
    estimate_slide_count,
    format_file_size,
    subtract_quarters,
)

__all__ = [
    "Deduplicator",
    "MetadataExtractor",
    "derive_tags",
    "estimate_slide_count",
    "format_file_size",
    "normalize_url",
    "subtract_quarters",
]
