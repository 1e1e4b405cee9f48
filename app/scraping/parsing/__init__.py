"""
Parsing layer exports.
"""

from app.scraping.parsing.classifier import LinkClassifier
from app.scraping.parsing.dates import DateNormalizer, find_date_fragment
from app.scraping.parsing.html_parsers import HTMLParsingLayer, build_snapshot

__all__ = [
    "DateNormalizer",
    "HTMLParsingLayer",
    "LinkClassifier",
    "build_snapshot",
    "find_date_fragment",
]
