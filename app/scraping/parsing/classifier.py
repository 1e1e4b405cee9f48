"""
Keyword and extension heuristics for tagging page anchors.
"""

from __future__ import annotations

from collections.abc import Iterable
from urllib.parse import urlparse

from app.scraping.config.models import Strategy
from app.scraping.types import Anchor, CandidateLink, LinkClassification

_PSEUDO_SCHEMES = ("mailto:", "javascript:")


class LinkClassifier:
    """
    Tags anchors as direct file links, navigation candidates or noise.
    """

    def __init__(self, strategy: Strategy) -> None:
        self._keywords = tuple(keyword.lower() for keyword in strategy.navigation_keywords)
        self._extensions = tuple(ext.lower() for ext in strategy.file_extensions)
        self._max_navigation_pages = strategy.max_navigation_pages

    def classify(self, anchor: Anchor) -> CandidateLink:
        return CandidateLink(
            href=anchor.href,
            anchor_text=anchor.text,
            container_text=anchor.container_text,
            classification=self._classification_for(anchor),
            date_text=anchor.date_text,
        )

    def classify_all(self, anchors: Iterable[Anchor]) -> list[CandidateLink]:
        return [self.classify(anchor) for anchor in anchors]

    def navigation_candidates(self, links: Iterable[CandidateLink]) -> list[CandidateLink]:
        """
        First navigation candidates in anchor order, one per distinct href.
        """

        selected: list[CandidateLink] = []
        seen: set[str] = set()
        for link in links:
            if link.classification != LinkClassification.NAVIGATION:
                continue
            if link.href in seen:
                continue
            seen.add(link.href)
            selected.append(link)
            if len(selected) >= self._max_navigation_pages:
                break
        return selected

    @staticmethod
    def file_candidates(links: Iterable[CandidateLink]) -> list[CandidateLink]:
        return [link for link in links if link.classification == LinkClassification.FILE]

    def file_format(self, href: str) -> str | None:
        """
        Upper-cased extension (``PDF``, ``PPT``, ``PPTX``) for a file href.
        """

        for candidate in (urlparse(href).path.lower(), href.lower()):
            for ext in sorted(self._extensions, key=len, reverse=True):
                if candidate.endswith(ext):
                    return ext.lstrip(".").upper()
        return None

    def _classification_for(self, anchor: Anchor) -> str:
        href = anchor.href.strip()
        if not href or href.lower().startswith(_PSEUDO_SCHEMES):
            return LinkClassification.IGNORED

        if self.file_format(href) is not None:
            return LinkClassification.FILE

        text = anchor.text.lower()
        if any(keyword in text for keyword in self._keywords):
            return LinkClassification.NAVIGATION
        return LinkClassification.IGNORED
