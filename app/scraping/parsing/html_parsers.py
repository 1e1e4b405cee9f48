"""
BeautifulSoup-based snapshot builder for rendered IR pages.
"""

from __future__ import annotations

import re
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from app.scraping.parsing.dates import find_date_fragment
from app.scraping.types import Anchor, PageSnapshot

_MAX_ANCHORS = 2000
_MAX_CONTAINER_TEXT = 500


class HTMLParsingLayer:
    """
    Deterministic conversion of rendered HTML into a PageSnapshot.
    """

    @classmethod
    def build_snapshot(cls, *, html: str, url: str, title: str | None = None) -> PageSnapshot:
        soup = BeautifulSoup(html, "html.parser")
        for node in soup(["script", "style", "noscript", "template"]):
            node.decompose()

        if title is None:
            title = cls._clean_text(soup.title.get_text(" ", strip=True)) if soup.title else ""

        return PageSnapshot(
            url=url,
            title=title,
            anchors=cls.extract_anchors(soup=soup, base_url=url),
            text=cls._clean_text(soup.get_text(" ", strip=True)),
        )

    @classmethod
    def extract_anchors(cls, *, soup: BeautifulSoup, base_url: str) -> list[Anchor]:
        anchors: list[Anchor] = []
        for node in soup.find_all("a", href=True)[:_MAX_ANCHORS]:
            raw_href = str(node.get("href", "")).strip()
            if not raw_href:
                continue
            href = raw_href
            if not raw_href.lower().startswith(("mailto:", "javascript:", "tel:")):
                href = urljoin(base_url, raw_href)

            container = cls._row_container(node)
            full_text = ""
            if container is not None:
                full_text = cls._clean_text(container.get_text(" ", strip=True))
            anchors.append(
                Anchor(
                    href=href,
                    text=cls._clean_text(node.get_text(" ", strip=True)),
                    container_text=full_text[:_MAX_CONTAINER_TEXT],
                    date_text=find_date_fragment(full_text),
                )
            )
        return anchors

    @staticmethod
    def _row_container(node: Tag) -> Tag | None:
        return (
            node.find_parent("tr")
            or node.find_parent("li")
            or node.find_parent(class_="row")
            or node.find_parent(class_="item")
            or node.find_parent("div")
        )

    @staticmethod
    def _clean_text(value: str) -> str:
        return re.sub(r"\s+", " ", value).strip()


def build_snapshot(html: str, url: str, title: str | None = None) -> PageSnapshot:
    return HTMLParsingLayer.build_snapshot(html=html, url=url, title=title)
