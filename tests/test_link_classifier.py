"""
tests/test_link_classifier.py

Pytest unit tests for snapshot construction and LinkClassifier.

Coverage
--------
- Anchor resolution, row container text, script stripping
- File / navigation / ignored classification
- Navigation fan-out limit and ordering
- File format detection
"""

from __future__ import annotations

import pytest

from app.scraping.config import STRATEGIES
from app.scraping.parsing import LinkClassifier, build_snapshot
from app.scraping.types import Anchor, LinkClassification


@pytest.fixture()
def classifier() -> LinkClassifier:
    return LinkClassifier(STRATEGIES["default"])


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------


class TestBuildSnapshot:
    def test_resolves_relative_hrefs_and_keeps_pseudo_schemes(self) -> None:
        snapshot = build_snapshot(
            '<a href="/files/deck.pdf">Deck</a><a href="mailto:ir@x.com">Mail</a>',
            "https://ir.example.com/investors/",
        )
        hrefs = [anchor.href for anchor in snapshot.anchors]
        assert hrefs == ["https://ir.example.com/files/deck.pdf", "mailto:ir@x.com"]

    def test_row_container_text_prefers_table_row(self) -> None:
        html = (
            "<div><table><tr><td>March 5, 2024</td>"
            '<td><a href="a.pdf">Deck</a></td></tr></table></div>'
        )
        snapshot = build_snapshot(html, "https://ir.example.com/")
        assert snapshot.anchors[0].container_text == "March 5, 2024 Deck"

    def test_list_item_container(self) -> None:
        html = '<ul><li>Investor Day 2024 <a href="b.pdf">slides</a></li></ul>'
        snapshot = build_snapshot(html, "https://ir.example.com/")
        assert snapshot.anchors[0].container_text == "Investor Day 2024 slides"

    def test_date_beyond_truncated_container_text_is_kept(self) -> None:
        filler = "Quarterly results webcast replay and transcript. " * 15
        html = (
            f"<table><tr><td>{filler}</td><td>March 5, 2024</td>"
            '<td><a href="a.pdf">Deck</a></td></tr></table>'
        )
        snapshot = build_snapshot(html, "https://ir.example.com/")

        anchor = snapshot.anchors[0]
        assert len(anchor.container_text) == 500
        assert "March 5, 2024" not in anchor.container_text
        assert anchor.date_text == "March 5, 2024"

    def test_scripts_are_not_visible_text(self) -> None:
        html = "<html><head><title>IR</title><script>var x = 1;</script></head><body>Hello</body></html>"
        snapshot = build_snapshot(html, "https://ir.example.com/")
        assert snapshot.title == "IR"
        assert "var x" not in snapshot.text
        assert "Hello" in snapshot.text

    def test_explicit_title_wins(self) -> None:
        snapshot = build_snapshot("<title>Ignored</title>", "https://x.com/", title="Rendered")
        assert snapshot.title == "Rendered"


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


class TestClassify:
    @pytest.mark.parametrize(
        "href",
        [
            "https://ir.example.com/deck.pdf",
            "https://ir.example.com/deck.PPTX",
            "https://ir.example.com/deck.ppt",
            "https://ir.example.com/download/deck.pdf?version=2",
        ],
    )
    def test_file_links(self, classifier: LinkClassifier, href: str) -> None:
        link = classifier.classify(Anchor(href=href, text="anything"))
        assert link.classification == LinkClassification.FILE

    @pytest.mark.parametrize(
        "text",
        ["Events & Presentations", "INVESTOR Relations", "Webcasts", "Conference calendar", "Slides"],
    )
    def test_navigation_keywords(self, classifier: LinkClassifier, text: str) -> None:
        link = classifier.classify(Anchor(href="https://ir.example.com/page", text=text))
        assert link.classification == LinkClassification.NAVIGATION

    def test_pseudo_schemes_are_ignored_even_with_keywords(self, classifier: LinkClassifier) -> None:
        mail = classifier.classify(Anchor(href="mailto:ir@example.com", text="Investor contact"))
        script = classifier.classify(Anchor(href="javascript:void(0)", text="Presentations"))
        assert mail.classification == LinkClassification.IGNORED
        assert script.classification == LinkClassification.IGNORED

    def test_other_links_are_ignored(self, classifier: LinkClassifier) -> None:
        link = classifier.classify(Anchor(href="https://ir.example.com/careers", text="Careers"))
        assert link.classification == LinkClassification.IGNORED

    def test_keeps_anchor_and_container_text(self, classifier: LinkClassifier) -> None:
        link = classifier.classify(
            Anchor(
                href="https://x.com/a.pdf",
                text="Deck",
                container_text="May 2024 Deck",
                date_text="May 2024",
            )
        )
        assert link.anchor_text == "Deck"
        assert link.container_text == "May 2024 Deck"
        assert link.date_text == "May 2024"


class TestCandidates:
    def test_navigation_candidates_limited_and_distinct(self, classifier: LinkClassifier) -> None:
        anchors = [
            Anchor(href="https://x.com/a", text="Presentations"),
            Anchor(href="https://x.com/a", text="Presentations again"),
            Anchor(href="https://x.com/b", text="Events"),
            Anchor(href="https://x.com/deck.pdf", text="Investor deck"),
            Anchor(href="https://x.com/c", text="Webcasts"),
            Anchor(href="https://x.com/d", text="Conferences"),
        ]
        selected = classifier.navigation_candidates(classifier.classify_all(anchors))
        assert [link.href for link in selected] == [
            "https://x.com/a",
            "https://x.com/b",
            "https://x.com/c",
        ]

    def test_file_candidates(self, classifier: LinkClassifier) -> None:
        links = classifier.classify_all(
            [
                Anchor(href="https://x.com/a.pdf", text="A"),
                Anchor(href="https://x.com/events", text="Events"),
                Anchor(href="https://x.com/b.pptx", text="B"),
            ]
        )
        assert [link.href for link in classifier.file_candidates(links)] == [
            "https://x.com/a.pdf",
            "https://x.com/b.pptx",
        ]

    @pytest.mark.parametrize(
        ("href", "expected"),
        [
            ("https://x.com/a.pdf", "PDF"),
            ("https://x.com/a.ppt", "PPT"),
            ("https://x.com/a.pptx", "PPTX"),
            ("https://x.com/a.PDF?dl=1", "PDF"),
            ("https://x.com/a.docx", None),
        ],
    )
    def test_file_format(self, classifier: LinkClassifier, href: str, expected: str | None) -> None:
        assert classifier.file_format(href) == expected
