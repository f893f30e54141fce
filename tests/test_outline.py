"""
Tests for outline resolution and chapter matching.
"""

import pytest

from pdf_context import (
    HeuristicsConfig,
    OutlineResolver,
    PDFSection,
    SelectiveExtractor,
    fuzzy_match,
    levenshtein_distance,
)

from conftest import FakeDocument, make_item


def resolver_for(heuristics=None):
    extractor = SelectiveExtractor(heuristics=heuristics)
    return OutlineResolver(page_loader=extractor.extract_page, heuristics=extractor.heuristics)


def page_with_header(header, body="body text for this page"):
    return [make_item(header, y=760.0), make_item(body, y=600.0)]


class TestLevenshtein:
    """Tests for levenshtein_distance."""

    @pytest.mark.parametrize("a,b,expected", [
        ("kitten", "sitting", 3),
        ("", "abc", 3),
        ("abc", "", 3),
        ("same", "same", 0),
        ("flaw", "lawn", 2),
    ])
    def test_distance(self, a, b, expected):
        assert levenshtein_distance(a, b) == expected

    def test_symmetric(self):
        assert levenshtein_distance("intro", "introduction") == levenshtein_distance("introduction", "intro")


class TestFuzzyMatch:
    """Tests for fuzzy_match."""

    def test_containment(self):
        assert fuzzy_match("Introduction to Learning", "introduction")
        assert fuzzy_match("intro", "Introduction")

    def test_chapter_prefix(self):
        assert fuzzy_match("Chapter 1: Overview", "chapter 1")

    def test_case_and_whitespace(self):
        assert fuzzy_match("  METHODS ", "methods")

    def test_similar_titles(self):
        # 3 edits over 11 characters
        assert fuzzy_match("Chapter One", "Chapter Two")

    def test_different_titles(self):
        assert not fuzzy_match("Results", "Appendix")

    def test_threshold(self):
        assert not fuzzy_match("Chapter One", "Chapter Two", threshold=0.9)


class TestNativeOutline:
    """Tests for reading the native outline."""

    def test_ranges(self, book_doc):
        sections = resolver_for().resolve_outline(book_doc)
        assert [(s.title, s.start_page, s.end_page) for s in sections] == [
            ("Introduction", 1, 3),
            ("Training", 4, 6),
            ("Evaluation", 7, 9),
        ]
        assert all(s.confidence == 1.0 for s in sections)

    def test_unresolvable_destination_maps_to_first_page(self):
        doc = FakeDocument(["a page"] * 5, outline=[("Lost", 99), ("Found", 3)])
        sections = resolver_for().native_outline(doc)
        assert sections[0].start_page == 1
        assert sections[0].end_page == 2
        assert sections[1].start_page == 3

    def test_broken_outline_is_empty(self):
        doc = FakeDocument(["a page"] * 3, outline=[("A", 1)], broken_outline=True)
        assert resolver_for().native_outline(doc) == []

    def test_no_outline(self):
        assert resolver_for().native_outline(FakeDocument(["a page"])) == []


class TestDetectSections:
    """Tests for header-based section detection."""

    def test_detects_pattern_headers(self):
        doc = FakeDocument([
            page_with_header("Introduction"),
            "more introduction text",
            page_with_header("Methods"),
            "details of the methods",
        ])
        sections = resolver_for().resolve_outline(doc)
        assert [(s.title, s.start_page, s.end_page) for s in sections] == [
            ("Introduction", 1, 2),
            ("Methods", 3, 4),
        ]
        assert all(s.confidence == 0.8 for s in sections)

    def test_bold_header_without_pattern_is_ignored(self):
        bold = make_item("A quiet title", y=760.0, size=18.0, font_name="Helvetica-Bold")
        doc = FakeDocument([[bold], "body text"])
        assert resolver_for().detect_sections_from_text(doc) == []

    def test_scan_limited_to_first_pages(self):
        pages = ["plain body text"] * 25
        pages[22] = page_with_header("Conclusion")
        doc = FakeDocument(pages)
        assert resolver_for().detect_sections_from_text(doc) == []

    def test_broken_outline_falls_back_to_detection(self):
        doc = FakeDocument(
            [page_with_header("Abstract"), "text"],
            outline=[("Ignored", 1)],
            broken_outline=True,
        )
        sections = resolver_for().resolve_outline(doc)
        assert [s.title for s in sections] == ["Abstract"]

    def test_failing_page_skipped(self):
        doc = FakeDocument(
            [page_with_header("Introduction"), page_with_header("Results")],
            failing_pages=(1,),
        )
        sections = resolver_for().detect_sections_from_text(doc)
        assert [s.title for s in sections] == ["Results"]


class TestChapters:
    """Tests for chapter matching and detection."""

    def test_match_chapters(self):
        outline = [
            PDFSection(title="1 Introduction", start_page=1, end_page=3),
            PDFSection(title="2 Training", start_page=4, end_page=6),
        ]
        matched = resolver_for().match_chapters(outline, ["training"])
        assert [s.title for s in matched] == ["2 Training"]

    def test_detect_chapters_in_text(self):
        pages = ["plain body text"] * 20
        pages[3] = page_with_header("Chapter 2 Training")
        chapters = resolver_for().detect_chapters_in_text(FakeDocument(pages), ["Training"])
        assert len(chapters) == 1
        assert chapters[0].start_page == 4
        assert chapters[0].end_page == 14
        assert chapters[0].confidence == 0.7

    def test_detected_chapter_clamped_to_document(self):
        pages = ["plain body text"] * 8
        pages[5] = page_with_header("Chapter 4 Evaluation")
        chapters = resolver_for().detect_chapters_in_text(FakeDocument(pages), ["evaluation"])
        assert chapters[0].start_page == 6
        assert chapters[0].end_page == 8

    def test_custom_window(self):
        pages = ["plain body text"] * 20
        pages[0] = page_with_header("Chapter 1 Setup")
        resolver = resolver_for(HeuristicsConfig(chapter_window=2))
        chapters = resolver.detect_chapters_in_text(FakeDocument(pages), ["setup"])
        assert chapters[0].end_page == 3
