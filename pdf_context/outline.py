"""
Outline and chapter resolution.

Builds titled page ranges (PDFSection) for a document:

1. Native outline: top-level bookmarks, each running until the page before
   the next bookmark (confidence 1.0)
2. Detected headers: header sections of the first pages matching the
   section pattern library (confidence 0.8)
3. Fuzzy chapter detection: headers matching a requested chapter name,
   with an assumed fixed chapter length (confidence 0.7)

Requested chapter names are matched against titles by containment or
normalized Levenshtein similarity.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional

from .document import PDFDocument
from .exceptions import OutlineError, format_error_chain
from .models import HeuristicsConfig, ParsedPage, PDFSection, SectionType
from .page_parser import matches_section_pattern

logger = logging.getLogger(__name__)

PageLoader = Callable[[PDFDocument, int], Optional[ParsedPage]]

NATIVE_CONFIDENCE = 1.0
DETECTED_CONFIDENCE = 0.8
FUZZY_CONFIDENCE = 0.7


def levenshtein_distance(str1: str, str2: str) -> int:
    """Edit distance with unit costs for insertion, deletion and substitution."""
    previous = list(range(len(str1) + 1))
    for j in range(1, len(str2) + 1):
        current = [j] + [0] * len(str1)
        for i in range(1, len(str1) + 1):
            substitution_cost = 0 if str1[i - 1] == str2[j - 1] else 1
            current[i] = min(
                current[i - 1] + 1,
                previous[i] + 1,
                previous[i - 1] + substitution_cost,
            )
        previous = current
    return previous[len(str1)]


def fuzzy_match(text1: str, text2: str, threshold: float = 0.6) -> bool:
    t1 = text1.lower().strip()
    t2 = text2.lower().strip()

    if t1 in t2 or t2 in t1:
        return True

    max_len = max(len(t1), len(t2))
    similarity = 1 - levenshtein_distance(t1, t2) / max_len
    return similarity >= threshold


class OutlineResolver:
    """
    Resolves document outlines and matches chapter names.

    Usage:
        resolver = OutlineResolver(page_loader=extractor.extract_page)
        outline = resolver.resolve_outline(doc)
        chapters = resolver.match_chapters(outline, ["Introduction"])
    """

    def __init__(
        self,
        page_loader: PageLoader,
        heuristics: Optional[HeuristicsConfig] = None,
    ) -> None:
        self.page_loader = page_loader
        self.heuristics = heuristics or HeuristicsConfig()

    def resolve_outline(self, doc: PDFDocument) -> list[PDFSection]:
        """Native outline if present, otherwise sections detected from headers."""
        sections = self.native_outline(doc)
        if sections:
            return sections
        logger.info("No native outline, detecting sections from headers")
        return self.detect_sections_from_text(doc)

    def native_outline(self, doc: PDFDocument) -> list[PDFSection]:
        try:
            return self._read_native_outline(doc)
        except OutlineError as e:
            logger.error(f"Error extracting PDF outline:\n{format_error_chain(e)}")
            return []

    def _read_native_outline(self, doc: PDFDocument) -> list[PDFSection]:
        try:
            entries = doc.get_outline()
        except Exception as e:
            raise OutlineError(original_error=e) from e
        if not entries:
            return []

        start_pages = [self._page_from_dest(doc, entry.dest) for entry in entries]
        sections = []
        for i, entry in enumerate(entries):
            end_page = start_pages[i + 1] - 1 if i + 1 < len(entries) else doc.num_pages
            sections.append(
                PDFSection(
                    title=entry.title,
                    start_page=start_pages[i],
                    end_page=end_page,
                    confidence=NATIVE_CONFIDENCE,
                )
            )
        logger.info(f"Native outline has {len(sections)} entries")
        return sections

    def detect_sections_from_text(self, doc: PDFDocument) -> list[PDFSection]:
        sections: list[PDFSection] = []
        current: Optional[PDFSection] = None
        scan_pages = min(self.heuristics.outline_scan_pages, doc.num_pages)

        for page_num in range(1, scan_pages + 1):
            parsed = self.page_loader(doc, page_num)
            if parsed is None:
                continue

            for header in self._headers(parsed):
                if not matches_section_pattern(header):
                    continue
                if current is not None:
                    sections.append(current.model_copy(update={"end_page": page_num - 1}))
                current = PDFSection(
                    title=header,
                    start_page=page_num,
                    end_page=doc.num_pages,
                    confidence=DETECTED_CONFIDENCE,
                )

        if current is not None:
            sections.append(current)

        logger.info(f"Detected {len(sections)} sections from headers")
        return sections

    def match_chapters(
        self, outline: Iterable[PDFSection], requested: list[str]
    ) -> list[PDFSection]:
        return [
            section
            for section in outline
            if any(self.fuzzy_match(section.title, name) for name in requested)
        ]

    def detect_chapters_in_text(
        self, doc: PDFDocument, requested: list[str]
    ) -> list[PDFSection]:
        detected: list[PDFSection] = []
        scan_pages = min(self.heuristics.chapter_scan_pages, doc.num_pages)

        for page_num in range(1, scan_pages + 1):
            parsed = self.page_loader(doc, page_num)
            if parsed is None:
                continue

            for header in self._headers(parsed):
                for name in requested:
                    if self.fuzzy_match(header, name):
                        detected.append(
                            PDFSection(
                                title=header,
                                start_page=page_num,
                                end_page=min(page_num + self.heuristics.chapter_window, doc.num_pages),
                                confidence=FUZZY_CONFIDENCE,
                            )
                        )

        logger.info(f"Detected {len(detected)} chapters by header scan")
        return detected

    def fuzzy_match(self, text1: str, text2: str) -> bool:
        return fuzzy_match(text1, text2, self.heuristics.fuzzy_threshold)

    @staticmethod
    def _headers(parsed: ParsedPage) -> list[str]:
        return [s.content for s in parsed.sections if s.type == SectionType.HEADER]

    @staticmethod
    def _page_from_dest(doc: PDFDocument, dest) -> int:
        try:
            return doc.get_page_index(dest) + 1
        except Exception as e:
            logger.debug(f"Unresolvable outline destination {dest!r}: {e}")
            return 1
