"""
Structural page parsing.

Turns a page's positioned text items into typed sections (header, paragraph,
list, table, footer), renders them to text and derives page statistics.
Classification is a cascade of regex and position checks; the order of the
checks decides the outcome and must stay as it is.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional

from .document import TextItem
from .models import (
    HeuristicsConfig,
    PageMetadata,
    ParsedPage,
    Position,
    ProcessingOptions,
    SectionType,
    TextSection,
)

logger = logging.getLogger(__name__)

# Common section header patterns for academic papers, books, reports
SECTION_PATTERNS = [
    re.compile(r"^(?:chapter|section|part)\s+\d+", re.IGNORECASE),
    re.compile(r"^\d+\.?\s+[A-Z][^.]*$"),
    re.compile(r"^[A-Z][A-Z\s]{2,}$"),
    re.compile(r"^(?:introduction|conclusion|abstract|references|bibliography|appendix)", re.IGNORECASE),
    re.compile(r"^(?:method|results|discussion|related work|background)", re.IGNORECASE),
]

LIST_PATTERNS = [
    re.compile("^[-*•]\\s"),
    re.compile(r"^\d+[.)]\s"),
]

TABLE_PATTERN = re.compile(r"\s{4,}")
REFERENCE_PATTERN = re.compile(r"\[\d+\]|\(\d{4}\)|et al\.")
CHAPTER_MARKER = re.compile(r"^(?:chapter|section|part)\s+\d+", re.IGNORECASE)
NUMBERED_HEADING = re.compile(r"^(\d+(?:\.\d+)*)\.?\s")


def matches_section_pattern(text: str) -> bool:
    """True if the text looks like a section header by wording alone."""
    return any(pattern.search(text) for pattern in SECTION_PATTERNS)


class PageParser:
    def __init__(self, heuristics: Optional[HeuristicsConfig] = None) -> None:
        self.heuristics = heuristics or HeuristicsConfig()

    def parse_page(
        self,
        items: Iterable[TextItem],
        options: Optional[ProcessingOptions] = None,
        has_images: bool = False,
    ) -> ParsedPage:
        options = options or ProcessingOptions()
        sections = self.parse_sections(items)
        content = self.combine_sections(sections, bool(options.preserve_structure))
        return ParsedPage(
            content=content,
            sections=sections,
            has_images=has_images,
            metadata=self.analyze_metadata(content),
        )

    def parse_sections(self, items: Iterable[TextItem]) -> list[TextSection]:
        sections: list[TextSection] = []
        current_type: Optional[SectionType] = None
        current_position: Optional[Position] = None
        current_level: Optional[int] = None
        parts: list[str] = []

        def flush() -> None:
            text = " ".join(parts).strip()
            if current_type is not None and text:
                sections.append(
                    TextSection(
                        type=current_type,
                        content=text,
                        level=current_level,
                        position=current_position,
                    )
                )

        for item in items:
            text = (item.text or "").strip()
            if not text:
                continue

            position = Position(x=item.x, y=item.y, width=item.width, height=item.height)
            section_type = self.detect_section_type(text, item)

            if (
                current_type is None
                or section_type != current_type
                or self.is_new_section(position, current_position)
            ):
                flush()
                current_type = section_type
                current_position = position
                current_level = self._heading_level(text) if section_type == SectionType.HEADER else None
                parts = [text]
            else:
                parts.append(text)

        flush()
        return sections

    def detect_section_type(self, text: str, item: TextItem) -> SectionType:
        font_size = item.font_size or self.heuristics.default_font_size
        is_all_caps = text == text.upper() and len(text) > 2

        if (
            matches_section_pattern(text)
            or (item.is_bold and font_size > self.heuristics.header_font_size)
            or (is_all_caps and len(text) < 100)
        ):
            return SectionType.HEADER

        if any(pattern.search(text) for pattern in LIST_PATTERNS):
            return SectionType.LIST

        if item.y < self.heuristics.footer_y:
            return SectionType.FOOTER

        if "\t" in text or TABLE_PATTERN.search(text):
            return SectionType.TABLE

        return SectionType.PARAGRAPH

    def is_new_section(self, position: Position, anchor: Optional[Position]) -> bool:
        if anchor is None:
            return True
        if abs(position.y - anchor.y) > self.heuristics.vertical_gap:
            return True
        if abs(position.x - anchor.x) > self.heuristics.indent_shift:
            return True
        return False

    @staticmethod
    def combine_sections(sections: list[TextSection], preserve_structure: bool = False) -> str:
        if not preserve_structure:
            return re.sub(r"\s+", " ", " ".join(s.content for s in sections)).strip()

        rendered = []
        for section in sections:
            if section.type == SectionType.HEADER:
                rendered.append(f"\n\n## {section.content}\n")
            elif section.type == SectionType.LIST:
                rendered.append(f"\n- {section.content}")
            elif section.type == SectionType.TABLE:
                rendered.append(f"\n\n```\n{section.content}\n```\n")
            elif section.type == SectionType.FOOTER:
                rendered.append(f"\n---\n{section.content}\n---\n")
            else:
                rendered.append(f"\n{section.content}")
        return "".join(rendered).strip()

    @staticmethod
    def analyze_metadata(content: str) -> PageMetadata:
        words = content.split()
        word_count = len(words)
        avg_word_length = sum(len(w) for w in words) / word_count if word_count else 0.0
        return PageMetadata(
            word_count=word_count,
            avg_word_length=avg_word_length,
            has_numbers=any(c.isdigit() for c in content),
            has_references=bool(REFERENCE_PATTERN.search(content)),
            text_density=word_count / max(len(content), 1),
        )

    @staticmethod
    def _heading_level(text: str) -> Optional[int]:
        if CHAPTER_MARKER.match(text):
            return 1
        numbered = NUMBERED_HEADING.match(text)
        if numbered:
            return numbered.group(1).count(".") + 1
        return None
