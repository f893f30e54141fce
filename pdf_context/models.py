"""
Data Models for Selective PDF Extraction.

This module defines the data structures that flow through one extraction
call, the persisted cache entry, and the tunable heuristics:

1. OPTIONS:   ProcessingOptions decides which strategy runs and its budgets
2. PARSE:     positioned text items → TextSection[] + PageMetadata (ParsedPage)
3. SELECT:    ParsedPage → PageContent (with relevance) → bounded page subset
4. FORMAT:    PageContent[] → one string with page/section markers
5. CACHE:     CacheEntry blobs keyed by document identity + options

Architecture:
    bytes + ProcessingOptions
              ↓
    [Parse]   → ParsedPage per page
              ↓
    [Score]   → PageContent (relevance)        [Outline] → PDFSection[]
              ↓                                     ↓
    [Select]  → PageContent[] (ascending page numbers)
              ↓
    [Format]  → str  → CacheEntry

Design Principles:
    - Pydantic v2 for validation and serialization
    - Immutable value objects (frozen=True) for parser output
    - Every option optional; unset means "use the configured default"
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


# =============================================================================
# ENUMS
# =============================================================================


class SectionType(str, Enum):
    """
    Classification of a contiguous run of page text.

    HEADER: chapter/section markers, all-caps lines, bold large text
    PARAGRAPH: default body text
    LIST: bullet or numbered items
    TABLE: tab- or space-aligned rows
    FOOTER: text near the bottom edge of the page
    """

    HEADER = "header"
    PARAGRAPH = "paragraph"
    LIST = "list"
    TABLE = "table"
    FOOTER = "footer"


# =============================================================================
# PROCESSING OPTIONS
# =============================================================================


class PageRange(BaseModel):
    """Inclusive, 1-based page range as requested by the caller."""

    start: int = Field(..., description="First page (1-based)")
    end: int = Field(..., description="Last page (1-based, inclusive)")

    model_config = {"frozen": True}


class ProcessingOptions(BaseModel):
    """
    Options for one extraction request.

    Strategy priority: chapters > search_terms > page_range > smart-auto.
    Fields left at None fall back to the values in HeuristicsConfig.
    Unknown keys are rejected.
    """

    page_range: Optional[PageRange] = Field(
        None,
        description="Explicit page range to extract"
    )
    max_pages: Optional[int] = Field(
        None,
        ge=1,
        description="Maximum number of pages in the result (default 50)"
    )
    max_characters: Optional[int] = Field(
        None,
        ge=1,
        description="Character budget for sequential extraction (default 100000)"
    )
    search_terms: Optional[list[str]] = Field(
        None,
        description="Terms used to rank pages by relevance"
    )
    chapters: Optional[list[str]] = Field(
        None,
        description="Chapter names to extract"
    )
    context_window: Optional[int] = Field(
        None,
        ge=0,
        description="Neighbouring pages to include around a relevant page (default 2)"
    )
    min_relevance_score: Optional[float] = Field(
        None,
        ge=0.0,
        description="Minimum relevance for a page to be selected (default 0.01)"
    )
    extract_images: Optional[bool] = Field(
        None,
        description="Check pages for embedded images"
    )
    preserve_structure: Optional[bool] = Field(
        None,
        description="Render headers, lists, tables and footers with markup"
    )

    model_config = {"extra": "forbid"}

    def is_empty(self) -> bool:
        """True when no option is set."""
        return not self.model_dump(exclude_none=True)

    def cache_fragment(self) -> str:
        """Compact JSON of the set options, used as a cache key suffix."""
        return json.dumps(
            self.model_dump(exclude_none=True),
            ensure_ascii=False,
            separators=(",", ":"),
        )


# =============================================================================
# PARSER OUTPUT
# =============================================================================


class Position(BaseModel):
    """Anchor position of a section in PDF user space (y grows upwards)."""

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    model_config = {"frozen": True}


class TextSection(BaseModel):
    """A classified, contiguous run of text on one page."""

    type: SectionType
    content: str
    level: Optional[int] = Field(
        None,
        description="Heading level for header sections"
    )
    position: Position = Field(default_factory=Position)

    model_config = {"frozen": True}


class PageMetadata(BaseModel):
    """Statistics derived from a page's rendered content."""

    word_count: int = 0
    avg_word_length: float = 0.0
    has_numbers: bool = False
    has_references: bool = False
    text_density: float = 0.0

    model_config = {"frozen": True}


class ParsedPage(BaseModel):
    """Structural parse of one page, before relevance is known."""

    content: str
    sections: list[TextSection] = Field(default_factory=list)
    has_images: bool = False
    metadata: PageMetadata = Field(default_factory=PageMetadata)


class PageContent(BaseModel):
    """A page selected for output."""

    page_num: int = Field(..., ge=1, description="Page number (1-indexed)")
    content: str
    relevance: float = Field(
        1.0,
        description="Relevance score; 1.0 when the page was not ranked"
    )
    sections: list[TextSection] = Field(default_factory=list)
    has_images: bool = False
    metadata: PageMetadata = Field(default_factory=PageMetadata)

    @classmethod
    def from_parsed(
        cls, page_num: int, parsed: ParsedPage, relevance: float = 1.0
    ) -> "PageContent":
        return cls(
            page_num=page_num,
            content=parsed.content,
            relevance=relevance,
            sections=parsed.sections,
            has_images=parsed.has_images,
            metadata=parsed.metadata,
        )


class PDFSection(BaseModel):
    """
    A titled page range, from the native outline or detected headers.

    Confidence: 1.0 native outline, 0.8 detected headers,
    0.7 fuzzy chapter-name detection.
    """

    title: str
    start_page: int
    end_page: int
    content: str = ""
    confidence: float = Field(1.0, ge=0.0, le=1.0)


# =============================================================================
# CACHE
# =============================================================================


class CacheEntry(BaseModel):
    """Persisted result of one extraction."""

    response: str
    elapsed_time_ms: float = 0.0
    options: Optional[ProcessingOptions] = None


# =============================================================================
# CONFIGURATION
# =============================================================================


class HeuristicsConfig(BaseModel):
    """
    Tuned constants of the extraction pipeline.

    The values are empirical; none of them is derived from anything deeper.
    """

    # Budgets
    default_max_pages: int = Field(50, ge=1)
    default_max_characters: int = Field(100_000, ge=1)
    default_context_window: int = Field(2, ge=0)
    default_min_relevance: float = Field(0.01, ge=0.0)

    # Layout classification
    vertical_gap: float = Field(
        20.0,
        description="Vertical distance (layout units) that forces a new section"
    )
    indent_shift: float = Field(
        50.0,
        description="Horizontal distance (layout units) that forces a new section"
    )
    header_font_size: float = Field(
        14.0,
        description="Bold text above this font size is a header"
    )
    footer_y: float = Field(
        50.0,
        description="Text whose baseline is below this y is a footer"
    )
    default_font_size: float = 12.0

    # Chapter matching
    fuzzy_threshold: float = Field(0.6, ge=0.0, le=1.0)
    sample_pages: int = Field(5, ge=1)
    outline_scan_pages: int = Field(20, ge=1)
    chapter_scan_pages: int = Field(50, ge=1)
    chapter_window: int = Field(
        10,
        ge=0,
        description="Pages assumed for a chapter found by header scanning"
    )
    chapter_fallback_max_pages: int = Field(20, ge=1)

    # File-size based defaults for un-optioned requests
    medium_file_mb: float = 10.0
    large_file_mb: float = 50.0
    medium_file_max_pages: int = 50
    medium_file_max_characters: int = 100_000
    large_file_max_pages: int = 20
    large_file_max_characters: int = 50_000

    @model_validator(mode="after")
    def _check_size_thresholds(self) -> "HeuristicsConfig":
        if self.medium_file_mb > self.large_file_mb:
            raise ValueError(
                f"medium_file_mb ({self.medium_file_mb}) must not exceed "
                f"large_file_mb ({self.large_file_mb})"
            )
        return self


# =============================================================================
# SERVICE PAYLOADS
# =============================================================================


class ExtractRequest(BaseModel):
    path: str = Field(..., min_length=1, description="File path relative to the root directory")
    options: Optional[ProcessingOptions] = None
    embed: Optional[str] = Field(
        None,
        description="Inline options string, e.g. 'pages:1-5,max:10'"
    )


class ExtractResponse(BaseModel):
    path: str
    content: str
    characters: int
