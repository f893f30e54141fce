"""
Selective PDF Extractor - Main Processing Engine

Bounded, relevance-aware text extraction for LLM context:
1. Chapter-based extraction (outline, detected headers, fuzzy chapter scan)
2. Search-based extraction (score every page, keep the best with context)
3. Explicit page ranges
4. Smart auto mode (section-aware, else sequential under page/char budgets)

Usage:
    from pdf_context import SelectiveExtractor, ProcessingOptions

    extractor = SelectiveExtractor()
    text = extractor.extract_text(
        raw_bytes,
        ProcessingOptions(search_terms=["transformer"], max_pages=10),
    )
"""

import logging
import re
import time
from typing import Callable, Optional

from .document import PDFDocument, open_document
from .exceptions import ExtractionError
from .formatter import format_pages, format_section
from .models import (
    HeuristicsConfig,
    PageContent,
    ParsedPage,
    PDFSection,
    ProcessingOptions,
)
from .outline import OutlineResolver
from .page_parser import PageParser
from .relevance import score_page

logger = logging.getLogger(__name__)

PAGE_ERROR_MARKER = "[Error: Could not extract text from this page]"
NO_TEXT_MESSAGE = "[No text content found in PDF - may be image-based or encrypted]"

DocumentOpener = Callable[[bytes, Optional[str]], PDFDocument]


def _setting(value, default):
    return default if value is None else value


class SelectiveExtractor:
    """
    Chooses an extraction strategy from ProcessingOptions and produces
    one bounded string per document.

    Strategy priority: chapters > search_terms > page_range > smart auto.
    Pages that fail to parse are skipped; they never abort a document.
    """

    def __init__(
        self,
        heuristics: Optional[HeuristicsConfig] = None,
        opener: DocumentOpener = open_document,
    ):
        """
        Initialize the extractor.

        Args:
            heuristics: Tuned thresholds and default budgets
            opener: Callable turning raw bytes into a PDFDocument
        """
        self.heuristics = heuristics or HeuristicsConfig()
        self.opener = opener
        self.page_parser = PageParser(self.heuristics)

    # -------------------------------------------------------------------------
    # Entry points
    # -------------------------------------------------------------------------

    def extract_text(
        self,
        raw_bytes: bytes,
        options: Optional[ProcessingOptions] = None,
        name: Optional[str] = None,
    ) -> str:
        """
        Extract bounded text from a PDF.

        Args:
            raw_bytes: Complete PDF file contents
            options: Processing options (strategy and budgets)
            name: Document name for log and error messages

        Returns:
            Formatted extraction result

        Raises:
            PDFCorruptedError: If the document cannot be opened
            ExtractionError: If a strategy fails as a whole
        """
        options = options or ProcessingOptions()
        start_time = time.time()
        logger.info(f"Starting selective PDF extraction with options: {options.cache_fragment()}")

        with self.opener(raw_bytes, name) as doc:
            try:
                text = self.extract_from_document(doc, options)
            except ExtractionError:
                raise
            except Exception as e:
                raise ExtractionError("Selective PDF parsing failed", details=str(e)) from e

        logger.info(
            f"Extracted {len(text)} characters in {time.time() - start_time:.2f}s"
        )
        return text

    def extract_from_document(self, doc: PDFDocument, options: ProcessingOptions) -> str:
        if options.chapters:
            return self.extract_by_chapters(doc, options.chapters, options)

        if options.search_terms:
            return self.extract_by_search(doc, options.search_terms, options)

        if options.page_range:
            return self.extract_by_page_range(doc, options)

        return self.extract_smart(doc, options)

    def extract_full_text(self, raw_bytes: bytes, name: Optional[str] = None) -> str:
        """
        Extract every page without structure analysis or budgets.

        A page that cannot be read is replaced by an inline error marker.
        """
        logger.info("Starting full PDF text extraction")
        parts: list[str] = []

        with self.opener(raw_bytes, name) as doc:
            for page_num in range(1, doc.num_pages + 1):
                try:
                    items = doc.get_text_items(page_num)
                    page_text = " ".join(i.text for i in items if i.text and i.text.strip())
                    page_text = re.sub(r"\s+", " ", page_text).strip()
                except Exception as e:
                    logger.error(f"Error extracting text from page {page_num}: {e}")
                    parts.append(f"\n\n--- Page {page_num} ---\n{PAGE_ERROR_MARKER}")
                    continue

                if page_text:
                    parts.append(f"\n\n--- Page {page_num} ---\n{page_text}")
                logger.debug(f"Extracted text from page {page_num}: {len(page_text)} characters")

        full_text = "".join(parts).strip()
        if not full_text:
            return NO_TEXT_MESSAGE

        logger.info(f"Successfully extracted {len(full_text)} characters from PDF")
        return full_text

    # -------------------------------------------------------------------------
    # Page access
    # -------------------------------------------------------------------------

    def extract_page(
        self,
        doc: PDFDocument,
        page_num: int,
        options: Optional[ProcessingOptions] = None,
    ) -> Optional[ParsedPage]:
        """Parse one page; None (logged) if the page cannot be read."""
        options = options or ProcessingOptions()
        try:
            items = doc.get_text_items(page_num)
            has_images = self._has_images(doc, page_num) if options.extract_images else False
            return self.page_parser.parse_page(items, options, has_images=has_images)
        except Exception as e:
            logger.error(f"Error extracting structured text from page {page_num}: {e}")
            return None

    def extract_pages(
        self,
        doc: PDFDocument,
        start_page: int,
        end_page: int,
        options: ProcessingOptions,
    ) -> list[PageContent]:
        pages = []
        for page_num in range(max(1, start_page), min(end_page, doc.num_pages) + 1):
            parsed = self.extract_page(doc, page_num, options)
            if parsed is not None:
                pages.append(PageContent.from_parsed(page_num, parsed))
        return pages

    # -------------------------------------------------------------------------
    # Strategies
    # -------------------------------------------------------------------------

    def extract_by_page_range(self, doc: PDFDocument, options: ProcessingOptions) -> str:
        start = max(1, options.page_range.start)
        end = min(options.page_range.end, doc.num_pages)
        logger.info(f"Extracting pages {start} to {end}")

        pages = self.extract_pages(doc, start, end, options)
        return format_pages(pages, options)

    def extract_by_search(
        self,
        doc: PDFDocument,
        search_terms: list[str],
        options: ProcessingOptions,
    ) -> str:
        logger.info(f"Searching pages for terms: {', '.join(search_terms)}")

        max_pages = _setting(options.max_pages, self.heuristics.default_max_pages)
        context_window = _setting(options.context_window, self.heuristics.default_context_window)
        min_relevance = _setting(options.min_relevance_score, self.heuristics.default_min_relevance)

        # First pass: score every page, in page order
        analyzed: dict[int, PageContent] = {}
        for page_num in range(1, doc.num_pages + 1):
            parsed = self.extract_page(doc, page_num, options)
            if parsed is None:
                continue
            analyzed[page_num] = PageContent.from_parsed(
                page_num, parsed, relevance=score_page(parsed, search_terms)
            )

        # Stable sort keeps ascending page order among equal scores
        ranked = sorted(
            (page for page in analyzed.values() if page.relevance >= min_relevance),
            key=lambda page: page.relevance,
            reverse=True,
        )

        selected = self.select_pages_with_context(
            ranked, analyzed, max_pages, context_window, doc.num_pages
        )
        logger.info(
            f"Selected {len(selected)} pages with context ({len(ranked)} initially relevant)"
        )
        return format_pages(selected, options)

    @staticmethod
    def select_pages_with_context(
        ranked: list[PageContent],
        available: dict[int, PageContent],
        max_pages: int,
        context_window: int,
        num_pages: int,
    ) -> list[PageContent]:
        """
        Expand the top-ranked pages by their neighbours.

        Args:
            ranked: Relevant pages, best first
            available: Every successfully parsed page by page number
            max_pages: Page budget, applied before and after expansion
            context_window: Neighbours to add on each side
            num_pages: Document length

        Returns:
            Selected pages in ascending page order
        """
        selected: set[int] = set()
        for page in ranked[:max_pages]:
            for offset in range(-context_window, context_window + 1):
                page_num = page.page_num + offset
                if 1 <= page_num <= num_pages:
                    selected.add(page_num)

        page_nums = sorted(selected)[:max_pages]
        return [available[n] for n in page_nums if n in available]

    def extract_by_chapters(
        self,
        doc: PDFDocument,
        chapters: list[str],
        options: ProcessingOptions,
    ) -> str:
        logger.info(f"Extracting chapters: {', '.join(chapters)}")
        resolver = self._resolver(options)

        outline = resolver.resolve_outline(doc)
        matching = resolver.match_chapters(outline, chapters)
        if matching:
            logger.info(f"Found {len(matching)} matching chapters in outline")
            return self._extract_sections(doc, matching, options)

        logger.info("No matching chapters in outline, scanning headers for chapter names")
        detected = resolver.detect_chapters_in_text(doc, chapters)
        if detected:
            return self._extract_sections(doc, detected, options)

        logger.info("No chapters found, falling back to search")
        fallback = options.model_copy(
            update={"max_pages": self.heuristics.chapter_fallback_max_pages}
        )
        return self.extract_by_search(doc, chapters, fallback)

    def extract_smart(self, doc: PDFDocument, options: ProcessingOptions) -> str:
        max_pages = _setting(options.max_pages, self.heuristics.default_max_pages)
        max_chars = _setting(options.max_characters, self.heuristics.default_max_characters)
        logger.info(
            f"Smart extraction: processing up to {max_pages} pages or {max_chars} characters"
        )

        resolver = self._resolver(options)
        native = resolver.native_outline(doc)

        sample_pages = min(self.heuristics.sample_pages, doc.num_pages)
        total_length = 0
        for page_num in range(1, sample_pages + 1):
            parsed = self.extract_page(doc, page_num, options)
            if parsed is not None:
                total_length += len(parsed.content)
        avg_page_length = total_length / sample_pages if sample_pages else 0.0
        logger.info(
            f"Document structure: outline={bool(native)}, "
            f"average page length={avg_page_length:.0f} characters"
        )

        key_sections = native or resolver.detect_sections_from_text(doc)
        if key_sections:
            logger.info(f"Found {len(key_sections)} key sections, using section extraction")
            return self.extract_by_sections(doc, key_sections, max_pages, options)

        return self.extract_with_limits(doc, max_pages, max_chars, options)

    def extract_by_sections(
        self,
        doc: PDFDocument,
        sections: list[PDFSection],
        max_pages: int,
        options: ProcessingOptions,
    ) -> str:
        processed_pages = 0
        full_text = ""

        for section in sections:
            if processed_pages >= max_pages:
                break

            section_pages = section.end_page - section.start_page + 1
            pages_to_process = max(0, min(section_pages, max_pages - processed_pages))

            pages = self.extract_pages(
                doc,
                section.start_page,
                section.start_page + pages_to_process - 1,
                options,
            )
            full_text += format_section(section.title, pages, options)
            processed_pages += pages_to_process

        return full_text.strip()

    def extract_with_limits(
        self,
        doc: PDFDocument,
        max_pages: int,
        max_chars: int,
        options: ProcessingOptions,
    ) -> str:
        pages: list[PageContent] = []
        char_count = 0
        truncated = False
        actual_max_pages = min(max_pages, doc.num_pages)

        logger.info(f"Sequential extraction: {actual_max_pages} pages, {max_chars} characters")

        for page_num in range(1, actual_max_pages + 1):
            parsed = self.extract_page(doc, page_num, options)
            if parsed is None:
                continue

            page_size = len(parsed.content)
            if char_count + page_size > max_chars:
                logger.info(f"Reached character limit at page {page_num}")
                truncated = True
                break

            pages.append(PageContent.from_parsed(page_num, parsed))
            char_count += page_size

        result = format_pages(pages, options)
        if truncated:
            result += (
                f"\n\n[... Truncated at {max_chars} characters. "
                f"Total pages in PDF: {doc.num_pages} ...]"
            )
        return result

    # -------------------------------------------------------------------------
    # Internal methods
    # -------------------------------------------------------------------------

    def _extract_sections(
        self,
        doc: PDFDocument,
        sections: list[PDFSection],
        options: ProcessingOptions,
    ) -> str:
        full_text = ""
        for section in sections:
            pages = self.extract_pages(doc, section.start_page, section.end_page, options)
            full_text += format_section(section.title, pages, options)
        return full_text.strip()

    def _resolver(self, options: ProcessingOptions) -> OutlineResolver:
        return OutlineResolver(
            page_loader=lambda doc, page_num: self.extract_page(doc, page_num, options),
            heuristics=self.heuristics,
        )

    @staticmethod
    def _has_images(doc: PDFDocument, page_num: int) -> bool:
        try:
            return doc.has_images(page_num)
        except Exception as e:
            logger.debug(f"Image detection failed on page {page_num}: {e}")
            return False
