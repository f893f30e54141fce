"""
PDF Context - Selective PDF Text Extraction for LLM Context

Turns PDFs into bounded, relevance-ordered plain text that fits an LLM
context window. Only the pages that matter are extracted, and results are
cached on disk keyed by file identity and processing options.

Features:
- Page-range, search-term, chapter and smart (outline-driven) extraction
- Heuristic page layout analysis (headers, lists, tables, footers)
- Relevance scoring with context pages around search hits
- Native PDF outline with text-based section detection as fallback
- Persistent per-file and per-project result caches
- Inline embed options for PDFs referenced from markdown notes

Quick Start:
    from pdf_context import ExtractionService, ProcessingOptions, ServiceConfig

    service = ExtractionService(ServiceConfig(root_dir="~/papers"))

    # Full text (cached)
    text = service.extract("attention.pdf")

    # Only the pages about a topic, with one neighbouring page each side
    options = ProcessingOptions(search_terms=["self-attention"], max_pages=5,
                                context_window=1)
    text = service.extract("attention.pdf", options)

Environment:
    PDF_CONTEXT_ROOT: Root directory used by the CLI (default: .)
    PDF_CONTEXT_PROJECT: Project id used by the CLI
"""

__version__ = "1.0.0"

# Service facade
from .service import ExtractionService
from .config import ServiceConfig

# Extraction engine
from .extractor import SelectiveExtractor
from .page_parser import PageParser
from .outline import OutlineResolver, fuzzy_match, levenshtein_distance
from .relevance import score_page
from .formatter import format_page_header, format_pages, format_section

# Documents and storage
from .document import FitzDocument, OutlineEntry, PDFDocument, TextItem, open_document
from .storage import LocalFileSystem, SourceFile
from .cache import PDFCache, ProjectContextCache

# File parsers
from .parsers import (
    FileParser,
    FileParserManager,
    MarkdownParser,
    PDFParser,
    ProjectPDFParser,
)
from .embeds import has_embedded_pdfs, parse_embed_options, process_embedded_pdfs

# Data models
from .models import (
    # Enums
    SectionType,
    # Options
    PageRange,
    ProcessingOptions,
    HeuristicsConfig,
    # Page models
    Position,
    TextSection,
    PageMetadata,
    ParsedPage,
    PageContent,
    PDFSection,
    CacheEntry,
)

# Exceptions
from .exceptions import (
    ExtractionError,
    PDFError,
    PDFNotFoundError,
    PDFCorruptedError,
    PageExtractionError,
    OutlineError,
    CacheError,
    SourceNotFoundError,
    UnsupportedFileTypeError,
)

__all__ = [
    "__version__",
    "ExtractionService",
    "ServiceConfig",
    "SelectiveExtractor",
    "PageParser",
    "OutlineResolver",
    "fuzzy_match",
    "levenshtein_distance",
    "score_page",
    "format_page_header",
    "format_pages",
    "format_section",
    "FitzDocument",
    "OutlineEntry",
    "PDFDocument",
    "TextItem",
    "open_document",
    "LocalFileSystem",
    "SourceFile",
    "PDFCache",
    "ProjectContextCache",
    "FileParser",
    "FileParserManager",
    "MarkdownParser",
    "PDFParser",
    "ProjectPDFParser",
    "has_embedded_pdfs",
    "parse_embed_options",
    "process_embedded_pdfs",
    "SectionType",
    "PageRange",
    "ProcessingOptions",
    "HeuristicsConfig",
    "Position",
    "TextSection",
    "PageMetadata",
    "ParsedPage",
    "PageContent",
    "PDFSection",
    "CacheEntry",
    "ExtractionError",
    "PDFError",
    "PDFNotFoundError",
    "PDFCorruptedError",
    "PageExtractionError",
    "OutlineError",
    "CacheError",
    "SourceNotFoundError",
    "UnsupportedFileTypeError",
]
