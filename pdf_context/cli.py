"""
PDF Context command line.

Extracts bounded text from a PDF (or a markdown note with embedded PDFs)
and prints it, or runs the HTTP API.

Usage:
    pdf-context papers/attention.pdf --search "self-attention" --max-pages 5
    pdf-context book.pdf --chapter "Introduction"
    pdf-context report.pdf --pages 3-7
    pdf-context notes/reading.md --root ~/vault
    pdf-context --serve --port 8010

Environment:
    PDF_CONTEXT_ROOT: Root directory for relative paths (default: .)
    PDF_CONTEXT_PROJECT: Project id; enables the per-project cache
"""

import argparse
import logging
import os
import re
import sys

from dotenv import load_dotenv
from pydantic import ValidationError
import uvicorn

from .app import create_app
from .config import ServiceConfig
from .exceptions import ExtractionError
from .logging_config import setup_logging
from .models import PageRange, ProcessingOptions
from .service import ExtractionService


def parse_page_range(value: str) -> PageRange:
    match = re.fullmatch(r"\s*(\d+)\s*-\s*(\d+)\s*", value)
    if not match:
        raise argparse.ArgumentTypeError(f"invalid page range {value!r}, expected START-END")
    return PageRange(start=int(match.group(1)), end=int(match.group(2)))


def build_options(args: argparse.Namespace) -> ProcessingOptions | None:
    fields = {
        "page_range": args.pages,
        "max_pages": args.max_pages,
        "max_characters": args.max_chars,
        "search_terms": args.search,
        "chapters": args.chapter,
        "context_window": args.context_window,
        "min_relevance_score": args.min_relevance,
        "extract_images": True if args.extract_images else None,
        "preserve_structure": True if args.preserve_structure else None,
    }
    fields = {k: v for k, v in fields.items() if v is not None}
    return ProcessingOptions(**fields) if fields else None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Selective, cached PDF text extraction for LLM context",
    )
    parser.add_argument("path", nargs="?", help="File path relative to --root")
    parser.add_argument("--root", default=None,
                        help="Root directory (default: $PDF_CONTEXT_ROOT or .)")
    parser.add_argument("--project", default=None,
                        help="Project id (default: $PDF_CONTEXT_PROJECT)")
    parser.add_argument("--pages", type=parse_page_range, help="Page range, e.g. 3-7")
    parser.add_argument("--search", action="append", help="Search term (repeatable)")
    parser.add_argument("--chapter", action="append", help="Chapter name (repeatable)")
    parser.add_argument("--max-pages", type=int, help="Maximum pages (default: 50)")
    parser.add_argument("--max-chars", type=int, help="Maximum characters (default: 100000)")
    parser.add_argument("--context-window", type=int,
                        help="Neighbouring pages around search hits (default: 2)")
    parser.add_argument("--min-relevance", type=float,
                        help="Minimum relevance score (default: 0.01)")
    parser.add_argument("--extract-images", action="store_true",
                        help="Mark pages that contain images")
    parser.add_argument("--preserve-structure", action="store_true",
                        help="Render headers, lists, tables and footers with markup")
    parser.add_argument("--embed", help="Inline options, e.g. 'pages:1-5,max:10'")
    parser.add_argument("--clear-cache", action="store_true", help="Clear the cache and exit")
    parser.add_argument("--serve", action="store_true", help="Run the FastAPI server")
    parser.add_argument("--host", default="127.0.0.1", help="Server host")
    parser.add_argument("--port", type=int, default=8010, help="Server port")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)
    logger = logging.getLogger("pdf_context.cli")

    config = ServiceConfig(
        root_dir=args.root or os.environ.get("PDF_CONTEXT_ROOT", "."),
        project_id=args.project or os.environ.get("PDF_CONTEXT_PROJECT"),
    )

    if args.serve:
        uvicorn.run(create_app(config), host=args.host, port=args.port)
        return 0

    service = ExtractionService(config)

    if args.clear_cache:
        service.clear_cache()
        print("Cache cleared")
        return 0

    if not args.path:
        parser.error("Provide a path, --clear-cache or --serve")

    try:
        options = build_options(args)
        content = service.extract(args.path, options, args.embed)
    except ValidationError as e:
        logger.error(f"Invalid options: {e}")
        return 2
    except ExtractionError as e:
        logger.error(str(e))
        return 1

    print(content)
    return 0


if __name__ == "__main__":
    sys.exit(main())
