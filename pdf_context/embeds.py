"""
Inline processing options and embedded PDFs in markdown notes.

Notes can embed a PDF with per-embed options:

    ![[papers/attention.pdf|search:self-attention,max:5]]

Options are comma-separated `key:value` pairs. Recognised keys:
pages:S-E, search:term, chapter(s):name, max:N, chars|characters:N.
Unknown keys and malformed values are ignored.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

from .models import PageRange, ProcessingOptions
from .parsers import FileParserManager

logger = logging.getLogger(__name__)

PDF_EMBED_PATTERN = re.compile(r"!\[\[(.*?\.pdf)(?:\|([^|\]]+))?\]\]")
PAGE_RANGE_PATTERN = re.compile(r"(\d+)-(\d+)")


def _positive_int(value: str) -> Optional[int]:
    if not value.isdigit():
        return None
    number = int(value)
    return number if number > 0 else None


def parse_embed_options(options_string: Optional[str]) -> ProcessingOptions:
    """Parse an inline options string into ProcessingOptions."""
    if not options_string:
        return ProcessingOptions()

    fields: dict[str, Any] = {}
    for part in options_string.split(","):
        key, _, value = part.partition(":")
        key = key.strip().lower()
        value = value.strip()

        if key == "pages":
            match = PAGE_RANGE_PATTERN.search(value)
            if match:
                fields["page_range"] = PageRange(start=int(match.group(1)), end=int(match.group(2)))
        elif key == "search":
            if value:
                fields["search_terms"] = [value]
        elif key in ("chapter", "chapters"):
            if value:
                fields["chapters"] = [value]
        elif key == "max":
            number = _positive_int(value)
            if number is not None:
                fields["max_pages"] = number
        elif key in ("chars", "characters"):
            number = _positive_int(value)
            if number is not None:
                fields["max_characters"] = number
        else:
            logger.debug(f"Ignoring unknown embed option: {key!r}")

    return ProcessingOptions(**fields)


def has_embedded_pdfs(content: str) -> bool:
    return PDF_EMBED_PATTERN.search(content) is not None


def process_embedded_pdfs(content: str, manager: FileParserManager) -> str:
    """
    Replace PDF embeds in a note with the extracted PDF content.

    Args:
        content: Markdown note content
        manager: FileParserManager used to parse the embedded files

    Returns:
        Content with every resolvable embed expanded
    """
    for match in list(PDF_EMBED_PATTERN.finditer(content)):
        pdf_name = match.group(1)
        options_string = match.group(2)
        if not manager.fs.exists(pdf_name):
            continue

        try:
            options = parse_embed_options(options_string)
            pdf_content = manager.parse_file(pdf_name, options)
            label = f" [{options_string}]" if not options.is_empty() else ""
            replacement = f"\n\nEmbedded PDF ({pdf_name}){label}:\n{pdf_content}\n\n"
        except Exception as e:
            logger.error(f"Error processing embedded PDF {pdf_name}: {e}")
            replacement = f"\n\nEmbedded PDF ({pdf_name}): [Error: Could not process PDF]\n\n"

        content = content.replace(match.group(0), replacement, 1)
    return content
