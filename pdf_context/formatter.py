"""Rendering of selected pages into the final extraction string."""

from __future__ import annotations

from typing import Iterable, Optional

from .models import PageContent, ProcessingOptions


def format_page_header(page: PageContent) -> str:
    header = f"\n\n--- Page {page.page_num}"
    if page.relevance < 1.0:
        header += f" (Relevance: {page.relevance:.3f})"
    if page.has_images:
        header += " [Contains Images]"
    return header + " ---\n"


def format_pages(
    pages: Iterable[PageContent],
    options: Optional[ProcessingOptions] = None,
) -> str:
    """
    Render pages in the order given.

    Args:
        pages: Pages to render; callers pass them in ascending page order
        options: Request options (page content is already rendered
            according to preserve_structure)

    Returns:
        Joined page blocks, stripped; empty string for no pages
    """
    return "".join(format_page_header(page) + page.content for page in pages).strip()


def format_section(
    title: str,
    pages: Iterable[PageContent],
    options: Optional[ProcessingOptions] = None,
) -> str:
    """Render pages under a `=== title ===` banner (not stripped)."""
    return f"\n\n=== {title} ===\n{format_pages(pages, options)}"
