"""
Pytest fixtures for PDF Context tests.
"""

from pathlib import Path
from typing import Any, Optional

import fitz
import pytest

from pdf_context import (
    LocalFileSystem,
    OutlineEntry,
    PDFDocument,
    SelectiveExtractor,
    TextItem,
)
from pdf_context.exceptions import OutlineError, PageExtractionError


def make_item(
    text: str,
    x: float = 72.0,
    y: float = 700.0,
    size: float = 12.0,
    font_name: str = "Helvetica",
    flags: int = 0,
) -> TextItem:
    """Build a positioned text item the way the PDF layer reports it."""
    return TextItem(
        text=text,
        transform=(size, 0.0, 0.0, size, x, y),
        font_name=font_name,
        width=len(text) * size * 0.5,
        height=size,
        flags=flags,
    )


def header_item(text: str, y: float = 760.0) -> TextItem:
    return make_item(text, y=y, size=18.0, font_name="Helvetica-Bold")


def _as_items(page) -> list[TextItem]:
    if isinstance(page, str):
        return [make_item(page)] if page else []
    return list(page)


class FakeDocument(PDFDocument):
    """
    In-memory PDFDocument.

    Pages are lists of TextItem (a plain string becomes one paragraph item).
    Outline entries use 1-based page numbers as destinations.
    """

    def __init__(
        self,
        pages: list,
        outline: Optional[list[tuple[str, Any]]] = None,
        image_pages: tuple[int, ...] = (),
        failing_pages: tuple[int, ...] = (),
        broken_outline: bool = False,
    ):
        self.pages = [_as_items(page) for page in pages]
        self.outline = outline or []
        self.image_pages = set(image_pages)
        self.failing_pages = set(failing_pages)
        self.broken_outline = broken_outline
        self.closed = False

    @property
    def num_pages(self) -> int:
        return len(self.pages)

    def get_text_items(self, page_number: int) -> list[TextItem]:
        if page_number in self.failing_pages:
            raise PageExtractionError(page_number, "fake.pdf", RuntimeError("broken page"))
        return list(self.pages[page_number - 1])

    def get_outline(self) -> list[OutlineEntry]:
        if self.broken_outline:
            raise OutlineError(original_error=RuntimeError("bad outline"))
        return [OutlineEntry(title=title, dest=dest) for title, dest in self.outline]

    def get_page_index(self, dest: Any) -> int:
        page = int(dest)
        if page < 1 or page > self.num_pages:
            raise ValueError(f"bad destination {dest!r}")
        return page - 1

    def has_images(self, page_number: int) -> bool:
        return page_number in self.image_pages

    def close(self) -> None:
        self.closed = True


def extractor_for(doc: PDFDocument, **kwargs) -> SelectiveExtractor:
    """SelectiveExtractor whose opener always returns the given document."""
    return SelectiveExtractor(opener=lambda raw_bytes, name=None: doc, **kwargs)


@pytest.fixture
def fs(tmp_path: Path) -> LocalFileSystem:
    """LocalFileSystem rooted in a temporary directory."""
    return LocalFileSystem(str(tmp_path))


@pytest.fixture
def ten_page_doc() -> FakeDocument:
    """Ten plain pages; page 5 is the only one mentioning quantum."""
    pages = [f"plain text on page number {n} about nothing special" for n in range(1, 11)]
    pages[4] = "this page explains quantum tunnelling in some detail"
    return FakeDocument(pages)


@pytest.fixture
def book_doc() -> FakeDocument:
    """Nine pages with a three-chapter native outline."""
    pages = []
    for n in range(1, 10):
        pages.append([make_item(f"body text of page {n}", y=600.0)])
    return FakeDocument(
        pages,
        outline=[("Introduction", 1), ("Training", 4), ("Evaluation", 7)],
    )


def write_pdf(path: Path, lines_per_page: list[list[str]], toc: Optional[list] = None) -> bytes:
    """Write a real PDF with PyMuPDF and return its bytes."""
    doc = fitz.open()
    for lines in lines_per_page:
        page = doc.new_page()
        for i, line in enumerate(lines):
            page.insert_text((72, 72 + i * 40), line, fontsize=12)
    if toc:
        doc.set_toc(toc)
    data = doc.tobytes()
    doc.close()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return data
