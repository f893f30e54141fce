"""
PDF Document Access.

This module is the boundary to the PDF library:
- Document opening from raw bytes
- Positioned text items per page (PDF user space, y grows upwards)
- Native outline (bookmarks) and destination resolution
- Image presence per page

The extraction pipeline only talks to the abstract PDFDocument interface;
FitzDocument implements it on top of PyMuPDF (fitz).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
import logging
from typing import Any, Optional

import fitz  # PyMuPDF

from .exceptions import PDFCorruptedError, PageExtractionError

logger = logging.getLogger(__name__)

# PyMuPDF span flag for bold text
BOLD_FLAG = 16


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass(frozen=True)
class TextItem:
    """
    A positioned run of text on a page.

    Attributes:
        text: The raw text of the run
        transform: Text matrix (a, b, c, d, e, f); a is the font size,
            (e, f) the baseline origin in PDF user space
        font_name: Name of the font used for the run
        width: Run width in layout units
        height: Run height in layout units
        flags: Library specific style flags (bold = 16)
    """

    text: str
    transform: tuple[float, float, float, float, float, float]
    font_name: str = ""
    width: float = 0.0
    height: float = 0.0
    flags: int = 0

    @property
    def x(self) -> float:
        return self.transform[4]

    @property
    def y(self) -> float:
        return self.transform[5]

    @property
    def font_size(self) -> float:
        return self.transform[0]

    @property
    def is_bold(self) -> bool:
        return "Bold" in self.font_name or bool(self.flags & BOLD_FLAG)


@dataclass(frozen=True)
class OutlineEntry:
    """
    A top-level bookmark of the document.

    Attributes:
        title: Bookmark title
        dest: Library specific destination reference
    """

    title: str
    dest: Any = None


# =============================================================================
# DOCUMENT INTERFACE
# =============================================================================


class PDFDocument(ABC):
    """Read-only view of an opened PDF document."""

    @property
    @abstractmethod
    def num_pages(self) -> int:
        """Total number of pages."""

    @abstractmethod
    def get_text_items(self, page_number: int) -> list[TextItem]:
        """
        Positioned text items of a page, in content-stream order.

        Raises:
            PageExtractionError: If the page cannot be read
        """

    @abstractmethod
    def get_outline(self) -> list[OutlineEntry]:
        """Top-level outline entries; empty when the document has none."""

    @abstractmethod
    def get_page_index(self, dest: Any) -> int:
        """Resolve an outline destination to a 0-based page index."""

    @abstractmethod
    def has_images(self, page_number: int) -> bool:
        """True if the page paints at least one image."""

    def close(self) -> None:
        pass

    def __enter__(self) -> "PDFDocument":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


# =============================================================================
# PYMUPDF IMPLEMENTATION
# =============================================================================


class FitzDocument(PDFDocument):
    """
    PDFDocument backed by PyMuPDF.

    Usage:
        with open_document(raw_bytes) as doc:
            print(f"Pages: {doc.num_pages}")
            items = doc.get_text_items(1)
    """

    def __init__(self, doc: fitz.Document, name: Optional[str] = None):
        self._doc = doc
        self.name = name

    @property
    def num_pages(self) -> int:
        return len(self._doc)

    def get_text_items(self, page_number: int) -> list[TextItem]:
        if page_number < 1 or page_number > len(self._doc):
            raise PageExtractionError(
                page_number,
                self.name,
                ValueError(f"Page {page_number} out of range (1-{len(self._doc)})"),
            )

        try:
            page = self._doc[page_number - 1]
            page_height = page.rect.height
            payload = page.get_text("dict")
        except Exception as e:
            raise PageExtractionError(page_number, self.name, e) from e

        items: list[TextItem] = []
        for block in payload.get("blocks", []):
            if "lines" not in block:
                continue  # image block
            for line in block["lines"]:
                for span in line.get("spans", []):
                    text = span.get("text", "")
                    if not text:
                        continue
                    size = float(span.get("size", 0.0))
                    x0, y0, x1, y1 = span.get("bbox", (0.0, 0.0, 0.0, 0.0))
                    origin_x, origin_y = span.get("origin", (x0, y1))
                    items.append(
                        TextItem(
                            text=text,
                            # Flip to PDF user space so that y grows upwards
                            transform=(size, 0.0, 0.0, size, float(origin_x), page_height - float(origin_y)),
                            font_name=span.get("font", ""),
                            width=float(x1 - x0),
                            height=float(y1 - y0),
                            flags=int(span.get("flags", 0)),
                        )
                    )
        return items

    def get_outline(self) -> list[OutlineEntry]:
        toc = self._doc.get_toc(simple=True)
        if not toc:
            return []

        entries = []
        for item in toc:
            # TOC entry format: [level, title, page_number]
            if len(item) < 3 or item[0] != 1:
                continue
            entries.append(OutlineEntry(title=str(item[1]).strip(), dest=item[2]))
        return entries

    def get_page_index(self, dest: Any) -> int:
        page = int(dest)
        if page < 1 or page > len(self._doc):
            raise ValueError(f"Outline destination {dest!r} does not resolve to a page")
        return page - 1

    def has_images(self, page_number: int) -> bool:
        page = self._doc[page_number - 1]
        return bool(page.get_images(full=False))

    def close(self) -> None:
        if not self._doc.is_closed:
            self._doc.close()


def open_document(raw_bytes: bytes, name: Optional[str] = None) -> FitzDocument:
    """
    Open a PDF from raw bytes.

    Args:
        raw_bytes: Complete file contents
        name: Optional name used in error messages

    Returns:
        FitzDocument (use as a context manager to release it)

    Raises:
        PDFCorruptedError: If the bytes cannot be opened as a PDF
    """
    if not raw_bytes:
        raise PDFCorruptedError(name, ValueError("Empty file provided"))

    try:
        doc = fitz.open(stream=raw_bytes, filetype="pdf")
    except Exception as e:
        raise PDFCorruptedError(name, e) from e

    logger.info(f"PDF loaded successfully. Total pages: {len(doc)}")
    return FitzDocument(doc, name=name)
