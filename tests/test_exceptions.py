"""
Tests for PDF Context exceptions.
"""

import pytest

from pdf_context import (
    # Base
    ExtractionError,
    # PDF errors
    PDFError,
    PDFNotFoundError,
    PDFCorruptedError,
    PageExtractionError,
    # Other errors
    OutlineError,
    CacheError,
    SourceNotFoundError,
    UnsupportedFileTypeError,
)
from pdf_context.exceptions import format_error_chain


class TestExtractionError:
    """Tests for base ExtractionError."""

    def test_create_simple(self):
        """Test creating error with message only."""
        error = ExtractionError("Something went wrong")
        assert str(error) == "Something went wrong"
        assert error.message == "Something went wrong"
        assert error.details is None

    def test_create_with_details(self):
        """Test creating error with details."""
        error = ExtractionError("Error occurred", details="More info here")
        assert str(error) == "Error occurred | Details: More info here"


class TestPDFErrors:
    """Tests for PDF-related errors."""

    def test_pdf_not_found(self):
        error = PDFNotFoundError("docs/missing.pdf")
        assert error.path == "docs/missing.pdf"
        assert "missing.pdf" in str(error)

    def test_pdf_corrupted(self):
        original = ValueError("Invalid PDF structure")
        error = PDFCorruptedError("broken.pdf", original)
        assert error.original_error is original
        assert "corrupted" in str(error).lower()
        assert "Invalid PDF structure" in str(error)

    def test_pdf_corrupted_without_path(self):
        assert str(PDFCorruptedError()) == "PDF file is corrupted or unreadable"

    def test_page_extraction_error(self):
        error = PageExtractionError(page_number=5, path="doc.pdf")
        assert error.page_number == 5
        assert "page 5" in str(error)


class TestOtherErrors:
    """Tests for outline, cache and dispatch errors."""

    def test_cache_error(self):
        error = CacheError("abc123", "Cache read failed", OSError("denied"))
        assert error.key == "abc123"
        assert "abc123" in str(error)
        assert "denied" in str(error)

    def test_source_not_found(self):
        error = SourceNotFoundError("notes/gone.md")
        assert error.path == "notes/gone.md"
        assert str(error) == "File not found: notes/gone.md"

    def test_unsupported(self):
        error = UnsupportedFileTypeError("docx")
        assert error.extension == "docx"
        assert str(error) == "No parser found for file type: docx"

    def test_outline_error_default_message(self):
        assert "outline" in str(OutlineError()).lower()


class TestHierarchy:
    """Tests for the exception hierarchy."""

    @pytest.mark.parametrize("error", [
        PDFNotFoundError("a.pdf"),
        PDFCorruptedError(),
        PageExtractionError(1),
        OutlineError(),
        CacheError("k"),
        SourceNotFoundError("a.md"),
        UnsupportedFileTypeError("txt"),
    ])
    def test_all_are_extraction_errors(self, error):
        assert isinstance(error, ExtractionError)

    def test_pdf_errors(self):
        assert issubclass(PDFNotFoundError, PDFError)
        assert issubclass(PDFCorruptedError, PDFError)
        assert issubclass(PageExtractionError, PDFError)
        assert not issubclass(SourceNotFoundError, PDFError)


class TestFormatErrorChain:
    """Tests for format_error_chain."""

    def test_single(self):
        assert format_error_chain(ValueError("x")) == "ValueError: x"

    def test_chain(self):
        error = CacheError("k", "Cache write failed", OSError("disk full"))
        lines = format_error_chain(error).split("\n")
        assert lines[0].startswith("CacheError")
        assert lines[1] == "  └─ OSError: disk full"

    def test_cause(self):
        try:
            try:
                raise KeyError("inner")
            except KeyError as e:
                raise RuntimeError("outer") from e
        except RuntimeError as e:
            chain = format_error_chain(e)
        assert "RuntimeError: outer" in chain
        assert "KeyError" in chain
