"""
Custom Exceptions for Selective PDF Extraction.

This module defines a hierarchy of exceptions for precise error handling
in the extraction pipeline. None of these are meant to reach the caller of
the file-parsing façade: they are raised at the point of failure and turned
into labelled error strings or skipped pages one level up.

Exception Hierarchy:
    ExtractionError (base)
    ├── PDFError
    │   ├── PDFNotFoundError
    │   ├── PDFCorruptedError
    │   └── PageExtractionError
    ├── OutlineError
    ├── CacheError
    ├── SourceNotFoundError
    └── UnsupportedFileTypeError

Usage:
    from pdf_context.exceptions import (
        ExtractionError,
        PDFCorruptedError,
        PageExtractionError,
    )

    try:
        text = extractor.extract_text(raw_bytes, options)
    except PDFCorruptedError as e:
        print(f"Cannot open document: {e}")
    except ExtractionError as e:
        print(f"Extraction failed: {e}")
"""

from __future__ import annotations

from typing import Optional


# =============================================================================
# BASE EXCEPTION
# =============================================================================


class ExtractionError(Exception):
    """
    Base exception for all extraction-related errors.

    Attributes:
        message: Human-readable error description
        details: Additional technical details (optional)
    """

    def __init__(
        self,
        message: str = "An extraction error occurred",
        details: Optional[str] = None,
    ):
        self.message = message
        self.details = details

        full_message = message
        if details:
            full_message = f"{message} | Details: {details}"

        super().__init__(full_message)


# =============================================================================
# PDF ERRORS
# =============================================================================


class PDFError(ExtractionError):
    """Base class for PDF-related errors."""

    def __init__(
        self,
        message: str = "PDF error",
        path: Optional[str] = None,
        details: Optional[str] = None,
    ):
        self.path = path
        if path:
            message = f"{message} [{path}]"
        super().__init__(message, details)


class PDFNotFoundError(PDFError):
    """
    Raised when the PDF file cannot be found.

    Attributes:
        path: Path to the missing file
    """

    def __init__(self, path: str):
        super().__init__(
            message=f"PDF file not found: {path}",
            path=path,
        )


class PDFCorruptedError(PDFError):
    """
    Raised when the document bytes cannot be opened at all.

    Attributes:
        path: Path or name of the document, when known
        original_error: The underlying error from the PDF library
    """

    def __init__(
        self,
        path: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        self.original_error = original_error
        details = str(original_error) if original_error else None
        super().__init__(
            message="PDF file is corrupted or unreadable",
            path=path,
            details=details,
        )


class PageExtractionError(PDFError):
    """
    Raised when the text items of a single page cannot be read.

    Callers skip the page (or render an inline marker) instead of
    aborting the whole document.

    Attributes:
        page_number: The page that failed (1-indexed)
    """

    def __init__(
        self,
        page_number: int,
        path: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        self.page_number = page_number
        self.original_error = original_error
        details = str(original_error) if original_error else None
        super().__init__(
            message=f"Failed to extract page {page_number}",
            path=path,
            details=details,
        )


# =============================================================================
# OUTLINE, CACHE AND DISPATCH ERRORS
# =============================================================================


class OutlineError(ExtractionError):
    """Raised when the native outline of a document cannot be read."""

    def __init__(
        self,
        message: str = "Failed to read document outline",
        original_error: Optional[Exception] = None,
    ):
        self.original_error = original_error
        super().__init__(message, str(original_error) if original_error else None)


class CacheError(ExtractionError):
    """
    Raised when a cache blob cannot be read or written.

    Attributes:
        key: Cache key involved
    """

    def __init__(
        self,
        key: str,
        message: str = "Cache I/O failed",
        original_error: Optional[Exception] = None,
    ):
        self.key = key
        self.original_error = original_error
        super().__init__(
            f"{message} (key {key})",
            str(original_error) if original_error else None,
        )


class SourceNotFoundError(ExtractionError):
    """
    Raised when a requested file that is not a PDF does not exist.

    Attributes:
        path: Path to the missing file
    """

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"File not found: {path}")


class UnsupportedFileTypeError(ExtractionError):
    """Raised when no parser is registered for a file extension."""

    def __init__(self, extension: str):
        self.extension = extension
        super().__init__(f"No parser found for file type: {extension}")


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def format_error_chain(error: Exception) -> str:
    """
    Format an exception and its chain for logging.

    Returns a multi-line string showing the error hierarchy.
    """
    lines = []
    current = error
    depth = 0

    while current is not None:
        prefix = "  " * depth + ("└─ " if depth > 0 else "")
        lines.append(f"{prefix}{type(current).__name__}: {current}")

        if getattr(current, "original_error", None):
            current = current.original_error
            depth += 1
        elif current.__cause__:
            current = current.__cause__
            depth += 1
        else:
            break

    return "\n".join(lines)
