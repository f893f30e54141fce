"""
File-parsing façade.

Dispatches files to parsers by extension. PDFs go through the extraction
cache first; on a miss the selective extractor runs (or the full-text
extractor when no options apply) and the result is written back.
PDF parsers never raise: failures come back as labelled error strings.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import logging
import time
from typing import Optional, Union

from .cache import PDFCache, ProjectContextCache
from .exceptions import ExtractionError, UnsupportedFileTypeError
from .extractor import SelectiveExtractor
from .models import CacheEntry, HeuristicsConfig, ProcessingOptions
from .storage import LocalFileSystem, SourceFile

logger = logging.getLogger(__name__)

BYTES_PER_MB = 1024 * 1024


class FileParser(ABC):
    supported_extensions: tuple[str, ...] = ()

    @abstractmethod
    def parse_file(self, file: SourceFile, options: Optional[ProcessingOptions] = None) -> str:
        """Return the text content of a file."""


class MarkdownParser(FileParser):
    supported_extensions = ("md",)

    def __init__(self, fs: LocalFileSystem):
        self.fs = fs

    def parse_file(self, file: SourceFile, options: Optional[ProcessingOptions] = None) -> str:
        return self.fs.read_text(file.path)


class PDFParser(FileParser):
    """
    Cached PDF parsing for standalone use.

    Requests without options get size-based defaults: large files are
    bounded, small files are extracted in full.
    """

    supported_extensions = ("pdf",)

    def __init__(
        self,
        fs: LocalFileSystem,
        cache: PDFCache,
        extractor: SelectiveExtractor,
    ):
        self.fs = fs
        self.cache = cache
        self.extractor = extractor

    @property
    def heuristics(self) -> HeuristicsConfig:
        return self.extractor.heuristics

    def parse_file(self, file: SourceFile, options: Optional[ProcessingOptions] = None) -> str:
        try:
            logger.info(f"Parsing PDF file locally: {file.path}")
            key = self.cache.cache_key(file.path, file.size, file.mtime, options)

            cached = self.cache.get(key)
            if cached is not None:
                logger.info(f"Using cached PDF content for: {file.path}")
                return cached.response

            with self.cache.key_lock(key):
                # Another request may have filled the entry while we waited
                cached = self.cache.get(key)
                if cached is not None:
                    return cached.response
                return self._extract_and_cache(file, key, options)

        except Exception as e:
            logger.error(f"Error extracting content from PDF {file.path}: {e}")
            return f"[Error: Could not extract content from PDF {file.basename}. {e}]"

    def processing_options(
        self, file_size: int, options: Optional[ProcessingOptions] = None
    ) -> ProcessingOptions:
        """Caller options, or defaults derived from the file size."""
        if options is not None and not options.is_empty():
            return options

        size_mb = file_size / BYTES_PER_MB
        if size_mb > self.heuristics.large_file_mb:
            logger.info(f"Large PDF detected ({size_mb:.1f}MB), applying smart limits")
            return ProcessingOptions(
                max_pages=self.heuristics.large_file_max_pages,
                max_characters=self.heuristics.large_file_max_characters,
            )
        if size_mb > self.heuristics.medium_file_mb:
            logger.info(f"Medium PDF detected ({size_mb:.1f}MB), applying moderate limits")
            return ProcessingOptions(
                max_pages=self.heuristics.medium_file_max_pages,
                max_characters=self.heuristics.medium_file_max_characters,
            )
        return ProcessingOptions()

    def clear_cache(self) -> None:
        logger.info("Clearing PDF cache")
        self.cache.clear()

    def _extract_and_cache(
        self, file: SourceFile, key: str, options: Optional[ProcessingOptions]
    ) -> str:
        final_options = self.processing_options(file.size, options)
        raw_bytes = self.fs.read(file.path)

        start_time = time.perf_counter()
        if final_options.is_empty():
            text = self.extractor.extract_full_text(raw_bytes, name=file.path)
        else:
            text = self.extractor.extract_text(raw_bytes, final_options, name=file.path)
        elapsed_ms = (time.perf_counter() - start_time) * 1000

        self.cache.set(
            key,
            CacheEntry(
                response=text,
                elapsed_time_ms=elapsed_ms,
                options=None if final_options.is_empty() else final_options,
            ),
        )
        return text


class ProjectPDFParser(FileParser):
    """PDF parsing scoped to a project, backed by the project cache."""

    supported_extensions = ("pdf",)

    def __init__(
        self,
        fs: LocalFileSystem,
        cache: ProjectContextCache,
        extractor: SelectiveExtractor,
        project_id: Optional[str] = None,
    ):
        self.fs = fs
        self.cache = cache
        self.extractor = extractor
        self.project_id = project_id

    def parse_file(self, file: SourceFile, options: Optional[ProcessingOptions] = None) -> str:
        try:
            if not self.project_id:
                raise ExtractionError("No project context provided for file parsing")

            logger.info(f"Project {self.project_id}: parsing PDF file locally: {file.path}")
            key = self.cache.cache_key(file.path, options)

            cached = self.cache.get_file_context(self.project_id, key)
            if cached is not None:
                logger.info(f"Project {self.project_id}: using cached content for: {file.path}")
                return cached

            raw_bytes = self.fs.read(file.path)
            if options is not None and not options.is_empty():
                text = self.extractor.extract_text(raw_bytes, options, name=file.path)
            else:
                text = self.extractor.extract_full_text(raw_bytes, name=file.path)

            self.cache.set_file_context(self.project_id, key, text)
            logger.info(f"Project {self.project_id}: processed and cached: {file.path}")
            return text

        except Exception as e:
            logger.error(f"Project {self.project_id}: error processing file {file.path}: {e}")
            return f"[Error: Could not extract content from {file.basename}]"


class FileParserManager:
    """
    Extension-based dispatch.

    In project mode PDFs are parsed with ProjectPDFParser, otherwise with
    PDFParser.
    """

    def __init__(
        self,
        fs: LocalFileSystem,
        project_mode: bool = False,
        project_id: Optional[str] = None,
        pdf_cache: Optional[PDFCache] = None,
        project_cache: Optional[ProjectContextCache] = None,
        extractor: Optional[SelectiveExtractor] = None,
    ):
        self.fs = fs
        self.project_mode = project_mode
        self.extractor = extractor or SelectiveExtractor()
        self.parsers: dict[str, FileParser] = {}

        self.register_parser(MarkdownParser(fs))
        if project_mode:
            self.register_parser(
                ProjectPDFParser(
                    fs,
                    project_cache or ProjectContextCache(fs),
                    self.extractor,
                    project_id,
                )
            )
        else:
            self.register_parser(PDFParser(fs, pdf_cache or PDFCache(fs), self.extractor))

    def register_parser(self, parser: FileParser) -> None:
        for ext in parser.supported_extensions:
            self.parsers[ext] = parser

    def supports_extension(self, extension: str) -> bool:
        return extension.lower() in self.parsers

    def parse_file(
        self,
        file: Union[SourceFile, str],
        options: Optional[ProcessingOptions] = None,
    ) -> str:
        """
        Parse a file with the parser registered for its extension.

        Raises:
            UnsupportedFileTypeError: If no parser handles the extension
        """
        if isinstance(file, str):
            file = self.fs.stat(file)
        parser = self.parsers.get(file.extension)
        if parser is None:
            raise UnsupportedFileTypeError(file.extension)
        return parser.parse_file(file, options)

    def clear_pdf_cache(self) -> None:
        parser = self.parsers.get("pdf")
        if isinstance(parser, PDFParser):
            parser.clear_cache()
