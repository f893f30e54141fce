from pathlib import PurePosixPath
from typing import Optional

from .cache import PDFCache, ProjectContextCache
from .config import ServiceConfig
from .embeds import parse_embed_options, process_embedded_pdfs
from .exceptions import PDFNotFoundError, SourceNotFoundError
from .extractor import SelectiveExtractor
from .models import ProcessingOptions
from .parsers import FileParserManager
from .storage import LocalFileSystem


class ExtractionService:
    def __init__(self, config: ServiceConfig | None = None):
        self.config = config or ServiceConfig()
        self.fs = LocalFileSystem(self.config.root_dir)
        self.extractor = SelectiveExtractor(heuristics=self.config.heuristics)
        self.pdf_cache = PDFCache(self.fs, self.config.cache_dir)
        self.project_cache = ProjectContextCache(self.fs, self.config.project_cache_dir)
        self.manager = FileParserManager(
            self.fs,
            project_mode=self.config.project_id is not None,
            project_id=self.config.project_id,
            pdf_cache=self.pdf_cache,
            project_cache=self.project_cache,
            extractor=self.extractor,
        )

    def extract(
        self,
        path: str,
        options: Optional[ProcessingOptions] = None,
        embed: Optional[str] = None,
    ) -> str:
        if not self.fs.exists(path):
            if PurePosixPath(path).suffix.lower() == ".pdf":
                raise PDFNotFoundError(path)
            raise SourceNotFoundError(path)
        if options is None and embed:
            options = parse_embed_options(embed)

        file = self.fs.stat(path)
        content = self.manager.parse_file(file, options)
        if file.extension == "md":
            content = process_embedded_pdfs(content, self.manager)
        return content

    def clear_cache(self) -> None:
        self.manager.clear_pdf_cache()
        if self.config.project_id is not None:
            self.project_cache.clear_project(self.config.project_id)
