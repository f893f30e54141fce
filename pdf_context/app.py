from fastapi import FastAPI, HTTPException

from .config import ServiceConfig
from .exceptions import PDFNotFoundError, SourceNotFoundError, UnsupportedFileTypeError
from .models import ExtractRequest, ExtractResponse
from .service import ExtractionService


def create_app(config: ServiceConfig | None = None) -> FastAPI:
    service = ExtractionService(config=config)
    app = FastAPI(
        title="PDF Context Service",
        version="1.0.0",
        description="Selective, cached PDF text extraction for LLM context.",
    )

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.post("/extract", response_model=ExtractResponse)
    def extract(request: ExtractRequest) -> ExtractResponse:
        try:
            content = service.extract(request.path, request.options, request.embed)
        except (PDFNotFoundError, SourceNotFoundError) as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except UnsupportedFileTypeError as exc:
            raise HTTPException(status_code=415, detail=str(exc)) from exc
        except Exception as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        return ExtractResponse(path=request.path, content=content, characters=len(content))

    @app.delete("/cache")
    def clear_cache() -> dict:
        service.clear_cache()
        return {"status": "cleared"}

    return app
