"""
Tests for ExtractionService, the HTTP API and the CLI.
"""

import pytest
from fastapi.testclient import TestClient

from pdf_context import (
    ExtractionService,
    PDFNotFoundError,
    ServiceConfig,
    SourceNotFoundError,
    UnsupportedFileTypeError,
)
from pdf_context.app import create_app
from pdf_context.cli import build_parser, build_options, main

from conftest import write_pdf


@pytest.fixture
def root(tmp_path):
    write_pdf(
        tmp_path / "papers" / "paper.pdf",
        [["first page about setup"], ["second page about attention"], ["third page wraps up"]],
    )
    (tmp_path / "notes").mkdir()
    (tmp_path / "notes" / "reading.md").write_text(
        "My notes\n![[papers/paper.pdf|pages:2-2]]\n![[papers/missing.pdf]]\n",
        encoding="utf-8",
    )
    (tmp_path / "data.csv").write_text("a,b\n", encoding="utf-8")
    return tmp_path


@pytest.fixture
def service(root):
    return ExtractionService(ServiceConfig(root_dir=str(root)))


class TestExtractionService:
    """Tests for the service façade."""

    def test_full_pdf(self, service):
        text = service.extract("papers/paper.pdf")
        assert text.startswith("--- Page 1 ---\nfirst page about setup")
        assert "--- Page 3 ---" in text

    def test_result_cached_on_disk(self, service, root):
        service.extract("papers/paper.pdf")
        assert list((root / ".pdf-context" / "pdf-cache").glob("*.json"))

    def test_embed_string(self, service):
        text = service.extract("papers/paper.pdf", embed="pages:3-3")
        assert text == "--- Page 3 ---\nthird page wraps up"

    def test_markdown_with_embeds(self, service):
        text = service.extract("notes/reading.md")
        assert text.startswith("My notes\n")
        assert "Embedded PDF (papers/paper.pdf) [pages:2-2]:\n--- Page 2 ---\nsecond page about attention" in text
        assert "![[papers/missing.pdf]]" in text

    def test_missing_file(self, service):
        with pytest.raises(PDFNotFoundError):
            service.extract("papers/nope.pdf")

    def test_missing_note(self, service):
        with pytest.raises(SourceNotFoundError, match="File not found: notes/gone.md"):
            service.extract("notes/gone.md")

    def test_missing_note_is_not_a_pdf_error(self, service):
        with pytest.raises(SourceNotFoundError) as excinfo:
            service.extract("notes/gone.md")
        assert not isinstance(excinfo.value, PDFNotFoundError)

    def test_missing_pdf_suffix_case_insensitive(self, service):
        with pytest.raises(PDFNotFoundError):
            service.extract("papers/NOPE.PDF")

    def test_unsupported(self, service):
        with pytest.raises(UnsupportedFileTypeError):
            service.extract("data.csv")

    def test_clear_cache(self, service, root):
        service.extract("papers/paper.pdf")
        service.clear_cache()
        assert not list((root / ".pdf-context" / "pdf-cache").glob("*.json"))

    def test_project_mode(self, root):
        service = ExtractionService(ServiceConfig(root_dir=str(root), project_id="thesis"))
        text = service.extract("papers/paper.pdf")
        assert "first page about setup" in text
        assert list((root / ".pdf-context" / "project-cache").rglob("*.json"))
        service.clear_cache()
        assert not list((root / ".pdf-context" / "project-cache").rglob("*.json"))


class TestApp:
    """Tests for the FastAPI app."""

    @pytest.fixture
    def client(self, root):
        return TestClient(create_app(ServiceConfig(root_dir=str(root))))

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_extract(self, client):
        response = client.post(
            "/extract",
            json={"path": "papers/paper.pdf", "options": {"search_terms": ["attention"], "context_window": 0}},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["path"] == "papers/paper.pdf"
        assert body["content"].startswith("--- Page 2 (Relevance: ")
        assert body["characters"] == len(body["content"])

    def test_not_found(self, client):
        response = client.post("/extract", json={"path": "papers/nope.pdf"})
        assert response.status_code == 404

    def test_missing_note_not_found(self, client):
        response = client.post("/extract", json={"path": "notes/gone.md"})
        assert response.status_code == 404
        assert response.json()["detail"] == "File not found: notes/gone.md"

    def test_unsupported(self, client):
        response = client.post("/extract", json={"path": "data.csv"})
        assert response.status_code == 415

    def test_invalid_options(self, client):
        response = client.post(
            "/extract",
            json={"path": "papers/paper.pdf", "options": {"max_pages": 0}},
        )
        assert response.status_code == 422

    def test_unknown_option(self, client):
        response = client.post(
            "/extract",
            json={"path": "papers/paper.pdf", "options": {"pages": "1-2"}},
        )
        assert response.status_code == 422

    def test_clear_cache(self, client):
        response = client.delete("/cache")
        assert response.status_code == 200
        assert response.json() == {"status": "cleared"}


class TestCli:
    """Tests for the command line."""

    def test_build_options_none(self):
        assert build_options(build_parser().parse_args(["a.pdf"])) is None

    def test_build_options(self):
        args = build_parser().parse_args(
            ["a.pdf", "--pages", "2-4", "--search", "x", "--search", "y", "--max-chars", "500", "--preserve-structure"]
        )
        options = build_options(args)
        assert options.page_range.start == 2
        assert options.page_range.end == 4
        assert options.search_terms == ["x", "y"]
        assert options.max_characters == 500
        assert options.preserve_structure is True
        assert options.extract_images is None

    def test_bad_page_range(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["a.pdf", "--pages", "three"])

    def test_main_prints_content(self, root, capsys):
        code = main(["papers/paper.pdf", "--root", str(root), "--pages", "1-1"])
        assert code == 0
        assert capsys.readouterr().out.strip() == "--- Page 1 ---\nfirst page about setup"

    def test_main_missing_file(self, root):
        assert main(["papers/nope.pdf", "--root", str(root)]) == 1

    def test_main_missing_note(self, root):
        assert main(["notes/gone.md", "--root", str(root)]) == 1

    def test_main_invalid_option(self, root):
        assert main(["papers/paper.pdf", "--root", str(root), "--max-pages", "0"]) == 2

    def test_main_clear_cache(self, root, capsys):
        assert main(["--clear-cache", "--root", str(root)]) == 0
        assert "Cache cleared" in capsys.readouterr().out
