"""Tests for the Web API (F4)."""

import inspect

import pytest
from fastapi.testclient import TestClient

from ebookkit import __version__
from ebookkit.core.models import Ebook
from ebookkit.db.ebooks_repository import insert_ebook
from ebookkit.web.api import create_app
from ebookkit.web.routes import ebooks as ebook_routes

TEXT = b"Orchard Diary\n\nThe apples ripened early this year.\n\nWe picked them in August."


@pytest.fixture
def client(tmp_path, monkeypatch):
    """Create test client with an isolated database."""
    monkeypatch.chdir(tmp_path)

    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture
def uploaded(client):
    """Upload a small text ebook and return its JSON."""
    response = client.post(
        "/api/ebooks",
        files={"file": ("Orchard Diary.txt", TEXT, "text/plain")},
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestHealth:
    """Tests for GET /health."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["version"] == __version__


class TestUpload:
    """Tests for POST /api/ebooks."""

    def test_upload_returns_ready_ebook(self, uploaded):
        """Upload returns the extracted ebook."""
        assert uploaded["status"] == "ready"
        assert uploaded["name"] == "Orchard Diary"
        assert uploaded["file_size"] == len(TEXT)
        assert uploaded["formats"] == {"ppt": True, "docx": True, "pdf": True}
        assert uploaded["extracted_content"]["title"] == "Orchard Diary"
        assert len(uploaded["extracted_content"]["chapters"]) == 3

    def test_unsupported_type_is_400(self, client):
        response = client.post("/api/ebooks", files={"file": ("report.docx", b"PK", "application/zip")})
        assert response.status_code == 400
        assert "invalid file type" in response.json()["detail"]

    def test_empty_file_is_422(self, client):
        response = client.post("/api/ebooks", files={"file": ("empty.txt", b"", "text/plain")})
        assert response.status_code == 422
        assert client.get("/api/ebooks").json()["count"] == 0

    def test_oversize_is_413(self, tmp_path, monkeypatch):
        """Files over the configured cap are rejected with 413."""
        monkeypatch.chdir(tmp_path)
        config_dir = tmp_path / "data" / "config"
        config_dir.mkdir(parents=True)
        (config_dir / "app_config.yaml").write_text("limits:\n  max_upload_bytes: 16\n", encoding="utf-8")

        with TestClient(create_app()) as client:
            response = client.post("/api/ebooks", files={"file": ("big.txt", TEXT, "text/plain")})

        assert response.status_code == 413


class TestListAndGet:
    """Tests for GET /api/ebooks and GET /api/ebooks/{id}."""

    def test_list_empty(self, client):
        response = client.get("/api/ebooks")
        assert response.status_code == 200
        assert response.json() == {"ebooks": [], "count": 0}

    def test_list_after_upload(self, client, uploaded):
        data = client.get("/api/ebooks").json()
        assert data["count"] == 1
        assert data["ebooks"][0]["id"] == uploaded["id"]
        assert "extracted_content" not in data["ebooks"][0]

    def test_get_detail(self, client, uploaded):
        response = client.get(f"/api/ebooks/{uploaded['id']}")
        assert response.status_code == 200
        assert response.json()["extracted_content"]["text"].startswith("Orchard Diary")

    def test_get_missing_is_404(self, client):
        assert client.get("/api/ebooks/ebook-0-missing").status_code == 404


class TestDelete:
    """Tests for DELETE /api/ebooks/{id}."""

    def test_delete(self, client, uploaded):
        response = client.delete(f"/api/ebooks/{uploaded['id']}")
        assert response.status_code == 204
        assert client.get(f"/api/ebooks/{uploaded['id']}").status_code == 404

    def test_delete_missing_is_404(self, client):
        assert client.delete("/api/ebooks/ebook-0-missing").status_code == 404


class TestDownload:
    """Tests for GET /api/ebooks/{id}/download/{fmt}."""

    def test_download_docx(self, client, uploaded):
        response = client.get(f"/api/ebooks/{uploaded['id']}/download/docx")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/msword")
        assert 'filename="Orchard_Diary.doc"' in response.headers["content-disposition"]
        assert "We picked them in August." in response.text

    def test_download_ppt(self, client, uploaded):
        response = client.get(f"/api/ebooks/{uploaded['id']}/download/ppt")
        assert response.status_code == 200
        assert response.content[:2] == b"PK"

    def test_download_pdf_is_print_html(self, client, uploaded):
        response = client.get(f"/api/ebooks/{uploaded['id']}/download/pdf")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "window.print()" in response.text

    def test_download_txt(self, client, uploaded):
        response = client.get(f"/api/ebooks/{uploaded['id']}/download/txt")
        assert response.status_code == 200
        assert response.content == TEXT

    def test_unknown_format_is_404(self, client, uploaded):
        assert client.get(f"/api/ebooks/{uploaded['id']}/download/odt").status_code == 404

    def test_missing_ebook_is_404(self, client):
        assert client.get("/api/ebooks/ebook-0-missing/download/docx").status_code == 404

    def test_processing_ebook_is_409(self, client):
        """Downloads need extracted content."""
        insert_ebook(Ebook(id="ebook-1-pending", name="p", file_name="p.txt", file_size=1))

        response = client.get("/api/ebooks/ebook-1-pending/download/docx")

        assert response.status_code == 409

    def test_blocking_handlers_run_in_threadpool(self):
        """Handlers that hit SQLite or render are not coroutines."""
        for handler in (
            ebook_routes.list_all_ebooks,
            ebook_routes.get_ebook_detail,
            ebook_routes.remove_ebook,
            ebook_routes.download_ebook,
        ):
            assert not inspect.iscoroutinefunction(handler), handler.__name__
