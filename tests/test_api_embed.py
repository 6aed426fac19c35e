"""Tests for the embed API, the embed script and the upload endpoint.

All tests use an in-memory SQLite database via the FastAPI TestClient and a
temporary upload directory.
"""

from __future__ import annotations

import logging

import pytest
from fastapi.testclient import TestClient

from skilltree.api.app import create_app
from skilltree.config import Settings
from skilltree.db.connection import get_connection
from skilltree.db.edges import create_edge
from skilltree.db.migrations import init_db
from skilltree.db.nodes import create_node
from skilltree.db.projects import create_project


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def conn():
    connection = get_connection(db_path=":memory:")
    init_db(connection)
    yield connection
    connection.close()


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(
        workspace_dir=tmp_path,
        upload_dir_override=str(tmp_path / "uploads"),
        public_base_url="",
    )


@pytest.fixture()
def client(conn, settings):
    """TestClient whose lifespan uses the injected in-memory connection."""
    with TestClient(create_app(settings=settings, conn=conn)) as c:
        yield c


@pytest.fixture()
def bike(conn):
    """The "Bike v2" project: two frames, the second improving the first."""
    project = create_project(conn, "Bike v2", "bike-v2")
    v1 = create_node(conn, project.id, "Frame v1", "2024-01-01", categories=["physical"])
    v2 = create_node(conn, project.id, "Frame v2", "2024-02-01", categories=["physical"])
    create_edge(conn, project.id, v1.id, v2.id, kind="improves")
    return project


# ---------------------------------------------------------------------------
# /api/embed
# ---------------------------------------------------------------------------

class TestEmbedApi:
    def test_bike_v2_end_to_end(self, client, bike) -> None:
        resp = client.get("/api/embed/bike-v2")
        assert resp.status_code == 200
        data = resp.json()
        assert data["slug"] == "bike-v2"
        assert len(data["nodes"]) == 2
        assert len(data["edges"]) == 1
        assert data["edges"][0]["kind"] == "improves"
        assert data["nodes"][0]["categories"] == ["physical"]
        assert data["nodes"][0]["dateISO"] == "2024-01-01"

    def test_cors_headers(self, client, bike) -> None:
        resp = client.get("/api/embed/bike-v2")
        assert resp.headers["access-control-allow-origin"] == "*"
        assert resp.headers["access-control-allow-methods"] == "GET"

    def test_lookup_by_id(self, client, bike) -> None:
        resp = client.get(f"/api/embed/{bike.id}")
        assert resp.status_code == 200
        assert resp.json()["id"] == bike.id

    def test_optional_fields_are_omitted(self, client, bike) -> None:
        node = client.get("/api/embed/bike-v2").json()["nodes"][0]
        assert "summary" not in node
        assert "media" not in node
        assert "metrics" not in node
        assert node["showBoth"] is False

    def test_unknown_project(self, client) -> None:
        resp = client.get("/api/embed/nope")
        assert resp.status_code == 404
        assert resp.json() == {"error": "Project not found"}

    @pytest.mark.parametrize("path", ["/api/embed/", "/api/embed/%20"])
    def test_blank_id(self, client, path) -> None:
        resp = client.get(path)
        assert resp.status_code == 400
        assert resp.json() == {"error": "Project ID required"}

    def test_post_not_allowed(self, client, bike) -> None:
        resp = client.post("/api/embed/bike-v2")
        assert resp.status_code == 405
        assert "error" in resp.json()


# ---------------------------------------------------------------------------
# /embed
# ---------------------------------------------------------------------------

class TestEmbedScript:
    def test_script_headers(self, client) -> None:
        resp = client.get("/embed")
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "text/javascript; charset=utf-8"
        assert resp.headers["cache-control"] == "public, max-age=3600"
        assert "[data-project]" in resp.text
        assert "/api/embed/" in resp.text

    def test_public_base_url(self, conn, tmp_path) -> None:
        settings = Settings(workspace_dir=tmp_path, public_base_url="https://trees.example.com")
        with TestClient(create_app(settings=settings, conn=conn)) as c:
            assert 'var BASE = "https://trees.example.com";' in c.get("/embed").text


# ---------------------------------------------------------------------------
# /api/upload
# ---------------------------------------------------------------------------

class TestUpload:
    def test_png_and_txt_yield_one_image(self, client, settings) -> None:
        resp = client.post(
            "/api/upload",
            files=[
                ("file", ("photo.png", b"\x89PNG", "image/png")),
                ("file", ("notes.txt", b"hello", "text/plain")),
            ],
        )
        assert resp.status_code == 200
        items = resp.json()
        assert len(items) == 1
        assert items[0]["type"] == "img"
        assert items[0]["alt"] == "photo.png"
        assert items[0]["src"].startswith("/uploads/")
        assert len(list(settings.upload_dir.iterdir())) == 1

    def test_uploaded_file_is_served(self, client) -> None:
        resp = client.post("/api/upload", files=[("file", ("clip.mp4", b"MP4DATA", "video/mp4"))])
        (item,) = resp.json()
        assert item["type"] == "video"
        served = client.get(item["src"])
        assert served.status_code == 200
        assert served.content == b"MP4DATA"

    def test_no_files(self, client) -> None:
        resp = client.post("/api/upload", data={"other": "x"})
        assert resp.status_code == 400
        assert resp.json() == {"error": "No files provided"}

    def test_no_valid_files(self, client) -> None:
        resp = client.post("/api/upload", files=[("file", ("a.txt", b"x", "text/plain"))])
        assert resp.status_code == 400
        assert resp.json() == {"error": "No valid files uploaded"}

    def test_disk_failure_is_generic_500_and_logged(self, client, settings, caplog) -> None:
        settings.upload_dir.rmdir()
        settings.upload_dir.write_text("a file where the directory should be")
        with caplog.at_level(logging.ERROR, logger="skilltree.api.app"):
            resp = client.post("/api/upload", files=[("file", ("a.png", b"\x89PNG", "image/png"))])
        assert resp.status_code == 500
        assert resp.json() == {"error": "Internal server error"}
        (record,) = [r for r in caplog.records if r.name == "skilltree.api.app"]
        assert isinstance(record.exc_info[1].__cause__, OSError)

    def test_get_not_allowed(self, client) -> None:
        assert client.get("/api/upload").status_code == 405
