"""Tests for the HTML screens and their intent endpoints."""

from __future__ import annotations

import json
import re

import pytest
from fastapi.testclient import TestClient

from skilltree.api.app import create_app
from skilltree.config import Settings
from skilltree.db.connection import get_connection
from skilltree.db.edges import create_edge
from skilltree.db.migrations import init_db
from skilltree.db.nodes import create_node, get_node
from skilltree.db.projects import create_project, get_project, list_projects


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
def client(conn, tmp_path):
    settings = Settings(workspace_dir=tmp_path)
    with TestClient(create_app(settings=settings, conn=conn)) as c:
        yield c


@pytest.fixture()
def project(conn):
    return create_project(conn, "Bike v2", "bike-v2", "Frames over time")


def _graph_data(html: str) -> dict:
    match = re.search(r'<script type="application/json" id="graph-data">(.*?)</script>', html, re.S)
    assert match
    return json.loads(match.group(1))


# ---------------------------------------------------------------------------
# Landing and project list
# ---------------------------------------------------------------------------

class TestProjectList:
    def test_landing(self, client) -> None:
        resp = client.get("/")
        assert resp.status_code == 200
        assert "text/html" in resp.headers["content-type"]
        assert "Create Project" in resp.text

    def test_lists_projects(self, client, project) -> None:
        resp = client.get("/app")
        assert resp.status_code == 200
        assert "Bike v2" in resp.text
        assert f'href="/app/{project.id}"' in resp.text

    def test_create_redirects_to_editor(self, client, conn) -> None:
        resp = client.post(
            "/app",
            data={"title": "Bike v2", "slug": "Bike v2", "summary": ""},
            follow_redirects=False,
        )
        assert resp.status_code == 303
        (created,) = list_projects(conn)
        assert created.slug == "bike-v2"
        assert created.summary is None
        assert resp.headers["location"] == f"/app/{created.id}"

    def test_create_requires_title_and_slug(self, client, conn) -> None:
        resp = client.post("/app", data={"title": "", "slug": ""})
        assert resp.status_code == 400
        assert "Title and slug are required" in resp.text
        assert list_projects(conn) == []

    def test_duplicate_slug_shown_inline(self, client, project) -> None:
        resp = client.post("/app", data={"title": "Again", "slug": "bike-v2"})
        assert resp.status_code == 400
        assert "Slug already in use" in resp.text
        assert 'value="Again"' in resp.text


# ---------------------------------------------------------------------------
# Editor
# ---------------------------------------------------------------------------

class TestEditorScreen:
    def test_renders_laid_out_graph(self, client, conn, project) -> None:
        create_node(conn, project.id, "Frame v1", "2024-01-01")
        create_node(conn, project.id, "Frame v2", "2024-02-01")
        resp = client.get(f"/app/{project.id}")
        assert resp.status_code == 200
        data = _graph_data(resp.text)
        assert data["scene"]["status"] == "idle"
        assert all(n["position"] is not None for n in data["scene"]["nodes"])
        assert data["endpoints"]["action"] == f"/app/{project.id}"

    def test_missing_project_page(self, client) -> None:
        resp = client.get("/app/missing")
        assert resp.status_code == 404
        assert "Project not found" in resp.text

    def test_graph_endpoint(self, client, conn, project) -> None:
        a = create_node(conn, project.id, "A", "2024-01-01")
        b = create_node(conn, project.id, "B", "2024-02-01")
        create_edge(conn, project.id, a.id, b.id, "improves")
        data = client.get(f"/app/{project.id}/graph").json()
        assert data["project"]["id"] == project.id
        assert set(data["layout"]) == {a.id, b.id}
        assert data["layout"][a.id]["y"] < data["layout"][b.id]["y"]
        assert data["scene"]["edges"][0]["label"] == "improves"
        assert set(data["details"]) == {a.id, b.id}

    def test_3d_view(self, client, conn, project) -> None:
        create_node(conn, project.id, "A", "2024-01-01")
        resp = client.get(f"/app/{project.id}/3d")
        assert resp.status_code == 200
        assert 'id="scene-data"' in resp.text
        assert client.get("/app/missing/3d").status_code == 404


class TestIntents:
    def _post(self, client, project, **fields):
        return client.post(f"/app/{project.id}", data=fields)

    def test_create_node(self, client, conn, project) -> None:
        resp = self._post(
            client, project,
            intent="createNode", title="Frame v1", dateISO="2024-01-01",
            categories="physical, digital", contentMd="# Notes", showBoth="1",
            mediaJson='[{"type": "img", "src": "/uploads/a.png"}]',
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        (node,) = body["project"]["nodes"]
        assert node["categories"] == ["physical", "digital"]
        assert node["contentFormat"] == "md"
        assert node["showBoth"] is True
        assert node["media"] == [{"type": "img", "src": "/uploads/a.png"}]

    def test_create_node_requires_title(self, client, project) -> None:
        resp = self._post(client, project, intent="createNode", title="", dateISO="2024-01-01")
        assert resp.status_code == 400
        assert resp.json() == {"error": "Title is required"}

    def test_update_node_is_a_patch(self, client, conn, project) -> None:
        node = create_node(conn, project.id, "Frame v1", "2024-01-01", summary="Steel",
                           categories=["physical"])
        resp = self._post(client, project, intent="updateNode", nodeId=node.id, title="Frame 1b")
        assert resp.status_code == 200
        stored = get_node(conn, node.id)
        assert stored.title == "Frame 1b"
        assert stored.summary == "Steel"
        assert stored.categories == ["physical"]

    def test_update_node_clears_metrics_with_empty_field(self, client, conn, project) -> None:
        node = create_node(conn, project.id, "Frame v1", "2024-01-01", metrics={"weight": 2.5})
        resp = self._post(
            client, project, intent="updateNode", nodeId=node.id, title="Frame v1", metricsJson=""
        )
        assert resp.status_code == 200
        assert "metrics" not in resp.json()["project"]["nodes"][0]
        assert get_node(conn, node.id).metrics is None

    def test_delete_node(self, client, conn, project) -> None:
        node = create_node(conn, project.id, "Frame v1", "2024-01-01")
        resp = self._post(client, project, intent="deleteNode", nodeId=node.id)
        assert resp.status_code == 200
        assert resp.json()["project"]["nodes"] == []

    def test_delete_missing_node_is_404(self, client, project) -> None:
        resp = self._post(client, project, intent="deleteNode", nodeId="missing")
        assert resp.status_code == 404
        assert "error" in resp.json()

    def test_delete_missing_edge_is_404(self, client, project) -> None:
        resp = self._post(client, project, intent="deleteEdge", edgeId="missing")
        assert resp.status_code == 404

    def test_edges(self, client, conn, project) -> None:
        a = create_node(conn, project.id, "A", "2024-01-01")
        b = create_node(conn, project.id, "B", "2024-02-01")
        resp = self._post(client, project, intent="createEdge", fromId=a.id, toId=b.id, kind="forks")
        (edge,) = resp.json()["project"]["edges"]
        assert edge == {"id": edge["id"], "fromId": a.id, "toId": b.id, "kind": "forks"}

        resp = self._post(client, project, intent="deleteEdge", edgeId=edge["id"])
        assert resp.json()["project"]["edges"] == []

    def test_create_edge_requires_endpoints(self, client, project) -> None:
        resp = self._post(client, project, intent="createEdge", fromId="", toId="")
        assert resp.status_code == 400
        assert resp.json() == {"error": "From and To IDs required"}

    def test_unknown_intent(self, client, project) -> None:
        resp = self._post(client, project, intent="dropTable")
        assert resp.status_code == 400
        assert resp.json() == {"error": "Unknown intent"}

    def test_unknown_project(self, client) -> None:
        resp = client.post("/app/missing", data={"intent": "createNode"})
        assert resp.status_code == 404

    def test_mutation_bumps_project_in_list(self, client, conn, project) -> None:
        other = create_project(conn, "Other", "other")
        with conn:
            conn.execute("UPDATE projects SET updated_at = 1 WHERE id = ?", (project.id,))
            conn.execute("UPDATE projects SET updated_at = 2 WHERE id = ?", (other.id,))
        self._post(client, project, intent="createNode", title="A", dateISO="2024-01-01")
        assert list_projects(conn)[0].id == project.id


# ---------------------------------------------------------------------------
# Public viewer and embed viewer
# ---------------------------------------------------------------------------

class TestPublicViewer:
    def test_viewer(self, client, conn, project) -> None:
        create_node(conn, project.id, "Frame v1", "2024-01-01", content_md="**notes**")
        resp = client.get("/p/bike-v2")
        assert resp.status_code == 200
        assert "Frames over time" in resp.text
        data = _graph_data(resp.text)
        assert "endpoints" not in data
        (detail,) = data["details"].values()
        assert "<strong>notes</strong>" in detail

    def test_unknown_slug(self, client) -> None:
        assert client.get("/p/nope").status_code == 404

    def test_intents_by_slug(self, client, conn, project) -> None:
        resp = client.post(
            "/p/bike-v2", data={"intent": "createNode", "title": "A", "dateISO": "2024-01-01"}
        )
        assert resp.status_code == 200
        assert len(get_project(conn, project.id).nodes) == 1

    def test_public_3d(self, client, project) -> None:
        assert client.get("/p/bike-v2/3d").status_code == 200

    def test_embed_viewer(self, client, project) -> None:
        for key in ("bike-v2", project.id):
            resp = client.get(f"/embed/view/{key}")
            assert resp.status_code == 200
            assert '<header class="bar">' not in resp.text
        assert client.get("/embed/view/nope").status_code == 404
