"""HTML screens and the intent endpoints their scripts post to.

Routes
------
GET  /                         Landing page
GET  /app                      Project list + create form
POST /app                      Create a project (303 to its editor)
GET  /app/{project_id}         Project editor
POST /app/{project_id}         Run one intent (createNode, updateNode, ...)
GET  /app/{project_id}/graph   Fresh project DTO, layout and scene
GET  /app/{project_id}/3d      3D view
GET  /p/{slug}                 Public read-only viewer
POST /p/{slug}                 Same intents, project resolved by slug
GET  /p/{slug}/3d              Public 3D view
GET  /embed/view/{slug_or_id}  Minimal viewer for iframes
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from skilltree.api.deps import get_db, get_settings
from skilltree.config import Settings
from skilltree.db.models import Project
from skilltree.db.projects import create_project, get_project_by_slug, list_projects, resolve_project
from skilltree.errors import NotFoundError, ValidationError
from skilltree.graph.graph2d import Graph2D
from skilltree.graph.graph3d import build_scene
from skilltree.screens import forms
from skilltree.screens.editor import ProjectEditor
from skilltree.serializers import project_dict
from skilltree.views import pages

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _not_found(message: str) -> HTMLResponse:
    return HTMLResponse(pages.message_page("Not found", message), status_code=404)


async def _laid_out(graph: Graph2D) -> Graph2D:
    graph.request_layout()
    await graph.wait()
    return graph


async def _run_intent(editor: ProjectEditor, request: Request) -> dict[str, Any]:
    form = await request.form()
    intent = forms.require_intent(form)
    editor.submit(intent, form)
    await editor.graph.wait()
    return {"success": True, "project": project_dict(editor.project)}


def _viewer_graph(project: Project, settings: Settings) -> Graph2D:
    return Graph2D(project.nodes, project.edges, layout_options=settings.layout_options())


# ---------------------------------------------------------------------------
# Landing and project list
# ---------------------------------------------------------------------------

@router.get("/", response_class=HTMLResponse)
def landing() -> str:
    return pages.landing_page()


@router.get("/app", response_class=HTMLResponse)
def project_list(conn: sqlite3.Connection = Depends(get_db)) -> str:
    return pages.project_list_page(list_projects(conn))


@router.post("/app", response_model=None)
def project_create(
    title: str = Form(default=""),
    slug: str = Form(default=""),
    summary: str = Form(default=""),
    conn: sqlite3.Connection = Depends(get_db),
) -> HTMLResponse | RedirectResponse:
    try:
        project = create_project(conn, title, slug, summary or None)
    except ValidationError as exc:
        values = {"title": title, "slug": slug, "summary": summary}
        body = pages.project_list_page(list_projects(conn), error=str(exc), values=values)
        return HTMLResponse(body, status_code=400)
    return RedirectResponse(f"/app/{project.id}", status_code=303)


# ---------------------------------------------------------------------------
# Editor
# ---------------------------------------------------------------------------

@router.get("/app/{project_id}", response_class=HTMLResponse)
async def editor_screen(
    project_id: str,
    conn: sqlite3.Connection = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> HTMLResponse:
    try:
        editor = ProjectEditor.open(conn, project_id, layout_options=settings.layout_options())
    except NotFoundError:
        return _not_found("Project not found")
    await _laid_out(editor.graph)
    return HTMLResponse(pages.editor_page(editor, upload_url="/api/upload"))


@router.post("/app/{project_id}")
async def editor_action(
    project_id: str,
    request: Request,
    conn: sqlite3.Connection = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    editor = ProjectEditor.open(conn, project_id, layout_options=settings.layout_options())
    return await _run_intent(editor, request)


@router.get("/app/{project_id}/graph")
async def editor_graph(
    project_id: str,
    conn: sqlite3.Connection = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    editor = ProjectEditor.open(conn, project_id, layout_options=settings.layout_options())
    graph = await _laid_out(editor.graph)
    payload = pages.graph_payload(editor.project, graph)
    payload["layout"] = {node_id: pos._asdict() for node_id, pos in graph.positions.items()}
    return payload


@router.get("/app/{project_id}/3d", response_class=HTMLResponse)
def editor_3d(
    project_id: str,
    conn: sqlite3.Connection = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> HTMLResponse:
    project = resolve_project(conn, project_id)
    if project is None:
        return _not_found("Project not found")
    scene = build_scene(project.nodes, project.edges, settings.scene_radius)
    return HTMLResponse(pages.graph3d_page(project, scene, back_url=f"/app/{project.id}"))


# ---------------------------------------------------------------------------
# Public viewer and embed viewer
# ---------------------------------------------------------------------------

@router.get("/p/{slug}", response_class=HTMLResponse)
async def public_viewer(
    slug: str,
    conn: sqlite3.Connection = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> HTMLResponse:
    project = get_project_by_slug(conn, slug)
    if project is None:
        return _not_found("Project not found")
    graph = await _laid_out(_viewer_graph(project, settings))
    return HTMLResponse(pages.viewer_page(project, graph))


@router.post("/p/{slug}")
async def public_action(
    slug: str,
    request: Request,
    conn: sqlite3.Connection = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    editor = ProjectEditor.open_by_slug(conn, slug, layout_options=settings.layout_options())
    return await _run_intent(editor, request)


@router.get("/p/{slug}/3d", response_class=HTMLResponse)
def public_3d(
    slug: str,
    conn: sqlite3.Connection = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> HTMLResponse:
    project = get_project_by_slug(conn, slug)
    if project is None:
        return _not_found("Project not found")
    scene = build_scene(project.nodes, project.edges, settings.scene_radius)
    return HTMLResponse(pages.graph3d_page(project, scene, back_url=f"/p/{project.slug}"))


@router.get("/embed/view/{slug_or_id}", response_class=HTMLResponse)
async def embed_viewer(
    slug_or_id: str,
    conn: sqlite3.Connection = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> HTMLResponse:
    project = resolve_project(conn, slug_or_id)
    if project is None:
        return _not_found("Project not found")
    graph = await _laid_out(_viewer_graph(project, settings))
    return HTMLResponse(pages.viewer_page(project, graph, embedded=True))
