"""Endpoints used by third-party embeds.

Routes
------
GET /api/embed/{slug_or_id}   Project DTO with permissive CORS headers
GET /embed                    Bootstrap script rendering ``[data-project]`` elements
"""

from __future__ import annotations

import sqlite3

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, Response

from skilltree.api.deps import get_db, get_settings
from skilltree.config import Settings
from skilltree.db.projects import resolve_project
from skilltree.errors import NotFoundError, ValidationError
from skilltree.serializers import project_dict
from skilltree.views.assets import build_embed_script

router = APIRouter()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET",
}


@router.get("/api/embed/")
def embed_project_missing_id() -> JSONResponse:
    raise ValidationError("Project ID required")


@router.get("/api/embed/{slug_or_id}")
def embed_project(slug_or_id: str, conn: sqlite3.Connection = Depends(get_db)) -> JSONResponse:
    """Return the project (looked up by slug, then id) as a DTO."""
    key = slug_or_id.strip()
    if not key:
        raise ValidationError("Project ID required")
    project = resolve_project(conn, key)
    if project is None:
        raise NotFoundError("Project not found")
    return JSONResponse(project_dict(project), headers=CORS_HEADERS)


@router.get("/embed")
def embed_script(settings: Settings = Depends(get_settings)) -> Response:
    return Response(
        build_embed_script(settings.public_base_url),
        media_type="text/javascript; charset=utf-8",
        headers={"Cache-Control": f"public, max-age={settings.embed_cache_seconds}"},
    )
