"""JSON REST endpoints for projects.

Routes
------
GET    /api/projects         List projects, most recently updated first
POST   /api/projects         Create a project
GET    /api/projects/{id}    Full project DTO (nodes + edges)
DELETE /api/projects/{id}    Delete a project (nodes and edges cascade)
"""

from __future__ import annotations

import sqlite3
from typing import Any, Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from skilltree.api.deps import get_db
from skilltree.db.projects import create_project, delete_project, list_projects, resolve_project
from skilltree.errors import NotFoundError
from skilltree.serializers import project_dict, project_summary_dict

router = APIRouter()


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------

class ProjectCreate(BaseModel):
    title: str
    slug: str
    summary: Optional[str] = None


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("", response_model=list[dict[str, Any]])
def list_projects_endpoint(conn: sqlite3.Connection = Depends(get_db)) -> list[dict[str, Any]]:
    return [project_summary_dict(p) for p in list_projects(conn)]


@router.post("", status_code=201, response_model=dict[str, Any])
def create_project_endpoint(
    body: ProjectCreate,
    conn: sqlite3.Connection = Depends(get_db),
) -> dict[str, Any]:
    """Create a new project and return it."""
    project = create_project(conn, body.title, body.slug, body.summary)
    return project_dict(project)


@router.get("/{project_id}", response_model=dict[str, Any])
def get_project_endpoint(project_id: str, conn: sqlite3.Connection = Depends(get_db)) -> dict[str, Any]:
    """Return the project looked up by slug or id."""
    project = resolve_project(conn, project_id)
    if project is None:
        raise NotFoundError(f"Project '{project_id}' not found.")
    return project_dict(project)


@router.delete("/{project_id}", status_code=204)
def delete_project_endpoint(project_id: str, conn: sqlite3.Connection = Depends(get_db)) -> Response:
    delete_project(conn, project_id)
    return Response(status_code=204)
