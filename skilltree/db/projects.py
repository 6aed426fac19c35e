"""CRUD operations for the ``projects`` table.

A Project owns its nodes and edges (``ON DELETE CASCADE``).  ``get_project``
and friends return the whole aggregate so screens never need a second query.
"""

from __future__ import annotations

import logging
import re
import sqlite3
import uuid
from typing import Any, Optional

from skilltree.db.edges import list_edges
from skilltree.db.models import Project, ProjectSummary
from skilltree.db.nodes import list_nodes, project_stamp
from skilltree.errors import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

_SLUG_INVALID = re.compile(r"[^a-z0-9_-]+")
_SLUG_DASHES = re.compile(r"-{2,}")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def slugify(value: str) -> str:
    """Normalise user input into a URL-safe slug (``"Bike V2"`` → ``"bike-v2"``)."""
    slug = re.sub(r"\s+", "-", value.strip().lower())
    slug = _SLUG_INVALID.sub("", slug)
    return _SLUG_DASHES.sub("-", slug).strip("-")


def _row_to_project(conn: sqlite3.Connection, row: sqlite3.Row) -> Project:
    return Project(
        id=row["id"],
        slug=row["slug"],
        title=row["title"],
        summary=row["summary"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        nodes=list_nodes(conn, row["id"]),
        edges=list_edges(conn, row["id"]),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def create_project(
    conn: sqlite3.Connection,
    title: str,
    slug: str,
    summary: Optional[str] = None,
    project_id: Optional[str] = None,
) -> Project:
    """Insert a new project and return it.

    Raises:
        ValidationError: ``title`` or ``slug`` is blank.
        ConflictError: another project already uses the slug.
    """
    title = (title or "").strip()
    normalised = slugify(slug or "")
    if not title or not normalised:
        raise ValidationError("Title and slug are required")

    pid = project_id or str(uuid.uuid4())
    try:
        with conn:
            stamp = project_stamp(conn)
            conn.execute(
                """
                INSERT INTO projects (id, slug, title, summary, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (pid, normalised, title, summary or None, stamp, stamp),
            )
    except sqlite3.IntegrityError as exc:
        raise ConflictError(f"Slug already in use: {normalised!r}") from exc

    logger.info("Created project %s (%s)", pid, normalised)
    return get_project(conn, pid)  # type: ignore[return-value]


def get_project(conn: sqlite3.Connection, project_id: str) -> Optional[Project]:
    """Fetch a project with its nodes and edges.  Returns ``None`` if not found."""
    row = conn.execute(
        "SELECT * FROM projects WHERE id = ?", (project_id,)
    ).fetchone()
    return _row_to_project(conn, row) if row else None


def get_project_by_slug(conn: sqlite3.Connection, slug: str) -> Optional[Project]:
    """Fetch a project by its unique slug.  Returns ``None`` if not found."""
    row = conn.execute(
        "SELECT * FROM projects WHERE slug = ?", (slug,)
    ).fetchone()
    return _row_to_project(conn, row) if row else None


def resolve_project(conn: sqlite3.Connection, slug_or_id: str) -> Optional[Project]:
    """Look a project up by slug first, then by id."""
    return get_project_by_slug(conn, slug_or_id) or get_project(conn, slug_or_id)


def require_project(conn: sqlite3.Connection, project_id: str) -> Project:
    project = get_project(conn, project_id)
    if project is None:
        raise NotFoundError(f"Project not found: {project_id!r}")
    return project


def update_project(conn: sqlite3.Connection, project_id: str, **kwargs: Any) -> Project:
    """Patch ``title`` and/or ``summary`` on a project.

    Raises:
        NotFoundError: ``project_id`` does not exist.
        ValidationError: unknown field, nothing to update or a blank title.
    """
    require_project(conn, project_id)

    allowed = {"title", "summary"}
    updates: dict[str, Any] = {}
    for key, value in kwargs.items():
        if key not in allowed:
            raise ValidationError(f"Cannot update field {key!r}")
        if key == "title" and not (value or "").strip():
            raise ValidationError("Title is required")
        updates[key] = value or None

    if not updates:
        raise ValidationError("No valid fields provided to update_project()")

    updates["updated_at"] = project_stamp(conn)
    set_clause = ", ".join(f"{col} = ?" for col in updates)
    values = list(updates.values()) + [project_id]
    with conn:
        conn.execute(
            f"UPDATE projects SET {set_clause} WHERE id = ?", values  # noqa: S608
        )
    return get_project(conn, project_id)  # type: ignore[return-value]


def delete_project(conn: sqlite3.Connection, project_id: str) -> None:
    """Delete a project together with its nodes and edges (via CASCADE)."""
    with conn:
        cursor = conn.execute("DELETE FROM projects WHERE id = ?", (project_id,))
    if cursor.rowcount == 0:
        raise NotFoundError(f"Project not found: {project_id!r}")
    logger.info("Deleted project %s", project_id)


def list_projects(conn: sqlite3.Connection) -> list[ProjectSummary]:
    """Return every project, most recently updated first."""
    rows = conn.execute(
        """
        SELECT id, slug, title, summary, created_at, updated_at
        FROM   projects
        ORDER  BY updated_at DESC, created_at DESC, rowid DESC
        """
    ).fetchall()
    return [
        ProjectSummary(
            id=r["id"],
            slug=r["slug"],
            title=r["title"],
            summary=r["summary"],
            created_at=r["created_at"],
            updated_at=r["updated_at"],
        )
        for r in rows
    ]
