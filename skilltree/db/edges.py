"""Operations on the ``edges`` table."""

from __future__ import annotations

import logging
import sqlite3
import uuid
from typing import Optional

from skilltree.db.models import Edge
from skilltree.db.nodes import now_ms, project_exists, touch_project
from skilltree.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def _row_to_edge(row: sqlite3.Row) -> Edge:
    return Edge(
        id=row["id"],
        project_id=row["project_id"],
        from_id=row["from_id"],
        to_id=row["to_id"],
        kind=row["kind"],
        created_at=row["created_at"],
    )


def _node_project(conn: sqlite3.Connection, node_id: str) -> Optional[str]:
    row = conn.execute(
        "SELECT project_id FROM nodes WHERE id = ?", (node_id,)
    ).fetchone()
    return row["project_id"] if row else None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def create_edge(
    conn: sqlite3.Connection,
    project_id: str,
    from_id: str,
    to_id: str,
    kind: Optional[str] = None,
    edge_id: Optional[str] = None,
) -> Edge:
    """Create a directed edge ``from_id -> to_id`` inside a project.

    Duplicate edges and cycles are allowed.

    Raises:
        ValidationError: an endpoint is missing, unknown, or belongs to
            another project.
        NotFoundError: the project does not exist.
    """
    if not from_id or not to_id:
        raise ValidationError("From and To IDs required")
    if not project_exists(conn, project_id):
        raise NotFoundError(f"Project not found: {project_id!r}")
    for label, node_id in (("Source", from_id), ("Target", to_id)):
        if _node_project(conn, node_id) != project_id:
            raise ValidationError(f"{label} node {node_id!r} is not part of this project")

    eid = edge_id or str(uuid.uuid4())
    now = now_ms()
    with conn:
        conn.execute(
            """
            INSERT INTO edges (id, project_id, from_id, to_id, kind, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (eid, project_id, from_id, to_id, (kind or "").strip() or None, now),
        )
        touch_project(conn, project_id)

    logger.info("Created edge %s: %s -> %s (%s)", eid, from_id, to_id, kind or "-")
    return get_edge(conn, eid)  # type: ignore[return-value]


def get_edge(conn: sqlite3.Connection, edge_id: str) -> Optional[Edge]:
    """Fetch a single edge.  Returns ``None`` if not found."""
    row = conn.execute("SELECT * FROM edges WHERE id = ?", (edge_id,)).fetchone()
    return _row_to_edge(row) if row else None


def delete_edge(conn: sqlite3.Connection, edge_id: str) -> None:
    """Delete an edge.

    Raises:
        NotFoundError: ``edge_id`` does not exist.
    """
    edge = get_edge(conn, edge_id)
    if edge is None:
        raise NotFoundError(f"Edge not found: {edge_id!r}")
    with conn:
        conn.execute("DELETE FROM edges WHERE id = ?", (edge_id,))
        touch_project(conn, edge.project_id)
    logger.info("Deleted edge %s", edge_id)


def list_edges(conn: sqlite3.Connection, project_id: str) -> list[Edge]:
    """Return the edges of a project in creation order."""
    rows = conn.execute(
        "SELECT * FROM edges WHERE project_id = ? ORDER BY created_at, rowid",
        (project_id,),
    ).fetchall()
    return [_row_to_edge(r) for r in rows]
