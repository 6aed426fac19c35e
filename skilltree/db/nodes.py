"""CRUD operations for the ``nodes`` table."""

from __future__ import annotations

import logging
import sqlite3
import uuid
from time import time
from typing import Any, Optional

from skilltree.db import codec
from skilltree.db.models import MediaItem, Node
from skilltree.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

# Fields ``update_node`` accepts, mapped to their column names.
_UPDATABLE = {
    "title": "title",
    "date_iso": "date_iso",
    "summary": "summary",
    "categories": "categories",
    "media": "media",
    "metrics": "metrics",
    "content_md": "content_md",
    "content_format": "content_format",
    "show_both": "show_both",
}


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _row_to_node(row: sqlite3.Row) -> Node:
    node_id = row["id"]
    return Node(
        id=node_id,
        project_id=row["project_id"],
        title=row["title"],
        date_iso=row["date_iso"],
        categories=codec.CATEGORIES.decode(row["categories"], node_id),
        summary=row["summary"],
        media=codec.MEDIA.decode(row["media"], node_id),
        metrics=codec.METRICS.decode(row["metrics"], node_id),
        content_md=row["content_md"],
        content_format=row["content_format"],
        show_both=bool(row["show_both"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _clean_categories(categories: Optional[list[str]]) -> list[str]:
    return [c.strip() for c in categories or [] if c and c.strip()]


def _require_text(value: Optional[str], label: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{label} is required")
    return str(value).strip()


def now_ms() -> int:
    """Current time as integer milliseconds since the epoch."""
    return int(time() * 1000)


def project_stamp(conn: sqlite3.Connection) -> int:
    """Return an ``updated_at`` value later than every stored project's.

    Two writes inside the same millisecond still order correctly, so the
    project touched last always lists first.
    """
    latest = conn.execute("SELECT MAX(updated_at) FROM projects").fetchone()[0]
    return max(now_ms(), (latest or 0) + 1)


def touch_project(conn: sqlite3.Connection, project_id: str) -> None:
    """Bump the owning project's ``updated_at``."""
    conn.execute(
        "UPDATE projects SET updated_at = ? WHERE id = ?",
        (project_stamp(conn), project_id),
    )


def project_exists(conn: sqlite3.Connection, project_id: str) -> bool:
    row = conn.execute("SELECT 1 FROM projects WHERE id = ?", (project_id,)).fetchone()
    return row is not None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def create_node(
    conn: sqlite3.Connection,
    project_id: str,
    title: str,
    date_iso: str,
    summary: Optional[str] = None,
    categories: Optional[list[str]] = None,
    media: Optional[list[MediaItem]] = None,
    metrics: Optional[dict[str, float]] = None,
    content_md: Optional[str] = None,
    content_format: Optional[str] = None,
    show_both: bool = False,
    node_id: Optional[str] = None,
) -> Node:
    """Insert a new node into a project and return it.

    Args:
        conn: Open DB connection.
        project_id: Owning project.
        title: Milestone title (required).
        date_iso: ISO calendar date, e.g. ``"2024-01-31"`` (required).
        summary: Optional free text.
        categories: Free-form labels; see ``SUGGESTED_CATEGORIES``.
        media: Uploaded images / videos, embedded by value.
        metrics: Metric name to number.
        content_md: Optional markdown body.
        content_format: ``"md"`` when markdown is present.
        show_both: Offer both the markdown and the structured view.
        node_id: Explicit UUID override (auto-generated when omitted).

    Raises:
        ValidationError: title or date missing.
        NotFoundError: the project does not exist.
    """
    title = _require_text(title, "Title")
    date_iso = _require_text(date_iso, "Date")
    if not project_exists(conn, project_id):
        raise NotFoundError(f"Project not found: {project_id!r}")

    nid = node_id or str(uuid.uuid4())
    now = now_ms()

    with conn:
        conn.execute(
            """
            INSERT INTO nodes (id, project_id, title, date_iso, summary, categories,
                               media, metrics, content_md, content_format, show_both,
                               created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                nid,
                project_id,
                title,
                date_iso,
                summary or None,
                codec.CATEGORIES.encode(_clean_categories(categories)),
                codec.MEDIA.encode(media),
                codec.METRICS.encode(metrics),
                content_md or None,
                content_format or None,
                int(bool(show_both)),
                now,
                now,
            ),
        )
        touch_project(conn, project_id)

    logger.info("Created node %s in project %s", nid, project_id)
    return get_node(conn, nid)  # type: ignore[return-value]


def get_node(conn: sqlite3.Connection, node_id: str) -> Optional[Node]:
    """Fetch a single node by its UUID.  Returns ``None`` if not found."""
    row = conn.execute(
        "SELECT * FROM nodes WHERE id = ?", (node_id,)
    ).fetchone()
    return _row_to_node(row) if row else None


def update_node(conn: sqlite3.Connection, node_id: str, **kwargs: Any) -> Node:
    """Patch one or more fields on a node.

    Only the keyword arguments actually passed are written; every other
    column keeps its stored value.  Allowed keywords: ``title``,
    ``date_iso``, ``summary``, ``categories``, ``media``, ``metrics``,
    ``content_md``, ``content_format``, ``show_both``.  ``updated_at`` is
    always refreshed.

    Raises:
        NotFoundError: ``node_id`` does not exist.
        ValidationError: unknown field, no fields, or a blank title / date.
    """
    node = get_node(conn, node_id)
    if node is None:
        raise NotFoundError(f"Node not found: {node_id!r}")

    updates: dict[str, Any] = {}
    for key, value in kwargs.items():
        if key not in _UPDATABLE:
            raise ValidationError(f"Cannot update field {key!r}")
        if key == "title":
            updates["title"] = _require_text(value, "Title")
        elif key == "date_iso":
            updates["date_iso"] = _require_text(value, "Date")
        elif key == "categories":
            updates["categories"] = codec.CATEGORIES.encode(_clean_categories(value))
        elif key == "media":
            updates["media"] = codec.MEDIA.encode(value)
        elif key == "metrics":
            updates["metrics"] = codec.METRICS.encode(value)
        elif key == "show_both":
            updates["show_both"] = int(bool(value))
        else:
            updates[_UPDATABLE[key]] = value or None

    if not updates:
        raise ValidationError("No valid fields provided to update_node()")

    now = now_ms()
    updates["updated_at"] = now
    set_clause = ", ".join(f"{col} = ?" for col in updates)
    values = list(updates.values()) + [node_id]

    with conn:
        conn.execute(
            f"UPDATE nodes SET {set_clause} WHERE id = ?", values  # noqa: S608
        )
        touch_project(conn, node.project_id)

    return get_node(conn, node_id)  # type: ignore[return-value]


def delete_node(conn: sqlite3.Connection, node_id: str) -> None:
    """Delete a node; edges touching it go with it (CASCADE).

    Raises:
        NotFoundError: ``node_id`` does not exist.
    """
    node = get_node(conn, node_id)
    if node is None:
        raise NotFoundError(f"Node not found: {node_id!r}")

    with conn:
        conn.execute("DELETE FROM nodes WHERE id = ?", (node_id,))
        touch_project(conn, node.project_id)
    logger.info("Deleted node %s", node_id)


def list_nodes(conn: sqlite3.Connection, project_id: str) -> list[Node]:
    """Return the nodes of a project in creation order."""
    rows = conn.execute(
        "SELECT * FROM nodes WHERE project_id = ? ORDER BY created_at, rowid",
        (project_id,),
    ).fetchall()
    return [_row_to_node(r) for r in rows]
