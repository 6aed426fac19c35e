"""Database layer package.

Public re-exports so callers can write::

    from skilltree.db import get_connection, init_db
    from skilltree.db import get_project, create_node
"""

from skilltree.db.connection import get_connection
from skilltree.db.edges import create_edge, delete_edge, get_edge, list_edges
from skilltree.db.migrations import init_db
from skilltree.db.nodes import create_node, delete_node, get_node, list_nodes, update_node
from skilltree.db.projects import (
    create_project,
    delete_project,
    get_project,
    get_project_by_slug,
    list_projects,
    resolve_project,
    update_project,
)

__all__ = [
    "get_connection",
    "init_db",
    "create_project",
    "delete_project",
    "get_project",
    "get_project_by_slug",
    "list_projects",
    "resolve_project",
    "update_project",
    "create_node",
    "delete_node",
    "get_node",
    "list_nodes",
    "update_node",
    "create_edge",
    "delete_edge",
    "get_edge",
    "list_edges",
]
