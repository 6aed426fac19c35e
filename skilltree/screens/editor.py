"""Project editor screen.

``ProjectEditor`` composes a loaded project with a :class:`Graph2D`.  Graph
gestures and form posts both end up in :meth:`ProjectEditor.submit`, which
performs exactly one DB mutation and then re-fetches the whole project so the
graph always reflects what is stored.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any, Mapping, Optional

from skilltree.db.edges import create_edge, delete_edge, get_edge
from skilltree.db.models import Edge, Node, Project
from skilltree.db.nodes import create_node, delete_node, get_node, update_node
from skilltree.db.projects import get_project, get_project_by_slug
from skilltree.errors import NotFoundError, SkillTreeError, ValidationError
from skilltree.graph.graph2d import Graph2D
from skilltree.screens import forms

logger = logging.getLogger(__name__)


class ProjectEditor:
    def __init__(
        self,
        conn: sqlite3.Connection,
        project: Project,
        *,
        layout_options: Optional[dict[str, int]] = None,
    ) -> None:
        self.conn = conn
        self.project = project
        self.error: Optional[str] = None
        self.graph = Graph2D(
            project.nodes,
            project.edges,
            on_node_click=self.select_node,
            on_edge_add=self.add_edge,
            on_edge_delete=self.remove_edge,
            layout_options=layout_options,
        )

    @classmethod
    def open(cls, conn: sqlite3.Connection, project_id: str, **kwargs: Any) -> "ProjectEditor":
        project = get_project(conn, project_id)
        if project is None:
            raise NotFoundError(f"Project not found: {project_id!r}")
        return cls(conn, project, **kwargs)

    @classmethod
    def open_by_slug(cls, conn: sqlite3.Connection, slug: str, **kwargs: Any) -> "ProjectEditor":
        project = get_project_by_slug(conn, slug)
        if project is None:
            raise NotFoundError(f"Project not found: {slug!r}")
        return cls(conn, project, **kwargs)

    # ------------------------------------------------------------------
    # Selection and graph gestures
    # ------------------------------------------------------------------
    @property
    def selected_node(self) -> Optional[Node]:
        return self.project.find_node(self.graph.selected_node_id)

    def select_node(self, node_id: str) -> Optional[Node]:
        return self.project.find_node(node_id)

    def add_edge(self, from_id: str, to_id: str, kind: Optional[str] = None) -> Edge:
        form = {"fromId": from_id, "toId": to_id, "kind": kind or ""}
        return self.submit(forms.CREATE_EDGE, form)

    def remove_edge(self, edge_id: str) -> None:
        return self.submit(forms.DELETE_EDGE, {"edgeId": edge_id})

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def submit(self, intent: str, form: Mapping[str, Any]) -> Any:
        """Run one intent, then reload the project.

        Errors are kept in ``self.error`` for inline display and re-raised.
        """
        try:
            result = self._dispatch(intent, form)
        except SkillTreeError as exc:
            self.error = str(exc)
            logger.info("%s failed on project %s: %s", intent, self.project.id, exc)
            raise
        self.error = None
        self.reload()
        return result

    def reload(self) -> Project:
        """Re-fetch the project and hand the new props to the graph."""
        project = get_project(self.conn, self.project.id)
        if project is None:
            raise NotFoundError(f"Project not found: {self.project.id!r}")
        self.project = project
        if project.find_node(self.graph.selected_node_id) is None:
            self.graph.selected_node_id = None
        self.graph.set_graph(project.nodes, project.edges)
        return project

    def _own_node(self, node_id: str) -> Node:
        node = get_node(self.conn, node_id)
        if node is None or node.project_id != self.project.id:
            raise NotFoundError(f"Node not found: {node_id!r}")
        return node

    def _own_edge(self, edge_id: str) -> Edge:
        edge = get_edge(self.conn, edge_id)
        if edge is None or edge.project_id != self.project.id:
            raise NotFoundError(f"Edge not found: {edge_id!r}")
        return edge

    def _dispatch(self, intent: str, form: Mapping[str, Any]) -> Any:
        if intent == forms.CREATE_NODE:
            return create_node(self.conn, self.project.id, **forms.node_fields(form))

        if intent == forms.UPDATE_NODE:
            node_id = forms.require_field(form, "nodeId", "Node ID required")
            self._own_node(node_id)
            return update_node(self.conn, node_id, **forms.node_fields(form, partial=True))

        if intent == forms.DELETE_NODE:
            node_id = forms.require_field(form, "nodeId", "Node ID required")
            self._own_node(node_id)
            return delete_node(self.conn, node_id)

        if intent == forms.CREATE_EDGE:
            from_id = str(form.get("fromId") or "").strip()
            to_id = str(form.get("toId") or "").strip()
            return create_edge(
                self.conn, self.project.id, from_id, to_id, kind=form.get("kind") or None
            )

        if intent == forms.DELETE_EDGE:
            edge_id = forms.require_field(form, "edgeId", "Edge ID required")
            self._own_edge(edge_id)
            return delete_edge(self.conn, edge_id)

        raise ValidationError("Unknown intent")
