"""2D graph renderer state.

``Graph2D`` owns what the browser canvas shows: the node and edge props, the
laid-out positions and the "layouting" status.  User gestures are forwarded
to callbacks; the renderer never talks to the database itself.

Layout requests run in a worker thread.  A new ``set_graph`` does not cancel
a request already in flight: every request writes its positions when it
finishes, so the one that completes last wins.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Iterable, Optional

from skilltree.graph.layout import Position, layout_graph

logger = logging.getLogger(__name__)

LAYOUTING = "layouting"
IDLE = "idle"

LayoutFn = Callable[..., dict[str, Position]]


class Graph2D:
    def __init__(
        self,
        nodes: Iterable[Any] = (),
        edges: Iterable[Any] = (),
        *,
        selected_node_id: Optional[str] = None,
        on_node_click: Optional[Callable[[str], Any]] = None,
        on_edge_add: Optional[Callable[[str, str], Any]] = None,
        on_edge_delete: Optional[Callable[[str], Any]] = None,
        layout: Optional[LayoutFn] = None,
        layout_options: Optional[dict[str, int]] = None,
    ) -> None:
        self.nodes: list[Any] = list(nodes)
        self.edges: list[Any] = list(edges)
        self.selected_node_id = selected_node_id
        self.on_node_click = on_node_click
        self.on_edge_add = on_edge_add
        self.on_edge_delete = on_edge_delete
        self.positions: dict[str, Position] = {}
        self._layout = layout or layout_graph
        self._layout_options = layout_options or {}
        self._pending: set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Layout lifecycle
    # ------------------------------------------------------------------
    @property
    def status(self) -> str:
        return LAYOUTING if self._pending else IDLE

    def set_graph(self, nodes: Iterable[Any], edges: Iterable[Any]) -> Optional[asyncio.Task]:
        """Replace the props and request a fresh layout."""
        self.nodes = list(nodes)
        self.edges = list(edges)
        return self.request_layout()

    def request_layout(self) -> Optional[asyncio.Task]:
        """Start a layout for the current props.

        Inside a running event loop the layout is scheduled as a task and
        returned; without one it is computed inline.  Empty graphs skip
        layout entirely.
        """
        if not self.nodes:
            return None
        nodes, edges = list(self.nodes), list(self.edges)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.positions.update(self._layout(nodes, edges, **self._layout_options))
            return None

        task = loop.create_task(self._run_layout(nodes, edges))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _run_layout(self, nodes: list[Any], edges: list[Any]) -> None:
        positions = await asyncio.to_thread(
            self._layout, nodes, edges, **self._layout_options
        )
        self.positions.update(positions)
        logger.debug("Layout finished for %d nodes", len(positions))

    async def wait(self) -> None:
        """Wait until no layout request is pending."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    # ------------------------------------------------------------------
    # Gestures
    # ------------------------------------------------------------------
    def click_node(self, node_id: str) -> Any:
        self.selected_node_id = node_id
        if self.on_node_click:
            return self.on_node_click(node_id)
        return None

    def connect(self, source_id: Optional[str], target_id: Optional[str]) -> Any:
        """Drag from *source_id* onto *target_id*."""
        if not source_id or not target_id:
            return None
        if self.on_edge_add:
            return self.on_edge_add(source_id, target_id)
        return None

    def click_edge(self, edge_id: str) -> Any:
        if self.on_edge_delete:
            return self.on_edge_delete(edge_id)
        return None

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------
    def scene(self) -> dict[str, Any]:
        """JSON-ready description of what the canvas draws."""
        node_ids = {n.id for n in self.nodes}
        nodes = []
        for node in self.nodes:
            position = self.positions.get(node.id)
            nodes.append({
                "id": node.id,
                "title": node.title,
                "dateISO": node.date_iso,
                "categories": list(node.categories[:2]),
                "position": position._asdict() if position else None,
                "selected": node.id == self.selected_node_id,
            })

        # Edges with a missing endpoint cannot be drawn.
        edges = [
            {
                "id": edge.id,
                "source": edge.from_id,
                "target": edge.to_id,
                "label": edge.kind or "",
            }
            for edge in self.edges
            if edge.from_id in node_ids and edge.to_id in node_ids
        ]
        return {
            "status": self.status,
            "selectedNodeId": self.selected_node_id,
            "nodes": nodes,
            "edges": edges,
        }
