"""Tests for the 2D renderer state and the 3D scene geometry."""

from __future__ import annotations

import math
import threading

import pytest

from skilltree.db.models import Edge, Node
from skilltree.graph.graph2d import IDLE, LAYOUTING, Graph2D
from skilltree.graph.graph3d import build_scene, edge_cylinders, place_nodes
from skilltree.graph.layout import Position


def _node(node_id: str, categories: list[str] | None = None) -> Node:
    return Node(id=node_id, project_id="p", title=node_id.upper(), date_iso="2024-01-01",
                categories=categories or [])


def _edge(edge_id: str, source: str, target: str, kind: str | None = None) -> Edge:
    return Edge(id=edge_id, project_id="p", from_id=source, to_id=target, kind=kind)


# ---------------------------------------------------------------------------
# 2D
# ---------------------------------------------------------------------------

class TestGraph2DLayout:
    def test_without_event_loop_layout_is_inline(self) -> None:
        graph = Graph2D([_node("a"), _node("b")], [_edge("e", "a", "b")])
        assert graph.request_layout() is None
        assert set(graph.positions) == {"a", "b"}
        assert graph.status == IDLE

    async def test_status_while_layouting(self) -> None:
        release = threading.Event()

        def slow_layout(nodes, edges, **options):
            release.wait(timeout=5)
            return {n.id: Position(0.0, 0.0) for n in nodes}

        graph = Graph2D([_node("a")], [], layout=slow_layout)
        graph.request_layout()
        assert graph.status == LAYOUTING
        assert graph.scene()["nodes"][0]["position"] is None
        release.set()
        await graph.wait()
        assert graph.status == IDLE
        assert graph.scene()["nodes"][0]["position"] == {"x": 0.0, "y": 0.0}

    async def test_last_to_complete_wins(self) -> None:
        first_release = threading.Event()

        def layout(nodes, edges, **options):
            if len(nodes) == 1:
                first_release.wait(timeout=5)
                return {"a": Position(1.0, 1.0)}
            return {"a": Position(2.0, 2.0), "b": Position(3.0, 3.0)}

        graph = Graph2D(layout=layout)
        graph.set_graph([_node("a")], [])
        second = graph.set_graph([_node("a"), _node("b")], [])
        await second
        assert graph.positions["a"] == Position(2.0, 2.0)
        first_release.set()
        await graph.wait()
        # The slower, older request finished last.
        assert graph.positions["a"] == Position(1.0, 1.0)

    async def test_empty_graph_skips_layout(self) -> None:
        calls = []
        graph = Graph2D(layout=lambda nodes, edges, **o: calls.append(nodes) or {})
        assert graph.set_graph([], []) is None
        await graph.wait()
        assert calls == []
        assert graph.status == IDLE

    async def test_layout_options_are_forwarded(self) -> None:
        seen = {}

        def layout(nodes, edges, **options):
            seen.update(options)
            return {}

        graph = Graph2D([_node("a")], [], layout=layout, layout_options={"node_width": 10})
        graph.request_layout()
        await graph.wait()
        assert seen == {"node_width": 10}


class TestGraph2DGestures:
    def test_click_node_selects_and_notifies(self) -> None:
        clicked = []
        graph = Graph2D([_node("a")], [], on_node_click=clicked.append)
        graph.click_node("a")
        assert clicked == ["a"]
        assert graph.selected_node_id == "a"
        assert graph.scene()["nodes"][0]["selected"] is True

    def test_connect(self) -> None:
        added = []
        graph = Graph2D(on_edge_add=lambda s, t: added.append((s, t)))
        graph.connect("a", "b")
        graph.connect("a", None)
        graph.connect("", "b")
        assert added == [("a", "b")]

    def test_click_edge(self) -> None:
        deleted = []
        graph = Graph2D(on_edge_delete=deleted.append)
        graph.click_edge("e1")
        assert deleted == ["e1"]

    def test_gestures_without_callbacks_are_noops(self) -> None:
        graph = Graph2D([_node("a")], [])
        assert graph.connect("a", "a") is None
        assert graph.click_edge("e") is None


class TestGraph2DScene:
    def test_scene_shape(self) -> None:
        graph = Graph2D(
            [_node("a", ["digital", "physical", "circuit"]), _node("b")],
            [_edge("e1", "a", "b", "improves"), _edge("e2", "b", "a")],
            selected_node_id="b",
        )
        graph.request_layout()
        scene = graph.scene()
        assert scene["status"] == IDLE
        assert scene["selectedNodeId"] == "b"
        first = scene["nodes"][0]
        assert first["categories"] == ["digital", "physical"]
        assert first["dateISO"] == "2024-01-01"
        assert set(first["position"]) == {"x", "y"}
        assert scene["edges"] == [
            {"id": "e1", "source": "a", "target": "b", "label": "improves"},
            {"id": "e2", "source": "b", "target": "a", "label": ""},
        ]

    def test_edges_with_missing_endpoint_are_not_drawn(self) -> None:
        graph = Graph2D([_node("a")], [_edge("e1", "a", "ghost")])
        assert graph.scene()["edges"] == []


# ---------------------------------------------------------------------------
# 3D
# ---------------------------------------------------------------------------

class TestPlaceNodes:
    def test_circle_placement(self) -> None:
        positions = place_nodes([_node("a"), _node("b"), _node("c"), _node("d")], radius=2.0)
        assert positions["a"] == pytest.approx((2.0, -1.0, 0.0))
        assert positions["b"] == pytest.approx((0.0, -0.5, 2.0), abs=1e-9)
        assert positions["c"] == pytest.approx((-2.0, 0.0, 0.0), abs=1e-9)
        assert positions["d"] == pytest.approx((0.0, -1.0, -2.0), abs=1e-9)

    def test_all_on_the_circle(self) -> None:
        positions = place_nodes([_node(str(i)) for i in range(7)])
        for x, _, z in positions.values():
            assert math.hypot(x, z) == pytest.approx(3.0)

    def test_empty(self) -> None:
        assert place_nodes([]) == {}


class TestEdgeCylinders:
    def test_geometry(self) -> None:
        positions = {"a": (0.0, 0.0, 0.0), "b": (0.0, 4.0, 0.0)}
        (cyl,) = edge_cylinders([_edge("e", "a", "b")], positions)
        assert cyl.midpoint == (0.0, 2.0, 0.0)
        assert cyl.length == 4.0
        assert cyl.direction == (0.0, 1.0, 0.0)

    def test_missing_endpoint_skipped(self) -> None:
        positions = {"a": (0.0, 0.0, 0.0)}
        assert edge_cylinders([_edge("e", "a", "ghost")], positions) == []

    def test_build_scene(self) -> None:
        scene = build_scene([_node("a"), _node("b")], [_edge("e", "a", "b"), _edge("x", "a", "z")])
        assert scene["radius"] == 3.0
        assert [n["id"] for n in scene["nodes"]] == ["a", "b"]
        assert [e["edge_id"] for e in scene["edges"]] == ["e"]
