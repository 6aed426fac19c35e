"""Tests for the layered 2D layout."""

from __future__ import annotations

import pytest

from skilltree.graph.layout import Position, compute_layout, layout_graph

OPTS = {"node_width": 100, "node_height": 50, "node_spacing": 10, "layer_spacing": 20}


def _nodes(*ids: str) -> list[dict]:
    return [{"id": i} for i in ids]


class TestLayoutGraph:
    def test_empty(self) -> None:
        assert layout_graph([], []) == {}

    @pytest.mark.parametrize("count", [1, 2, 5, 12])
    def test_one_position_per_node(self, count: int) -> None:
        ids = [f"n{i}" for i in range(count)]
        edges = [(ids[i], ids[i + 1]) for i in range(count - 1)]
        positions = layout_graph(_nodes(*ids), edges)
        assert set(positions) == set(ids)
        assert len(set(positions.values())) == count

    def test_duplicate_node_ids_collapse(self) -> None:
        assert len(layout_graph(_nodes("a", "a", "b"), [])) == 2

    def test_chain_is_top_down(self) -> None:
        positions = layout_graph(_nodes("a", "b", "c"), [("a", "b"), ("b", "c")], **OPTS)
        assert positions["a"] == Position(0.0, 0.0)
        assert positions["b"] == Position(0.0, 70.0)
        assert positions["c"] == Position(0.0, 140.0)

    def test_siblings_share_a_layer(self) -> None:
        positions = layout_graph(_nodes("root", "l", "r"), [("root", "l"), ("root", "r")], **OPTS)
        assert positions["l"].y == positions["r"].y == 70.0
        assert positions["r"].x - positions["l"].x == 110.0
        # The single root is centred over the wider layer.
        assert positions["root"].x == 55.0

    def test_edges_point_downward(self) -> None:
        edges = [("a", "b"), ("a", "c"), ("b", "d"), ("c", "d"), ("a", "d")]
        positions = layout_graph(_nodes("a", "b", "c", "d"), edges)
        for source, target in edges:
            assert positions[source].y < positions[target].y

    def test_unknown_endpoints_and_self_loops_ignored(self) -> None:
        positions = layout_graph(_nodes("a", "b"), [("a", "ghost"), ("a", "a"), ("a", "b")])
        assert set(positions) == {"a", "b"}
        assert positions["a"].y < positions["b"].y

    def test_accepts_objects_and_camel_case_dicts(self) -> None:
        class N:
            def __init__(self, id):
                self.id = id

        positions = layout_graph([N("a"), N("b")], [{"fromId": "a", "toId": "b"}])
        assert positions["a"].y < positions["b"].y


class TestCycles:
    def test_cycle_is_broken_and_reported(self) -> None:
        result = compute_layout(_nodes("a", "b", "c"), [("a", "b"), ("b", "c"), ("c", "a")])
        assert len(result.positions) == 3
        assert len(result.reversed_edges) == 1
        kept = {("a", "b"), ("b", "c"), ("c", "a")} - set(result.reversed_edges)
        for source, target in kept:
            assert result.positions[source].y < result.positions[target].y

    def test_two_node_cycle(self) -> None:
        result = compute_layout(_nodes("a", "b"), [("a", "b"), ("b", "a")])
        assert len(result.layers) == 2
        assert len(result.reversed_edges) == 1

    def test_layers_cover_every_node_once(self) -> None:
        result = compute_layout(
            _nodes("a", "b", "c", "d"), [("a", "b"), ("b", "a"), ("c", "d")]
        )
        flat = [n for layer in result.layers for n in layer]
        assert sorted(flat) == ["a", "b", "c", "d"]
