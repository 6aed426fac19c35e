"""Layered (Sugiyama-style) top-down layout for the 2D graph view.

The graph work is delegated to networkx: cycle detection, acyclicity checks
and topological generations.  This module only turns its answers into pixel
coordinates.

Cycles
------
Edges that close a cycle are found with :func:`networkx.find_cycle` and left
out of the layering.  They are reported in ``LayoutResult.reversed_edges``
and are the only edges allowed to point upward (or sideways) in the drawing;
every other edge goes from an upper layer to a strictly lower one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, NamedTuple

import networkx as nx

logger = logging.getLogger(__name__)

NODE_WIDTH = 260
NODE_HEIGHT = 120
NODE_SPACING = 32
LAYER_SPACING = 60


class Position(NamedTuple):
    x: float
    y: float


@dataclass
class LayoutResult:
    positions: dict[str, Position] = field(default_factory=dict)
    layers: list[list[str]] = field(default_factory=list)
    reversed_edges: list[tuple[str, str]] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Input normalisation
# ---------------------------------------------------------------------------

def _node_id(node: Any) -> str:
    if isinstance(node, dict):
        return str(node["id"])
    if isinstance(node, str):
        return node
    return str(node.id)


def _edge_ends(edge: Any) -> tuple[str, str]:
    if isinstance(edge, dict):
        source = edge.get("fromId", edge.get("from_id", edge.get("source")))
        target = edge.get("toId", edge.get("to_id", edge.get("target")))
        return str(source), str(target)
    if isinstance(edge, tuple):
        return str(edge[0]), str(edge[1])
    return str(edge.from_id), str(edge.to_id)


# ---------------------------------------------------------------------------
# Layering
# ---------------------------------------------------------------------------

def _break_cycles(graph: nx.DiGraph, roots: list[str]) -> list[tuple[str, str]]:
    """Remove one edge per cycle until *graph* is acyclic; return the removed edges."""
    removed: list[tuple[str, str]] = []
    while not nx.is_directed_acyclic_graph(graph):
        cycle = nx.find_cycle(graph, source=roots)
        source, target = cycle[-1][0], cycle[-1][1]
        graph.remove_edge(source, target)
        removed.append((source, target))
    return removed


def _order_layers(
    generations: list[list[str]],
    predecessors: dict[str, list[str]],
    input_order: dict[str, int],
) -> list[list[str]]:
    """Order each layer by the barycentre of its predecessors (one downward sweep)."""
    slot: dict[str, float] = {}
    ordered: list[list[str]] = []
    for depth, layer in enumerate(generations):
        def weight(node_id: str) -> tuple[float, int]:
            preds = [slot[p] for p in predecessors.get(node_id, ()) if p in slot]
            centre = sum(preds) / len(preds) if preds and depth else float(input_order[node_id])
            return centre, input_order[node_id]

        layer = sorted(layer, key=weight)
        for index, node_id in enumerate(layer):
            slot[node_id] = float(index)
        ordered.append(layer)
    return ordered


def compute_layout(
    nodes: Iterable[Any],
    edges: Iterable[Any],
    *,
    node_width: int = NODE_WIDTH,
    node_height: int = NODE_HEIGHT,
    node_spacing: int = NODE_SPACING,
    layer_spacing: int = LAYER_SPACING,
) -> LayoutResult:
    """Compute layers, cycle-breaking edges and coordinates.

    Edges whose endpoints are not in *nodes* and self-loops are ignored.
    """
    ids = list(dict.fromkeys(_node_id(n) for n in nodes))
    if not ids:
        return LayoutResult()
    input_order = {node_id: index for index, node_id in enumerate(ids)}

    graph = nx.DiGraph()
    graph.add_nodes_from(ids)
    for edge in edges:
        source, target = _edge_ends(edge)
        if source in input_order and target in input_order and source != target:
            graph.add_edge(source, target)

    reversed_edges = _break_cycles(graph, ids)
    generations = [
        sorted(gen, key=input_order.__getitem__)
        for gen in nx.topological_generations(graph)
    ]
    predecessors = {n: list(graph.predecessors(n)) for n in graph.nodes}
    layers = _order_layers(generations, predecessors, input_order)

    step_x = node_width + node_spacing
    step_y = node_height + layer_spacing
    widest = max(len(layer) for layer in layers)
    full_width = widest * step_x - node_spacing

    positions: dict[str, Position] = {}
    for depth, layer in enumerate(layers):
        offset = (full_width - (len(layer) * step_x - node_spacing)) / 2
        for index, node_id in enumerate(layer):
            positions[node_id] = Position(float(offset + index * step_x), float(depth * step_y))

    logger.debug(
        "Laid out %d nodes in %d layers (%d cycle edges)",
        len(positions), len(layers), len(reversed_edges),
    )
    return LayoutResult(positions=positions, layers=layers, reversed_edges=reversed_edges)


def layout_graph(nodes: Iterable[Any], edges: Iterable[Any], **options: int) -> dict[str, Position]:
    """Return one :class:`Position` per distinct node id."""
    return compute_layout(nodes, edges, **options).positions
