"""Graph layout and renderer state for the 2D and 3D views."""

from skilltree.graph.graph2d import Graph2D
from skilltree.graph.graph3d import build_scene, edge_cylinders, place_nodes
from skilltree.graph.layout import LayoutResult, Position, compute_layout, layout_graph

__all__ = [
    "Graph2D",
    "LayoutResult",
    "Position",
    "build_scene",
    "compute_layout",
    "edge_cylinders",
    "layout_graph",
    "place_nodes",
]
