"""3D scene geometry: nodes on a circle, edges as cylinders.

Placement is fixed and purely cosmetic: node ``i`` of ``n`` sits at angle
``i / n * 2π`` on a circle of radius ``radius`` with a three-level vertical
stagger.  Nothing avoids overlaps.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Iterable

Vec3 = tuple[float, float, float]

DEFAULT_RADIUS = 3.0


@dataclass
class Cylinder:
    edge_id: str
    from_id: str
    to_id: str
    start: Vec3
    end: Vec3
    midpoint: Vec3
    length: float
    direction: Vec3


def place_nodes(nodes: Iterable[Any], radius: float = DEFAULT_RADIUS) -> dict[str, Vec3]:
    nodes = list(nodes)
    count = len(nodes)
    positions: dict[str, Vec3] = {}
    for index, node in enumerate(nodes):
        angle = (index / count) * math.pi * 2
        x = math.cos(angle) * radius
        z = math.sin(angle) * radius
        y = (index % 3) * 0.5 - 1
        positions[node.id] = (x, y, z)
    return positions


def edge_cylinders(edges: Iterable[Any], positions: dict[str, Vec3]) -> list[Cylinder]:
    """One cylinder per drawable edge; edges with an unknown endpoint are skipped."""
    cylinders: list[Cylinder] = []
    for edge in edges:
        start = positions.get(edge.from_id)
        end = positions.get(edge.to_id)
        if start is None or end is None:
            continue
        delta = (end[0] - start[0], end[1] - start[1], end[2] - start[2])
        length = math.sqrt(sum(d * d for d in delta))
        direction = tuple(d / length for d in delta) if length else (0.0, 1.0, 0.0)
        cylinders.append(
            Cylinder(
                edge_id=edge.id,
                from_id=edge.from_id,
                to_id=edge.to_id,
                start=start,
                end=end,
                midpoint=(
                    (start[0] + end[0]) / 2,
                    (start[1] + end[1]) / 2,
                    (start[2] + end[2]) / 2,
                ),
                length=length,
                direction=direction,  # type: ignore[arg-type]
            )
        )
    return cylinders


def build_scene(
    nodes: Iterable[Any],
    edges: Iterable[Any],
    radius: float = DEFAULT_RADIUS,
) -> dict[str, Any]:
    """JSON-ready scene consumed by the three.js page."""
    nodes = list(nodes)
    positions = place_nodes(nodes, radius)
    return {
        "radius": radius,
        "nodes": [
            {"id": n.id, "title": n.title, "position": list(positions[n.id])}
            for n in nodes
        ],
        "edges": [asdict(c) for c in edge_cylinders(edges, positions)],
    }
