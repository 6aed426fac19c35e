"""Utilities for rendering project graphs in the terminal."""

from __future__ import annotations

from skilltree.db.models import Project


def render_tree(project: Project) -> str:
    """Render a project graph as an ASCII tree.

    Roots are the nodes without incoming edges (or the first node when every
    node sits on a cycle).  A node reachable along several paths is printed
    once, under the first parent that reaches it; nodes no root reaches are
    appended as extra roots.

    Returns:
        String representation of the tree, one node per line.
    """
    node_map = {n.id: n for n in project.nodes}
    adj: dict[str, list[tuple[str, str]]] = {}
    has_parent: set[str] = set()
    for e in project.edges:
        if e.from_id not in node_map or e.to_id not in node_map:
            continue
        adj.setdefault(e.from_id, []).append((e.to_id, e.kind or ""))
        has_parent.add(e.to_id)

    lines = [f"🌳 {project.title}"]
    visited: set[str] = set()

    def _render_node(node_id: str, relation: str, prefix: str, is_last: bool) -> None:
        if node_id in visited:
            return
        visited.add(node_id)
        node = node_map[node_id]

        connector = "└── " if is_last else "├── "
        label = f"[{relation}] " if relation else ""
        lines.append(f"{prefix}{connector}{label}{node.title} ({node.date_iso})")
        child_prefix = prefix + ("    " if is_last else "│   ")

        children = [c for c in adj.get(node_id, []) if c[0] not in visited]
        for i, (child_id, rel) in enumerate(children):
            _render_node(child_id, rel, child_prefix, i == len(children) - 1)

    roots = [n.id for n in project.nodes if n.id not in has_parent] or list(node_map)[:1]
    for i, root_id in enumerate(roots):
        _render_node(root_id, "", "", i == len(roots) - 1)

    # Nodes only reachable through a cycle.
    for node in project.nodes:
        if node.id not in visited:
            _render_node(node.id, "", "", True)

    return "\n".join(lines)
