"""Dataclass → JSON dict helpers.

Keys are camelCase because the browser scripts and third-party embeds read
them directly.  Optional values that are unset are left out.
"""

from __future__ import annotations

from typing import Any

from skilltree.db.models import Edge, Node, Project, ProjectSummary


def node_dict(node: Node) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": node.id,
        "title": node.title,
        "dateISO": node.date_iso,
        "categories": list(node.categories),
        "showBoth": node.show_both,
    }
    if node.summary is not None:
        data["summary"] = node.summary
    if node.media is not None:
        data["media"] = [m.to_dict() for m in node.media]
    if node.metrics is not None:
        data["metrics"] = dict(node.metrics)
    if node.content_md is not None:
        data["contentMd"] = node.content_md
    if node.content_format is not None:
        data["contentFormat"] = node.content_format
    return data


def edge_dict(edge: Edge) -> dict[str, Any]:
    data: dict[str, Any] = {"id": edge.id, "fromId": edge.from_id, "toId": edge.to_id}
    if edge.kind is not None:
        data["kind"] = edge.kind
    return data


def project_dict(project: Project) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": project.id,
        "slug": project.slug,
        "title": project.title,
    }
    if project.summary is not None:
        data["summary"] = project.summary
    data["nodes"] = [node_dict(n) for n in project.nodes]
    data["edges"] = [edge_dict(e) for e in project.edges]
    return data


def project_summary_dict(project: ProjectSummary) -> dict[str, Any]:
    return {
        "id": project.id,
        "slug": project.slug,
        "title": project.title,
        "summary": project.summary,
        "createdAt": project.created_at,
        "updatedAt": project.updated_at,
    }
