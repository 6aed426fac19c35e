"""Full HTML pages.

Pages are assembled from f-strings; every user value goes through
``html.escape`` and page data travels to the browser as a JSON block read
by the bundled scripts.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from html import escape
from typing import Any, Iterable, Optional

from skilltree.db.models import SUGGESTED_CATEGORIES, SUGGESTED_EDGE_KINDS, Project, ProjectSummary
from skilltree.graph.graph2d import Graph2D
from skilltree.screens.editor import ProjectEditor
from skilltree.serializers import project_dict
from skilltree.views.assets import read_asset
from skilltree.views.cards import render_node_detail

THREE_IMPORT_MAP = {
    "imports": {
        "three": "https://unpkg.com/three@0.160.0/build/three.module.js",
        "three/addons/": "https://unpkg.com/three@0.160.0/examples/jsm/",
    }
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _json_block(element_id: str, data: Any, kind: str = "application/json") -> str:
    payload = json.dumps(data).replace("</", "<\\/")
    return f'<script type="{kind}" id="{element_id}">{payload}</script>'


def _page(
    title: str,
    body: str,
    *,
    scripts: Iterable[str] = (),
    module_script: Optional[str] = None,
    head: str = "",
) -> str:
    inline = "".join(f"<script>{read_asset(name)}</script>" for name in scripts)
    module = f'<script type="module">{read_asset(module_script)}</script>' if module_script else ""
    return (
        "<!DOCTYPE html>"
        '<html lang="en"><head><meta charset="utf-8">'
        '<meta name="viewport" content="width=device-width, initial-scale=1">'
        f"<title>{escape(title)}</title>"
        f"<style>{read_asset('styles.css')}</style>{head}</head>"
        f"<body>{body}{inline}{module}</body></html>"
    )


def _header(project: Project, actions: str = "") -> str:
    summary = f"<p>{escape(project.summary)}</p>" if project.summary else ""
    return (
        '<header class="bar">'
        f"<div><h1>{escape(project.title)}</h1>{summary}</div>"
        f'<div class="actions">{actions}</div>'
        "</header>"
    )


def _datalist(element_id: str, values: Iterable[str]) -> str:
    options = "".join(f'<option value="{escape(v, quote=True)}">' for v in values)
    return f'<datalist id="{element_id}">{options}</datalist>'


def graph_payload(
    project: Project,
    graph: Graph2D,
    endpoints: Optional[dict[str, str]] = None,
) -> dict[str, Any]:
    """Data shared by the page scripts and the ``/graph`` refresh endpoint."""
    payload: dict[str, Any] = {
        "project": project_dict(project),
        "scene": graph.scene(),
        "details": {node.id: render_node_detail(node) for node in project.nodes},
    }
    if endpoints is not None:
        payload["endpoints"] = endpoints
    return payload


# ---------------------------------------------------------------------------
# Pages
# ---------------------------------------------------------------------------

def landing_page() -> str:
    body = (
        '<div class="hero">'
        "<h1>Skill Tree</h1>"
        "<p>Visualize the evolution of your design projects</p>"
        '<a class="button primary" href="/app">Create Project</a>'
        "</div>"
    )
    return _page("Skill Tree", body)


def project_list_page(
    projects: list[ProjectSummary],
    error: Optional[str] = None,
    values: Optional[dict[str, str]] = None,
) -> str:
    values = values or {}
    error_html = f'<div class="error">{escape(error)}</div>' if error else ""
    if projects:
        cards = "".join(
            f'<a class="card" href="/app/{escape(p.id, quote=True)}">'
            f"<h3>{escape(p.title)}</h3>"
            + (f"<p>{escape(p.summary)}</p>" if p.summary else "")
            + f"<small>Updated {datetime.fromtimestamp(p.updated_at / 1000, tz=timezone.utc):%Y-%m-%d}</small>"
            "</a>"
            for p in projects
        )
        listing = f'<div class="projects">{cards}</div>'
    else:
        listing = "<p>No projects yet. Create one above!</p>"

    def value(name: str) -> str:
        return escape(values.get(name, ""), quote=True)

    body = (
        '<div class="container"><h1>Projects</h1>'
        '<div class="card"><h2>Create New Project</h2>'
        '<form class="stack" method="post" action="/app">'
        f'<label for="title">Title</label><input type="text" id="title" name="title" required value="{value("title")}">'
        '<label for="slug">Slug (URL-friendly identifier)</label>'
        f'<input type="text" id="slug" name="slug" required placeholder="my-project" value="{value("slug")}">'
        '<label for="summary">Summary</label>'
        f'<textarea id="summary" name="summary" rows="2">{escape(values.get("summary", ""))}</textarea>'
        f"{error_html}"
        '<p><button class="button primary" type="submit">Create Project</button></p>'
        "</form></div>"
        f"<h2>Existing Projects</h2>{listing}</div>"
    )
    return _page("Projects", body)


def editor_page(editor: ProjectEditor, upload_url: str = "/api/upload") -> str:
    project = editor.project
    base = f"/app/{project.id}"
    endpoints = {"action": base, "graph": f"{base}/graph", "upload": upload_url}
    actions = (
        f'<a class="button" href="/p/{escape(project.slug, quote=True)}" target="_blank" rel="noopener noreferrer">View Public</a> '
        f'<a class="button" href="{base}/3d">3D View</a> '
        '<button class="button primary" type="button" id="add-node">Add Node</button>'
    )
    error_html = escape(editor.error or "")
    left = (
        '<aside class="left"><h2>Actions</h2>'
        '<button class="button" type="button" id="relayout">Relayout Graph</button>'
        '<label for="edge-kind">New edge kind</label>'
        '<input type="text" id="edge-kind" list="edge-kinds" placeholder="improves">'
        f'{_datalist("edge-kinds", SUGGESTED_EDGE_KINDS)}'
        f'<div id="error" class="error"{"" if editor.error else " hidden"}>{error_html}</div>'
        '<form id="node-form" class="stack" hidden>'
        '<h3 id="node-form-title">Add Node</h3>'
        '<input type="hidden" name="intent" value="createNode">'
        '<input type="hidden" name="nodeId" value="">'
        '<label>Title *</label><input type="text" name="title" required>'
        '<label>Date *</label><input type="date" name="dateISO" required>'
        '<label>Categories</label>'
        '<input type="text" name="categories" list="category-list" placeholder="digital, physical, circuit">'
        f'{_datalist("category-list", SUGGESTED_CATEGORIES)}'
        '<label>Summary</label><textarea name="summary" rows="4"></textarea>'
        '<label>Media</label><input type="file" name="files" multiple accept="image/*,video/*">'
        '<ul id="media-list"></ul>'
        '<label>Metrics (JSON)</label><input type="text" name="metricsJson" placeholder=\'{"weight": 1.2}\'>'
        '<label>Markdown Content</label><textarea name="contentMd" rows="8"></textarea>'
        '<label><input type="checkbox" name="showBoth"> Show both (add tabs in view mode)</label>'
        "<p><small>When Markdown is provided, it takes precedence over Details, "
        'unless you tick "Show both".</small></p>'
        '<p><button class="button" type="button" id="cancel-node">Cancel</button> '
        '<button class="button primary" type="submit">Save</button></p>'
        "</form></aside>"
    )
    right = (
        '<aside class="right"><h2>Node Details</h2>'
        '<div id="node-actions" hidden>'
        '<button class="button primary" type="button" id="edit-node">Edit</button> '
        '<button class="button danger" type="button" id="delete-node">Delete</button>'
        '</div><div id="node-panel"></div></aside>'
    )
    body = (
        _header(project, actions)
        + f'<div class="layout">{left}<main id="graph"></main>{right}</div>'
        + _json_block("graph-data", graph_payload(project, editor.graph, endpoints))
    )
    return _page(f"{project.title} · Editor", body, scripts=("graph2d.js", "tabs.js", "editor.js"))


def viewer_page(project: Project, graph: Graph2D, embedded: bool = False) -> str:
    """Read-only graph with a details panel; ``embedded`` drops the chrome for iframes."""
    header = "" if embedded else _header(
        project, f'<a class="button" href="/p/{escape(project.slug, quote=True)}/3d">3D View</a>'
    )
    body = (
        header
        + '<div class="layout"><main id="graph"></main>'
        + '<aside class="right" id="node-panel" hidden></aside></div>'
        + _json_block("graph-data", graph_payload(project, graph))
    )
    return _page(project.title, body, scripts=("graph2d.js", "tabs.js", "viewer.js"))


def graph3d_page(project: Project, scene: dict[str, Any], back_url: str) -> str:
    body = (
        _header(project, f'<a class="button" href="{escape(back_url, quote=True)}">2D View</a>')
        + '<div id="graph3d"></div>'
        + _json_block("scene-data", scene)
    )
    head = _json_block("three-imports", THREE_IMPORT_MAP, kind="importmap")
    return _page(f"{project.title} · 3D", body, module_script="graph3d.js", head=head)


def message_page(title: str, message: str) -> str:
    body = (
        f'<div class="container"><h1>{escape(title)}</h1><p>{escape(message)}</p>'
        '<p><a href="/app">Back to projects</a></p></div>'
    )
    return _page(title, body)
