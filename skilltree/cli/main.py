"""Skill Tree CLI: entry-point for database, project and server operations.

Usage:
    skilltree --help

Sub-command groups:
    db        → schema initialisation
    project   → create / list / show / export projects
    node      → add nodes
    edge      → connect nodes
"""

from __future__ import annotations

from pathlib import Path

import typer

from skilltree.cli.commands.graph import edge_app, node_app
from skilltree.cli.commands.project import project_app
from skilltree.cli.context import exits_on_error, open_db, require_project
from skilltree.config import settings
from skilltree.graph.graph3d import build_scene
from skilltree.logging_setup import configure_logging
from skilltree.views.pages import graph3d_page

app = typer.Typer(
    name="skilltree",
    help="Skill Tree CLI.",
    no_args_is_help=True,
)


@app.callback()
def main() -> None:
    configure_logging(settings.log_level)


# ---------------------------------------------------------------------------
# DB commands
# ---------------------------------------------------------------------------
db_app = typer.Typer(help="Database operations.", no_args_is_help=True)
app.add_typer(db_app, name="db")


@db_app.command("init")
def db_init() -> None:
    """Initialise the SQLite database (create tables if they do not exist)."""
    with open_db():
        pass
    typer.echo(f"[db init] Database ready at {settings.db_path}")


app.add_typer(project_app, name="project")
app.add_typer(node_app, name="node")
app.add_typer(edge_app, name="edge")


# ---------------------------------------------------------------------------
# Rendering and serving
# ---------------------------------------------------------------------------
@app.command("render3d")
@exits_on_error
def render3d(
    project: str = typer.Argument(..., help="Project slug or ID."),
    output: Path = typer.Option(..., "--output", "-o", help="HTML file to write."),
) -> None:
    """Write a standalone 3D view of a project (three.js loaded from a CDN)."""
    with open_db() as conn:
        target = require_project(conn, project)
    scene = build_scene(target.nodes, target.edges, settings.scene_radius)
    output.write_text(graph3d_page(target, scene, back_url=f"/p/{target.slug}"), encoding="utf-8")
    typer.echo(f"[render3d] Wrote {output}")


@app.command("serve")
def serve(
    host: str = typer.Option("127.0.0.1", help="Interface to bind."),
    port: int = typer.Option(8000, help="Port to listen on."),
    reload: bool = typer.Option(False, help="Restart on code changes."),
) -> None:
    """Run the web app with uvicorn."""
    import uvicorn

    uvicorn.run("skilltree.api.app:app", host=host, port=port, reload=reload)


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
