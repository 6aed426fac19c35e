"""Project management commands."""

import json
from datetime import datetime
from typing import Optional

import typer

from skilltree.cli.context import exits_on_error, open_db, require_project
from skilltree.cli.rendering import render_tree
from skilltree.db.projects import create_project, list_projects
from skilltree.serializers import project_dict

project_app = typer.Typer(help="Create and inspect projects.", no_args_is_help=True)


@project_app.command("create")
@exits_on_error
def project_create(
    title: str = typer.Argument(..., help="Project title."),
    slug: Optional[str] = typer.Option(None, "--slug", help="URL slug (defaults to the title)."),
    summary: Optional[str] = typer.Option(None, "--summary", help="Short description."),
) -> None:
    """Create a new project."""
    with open_db() as conn:
        project = create_project(conn, title, slug or title, summary)
    typer.echo(f"✅ Project created: {project.title} ({project.id})")
    typer.echo(f"   slug: {project.slug}")


@project_app.command("list")
def project_list() -> None:
    """List all projects, most recently updated first."""
    with open_db() as conn:
        projects = list_projects(conn)
    if not projects:
        typer.echo("No projects found.")
        return

    typer.echo("Projects:")
    for p in projects:
        updated = datetime.fromtimestamp(p.updated_at / 1000).strftime("%Y-%m-%d %H:%M")
        typer.echo(f"  {p.title} \t[{p.slug}] \t{updated} \t{p.id}")


@project_app.command("show")
@exits_on_error
def project_show(
    identifier: str = typer.Argument(..., help="Project slug or ID."),
    format: str = typer.Option("tree", "--format", help="Output format: tree | list"),
) -> None:
    """Display a project graph as an ASCII tree or flat list."""
    with open_db() as conn:
        project = require_project(conn, identifier)

    if format == "list":
        typer.echo(f"Nodes in project '{project.title}':")
        for n in project.nodes:
            categories = f"  ({', '.join(n.categories)})" if n.categories else ""
            typer.echo(f"  {n.date_iso}  {n.title}{categories}  [{n.id[:8]}...]")
        typer.echo(f"Edges: {len(project.edges)}")
        return

    typer.echo(render_tree(project))


@project_app.command("export")
@exits_on_error
def project_export(
    identifier: str = typer.Argument(..., help="Project slug or ID."),
) -> None:
    """Print the project as the JSON document served to embeds."""
    with open_db() as conn:
        project = require_project(conn, identifier)
    typer.echo(json.dumps(project_dict(project), indent=2))
