"""Commands adding nodes and edges to a project."""

from typing import List, Optional

import typer

from skilltree.cli.context import exits_on_error, open_db, require_project
from skilltree.db.edges import create_edge
from skilltree.db.nodes import create_node

node_app = typer.Typer(help="Add nodes to a project.", no_args_is_help=True)
edge_app = typer.Typer(help="Connect nodes of a project.", no_args_is_help=True)


@node_app.command("add")
@exits_on_error
def node_add(
    project: str = typer.Argument(..., help="Project slug or ID."),
    title: str = typer.Option(..., "--title", help="Node title."),
    date: str = typer.Option(..., "--date", help="ISO date, e.g. 2024-03-01."),
    category: Optional[List[str]] = typer.Option(None, "--category", help="Category (repeatable)."),
    summary: Optional[str] = typer.Option(None, "--summary", help="Short description."),
) -> None:
    """Create a node in a project."""
    with open_db() as conn:
        target = require_project(conn, project)
        node = create_node(
            conn,
            target.id,
            title=title,
            date_iso=date,
            summary=summary,
            categories=category or [],
        )
    typer.echo(f"✅ Node created: {node.title} ({node.id})")


@edge_app.command("add")
@exits_on_error
def edge_add(
    project: str = typer.Argument(..., help="Project slug or ID."),
    from_id: str = typer.Argument(..., help="Source node ID."),
    to_id: str = typer.Argument(..., help="Target node ID."),
    kind: Optional[str] = typer.Option(None, "--kind", help="improves | reverts | forks | anything."),
) -> None:
    """Create an edge between two nodes of a project."""
    with open_db() as conn:
        target = require_project(conn, project)
        edge = create_edge(conn, target.id, from_id, to_id, kind=kind)
    label = f" [{edge.kind}]" if edge.kind else ""
    typer.echo(f"✅ Edge created: {edge.from_id} → {edge.to_id}{label} ({edge.id})")
