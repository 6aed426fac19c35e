"""Shared plumbing for CLI commands: DB access and error reporting."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from functools import wraps
from typing import Callable, Iterator

import typer

from skilltree.db import get_connection, init_db
from skilltree.db.models import Project
from skilltree.db.projects import resolve_project
from skilltree.errors import NotFoundError, SkillTreeError


@contextmanager
def open_db() -> Iterator[sqlite3.Connection]:
    """Open the workspace DB (schema initialised) and close it afterwards."""
    conn = get_connection()
    init_db(conn)
    try:
        yield conn
    finally:
        conn.close()


def require_project(conn: sqlite3.Connection, slug_or_id: str) -> Project:
    project = resolve_project(conn, slug_or_id)
    if project is None:
        raise NotFoundError(f"Project not found: {slug_or_id!r}")
    return project


def exits_on_error(func: Callable) -> Callable:
    """Decorator for CLI commands: application errors print a message and exit 1."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except SkillTreeError as exc:
            typer.echo(f"❌ {exc}", err=True)
            raise typer.Exit(code=1)

    return wrapper
