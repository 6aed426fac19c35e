"""FastAPI dependencies shared by the routers."""

from __future__ import annotations

import sqlite3

from fastapi import Request

from skilltree.config import Settings


def get_db(request: Request) -> sqlite3.Connection:
    """The process-wide SQLite connection opened by the app lifespan."""
    return request.app.state.db


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
