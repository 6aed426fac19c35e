"""Opens the project database.

The web app keeps a single connection for its whole lifetime; the CLI opens
one per command through :func:`skilltree.cli.context.open_db`.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Optional, Union

from skilltree.config import settings


def get_connection(db_path: Optional[Union[Path, str]] = None) -> sqlite3.Connection:
    """Return a connection to *db_path* (``settings.db_path`` by default).

    Rows come back as :class:`sqlite3.Row`. Foreign keys are enforced so
    deleting a node removes its edges, and the journal runs in WAL mode.
    ``":memory:"`` gives a throwaway database for tests.
    """
    path = db_path or settings.db_path
    if str(path) != ":memory:":
        Path(path).parent.mkdir(parents=True, exist_ok=True)

    # Shared across request handlers, hence no thread check.
    conn = sqlite3.connect(str(path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    conn.execute("PRAGMA journal_mode = WAL")
    return conn
