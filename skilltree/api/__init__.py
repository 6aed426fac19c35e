"""FastAPI HTTP layer package.

Public re-export so callers can write::

    from skilltree.api import app

    uvicorn skilltree.api:app --reload
"""

from skilltree.api.app import app, create_app

__all__ = ["app", "create_app"]
