"""FastAPI application factory.

Lifespan
--------
On startup the app opens a single SQLite connection (shared across all
requests via ``request.app.state.db``) and initialises the schema.  On
shutdown it closes the connection cleanly.  A connection passed to
:func:`create_app` is used as is and left open.

Routers
-------
    /, /app, /p, /embed/view   HTML screens and their intent endpoints
    /api/embed, /embed         Embed JSON and bootstrap script
    /api/upload                Media uploads
    /api/projects              JSON REST for projects
    /uploads                   Uploaded media (static files)
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from skilltree.api.routers import embed as embed_router
from skilltree.api.routers import pages as pages_router
from skilltree.api.routers import projects as projects_router
from skilltree.api.routers import upload as upload_router
from skilltree.config import Settings, settings as default_settings
from skilltree.db import get_connection, init_db
from skilltree.errors import SkillTreeError
from skilltree.logging_setup import configure_logging

logger = logging.getLogger(__name__)


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(SkillTreeError)
    async def skilltree_error(request: Request, exc: SkillTreeError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(
                "%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc
            )
            return JSONResponse({"error": "Internal server error"}, status_code=exc.status_code)
        return JSONResponse({"error": str(exc)}, status_code=exc.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            {"error": str(exc.detail)}, status_code=exc.status_code, headers=exc.headers
        )

    @app.exception_handler(RequestValidationError)
    async def request_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg', 'invalid')}" if field else "Invalid request"
        return JSONResponse({"error": message}, status_code=400)

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse({"error": "Internal server error"}, status_code=500)


def create_app(
    settings: Optional[Settings] = None,
    conn: Optional[sqlite3.Connection] = None,
) -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    cfg = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Open the DB on startup and close it on shutdown."""
        configure_logging(cfg.log_level)
        cfg.upload_dir.mkdir(parents=True, exist_ok=True)
        db = conn if conn is not None else get_connection(cfg.db_path)
        init_db(db)
        app.state.db = db
        try:
            yield
        finally:
            if conn is None:
                db.close()

    app = FastAPI(
        title="Skill Tree",
        description=(
            "Projects as graphs of milestones: editor and public viewer "
            "screens, embed API and script, media uploads."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = cfg

    # Embeds are fetched from third-party sites.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _install_error_handlers(app)

    app.include_router(pages_router.router, tags=["pages"])
    app.include_router(embed_router.router, tags=["embed"])
    app.include_router(upload_router.router, prefix="/api", tags=["upload"])
    app.include_router(projects_router.router, prefix="/api/projects", tags=["projects"])
    app.mount(
        cfg.upload_url_prefix,
        StaticFiles(directory=cfg.upload_dir, check_dir=False),
        name="uploads",
    )
    return app


# Module-level instance used by uvicorn:
#   uvicorn skilltree.api.app:app --reload
app = create_app()
