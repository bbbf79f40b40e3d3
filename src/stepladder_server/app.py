"""Application factory and CLI entry point.

``create_app()`` builds the FastAPI application with:
  - Lifespan handler that loads the template catalog and the assignment manager once
  - CORS middleware
  - Global exception handlers (SDK errors → 400/404/409)
  - All API routes mounted under ``/api/v1``
  - A ``/health`` endpoint for readiness probes

The ``cli()`` function is the ``stepladder-server`` console-script entry point.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from stepladder_db.engine import dispose_engine, get_engine
from stepladder_db.memory import InMemoryAssignmentRepository
from stepladder_db.repository import SqlAssignmentRepository
from stepladder_worksheets.errors import (
    ReadOnlyFormError,
    StatusTransitionError,
    TemplateNotFoundError,
)
from stepladder_worksheets.manager import AssignmentManager
from stepladder_worksheets.registry import TemplateStore

from stepladder_server.config import ServerSettings, load_settings
from stepladder_server.errors import (
    generic_error_handler,
    key_error_handler,
    read_only_error_handler,
    template_not_found_handler,
    transition_error_handler,
    value_error_handler,
)
from stepladder_server.routes import register_routes

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Lifespan — runs once at startup/shutdown
# ------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Initialise shared resources at startup, tear down on shutdown.

    Startup:
      1. Load the worksheet catalog into a ``TemplateStore``
      2. Pick the assignment repository (SQL or in-memory)
      3. Stash the store and ``AssignmentManager`` on ``app.state``

    Shutdown:
      1. Dispose the database engine's connection pool (SQL backend only)
    """
    settings: ServerSettings = app.state.settings

    # --- Load catalog ---
    store = TemplateStore(catalog_dir=settings.catalog_dir)
    store.load()

    # --- Build manager ---
    if settings.assignment_backend == "memory":
        repo = InMemoryAssignmentRepository()
        logger.warning("Using in-memory assignment storage; data is lost on restart")
    else:
        repo = SqlAssignmentRepository()

    app.state.store = store
    app.state.manager = AssignmentManager(store, repo)

    yield

    # --- Shutdown ---
    if settings.assignment_backend == "sql":
        await dispose_engine()
        logger.info("Database engine disposed")


# ------------------------------------------------------------------
# Factory
# ------------------------------------------------------------------

def create_app(settings: ServerSettings | None = None) -> FastAPI:
    """Build and return the configured FastAPI application."""
    if settings is None:
        settings = load_settings()

    # --- Configure logging ---
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(
        title="StepLadder Worksheets API",
        description="Worksheet library, assignments and client portal",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store settings so the lifespan handler can read them
    app.state.settings = settings

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- Exception handlers ---
    # Lookup follows the exception's MRO, so the SDK subclasses win over ValueError
    app.add_exception_handler(TemplateNotFoundError, template_not_found_handler)
    app.add_exception_handler(StatusTransitionError, transition_error_handler)
    app.add_exception_handler(ReadOnlyFormError, read_only_error_handler)
    app.add_exception_handler(ValueError, value_error_handler)
    app.add_exception_handler(KeyError, key_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    # --- Health check (outside /api/v1 prefix) ---
    @app.get("/health")
    async def health() -> dict:
        """Readiness probe — verifies the catalog and, for SQL, DB connectivity."""
        store: TemplateStore | None = getattr(app.state, "store", None)
        templates = len(store.templates) if store is not None else 0
        if settings.assignment_backend == "memory":
            return {"status": "ok", "backend": "memory", "templates": templates}
        try:
            engine = get_engine()
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return {"status": "ok", "backend": "sql", "templates": templates}
        except Exception as exc:
            logger.error("Health check failed: %s", exc)
            return {"status": "error", "detail": str(exc)}

    # --- Mount all API routes ---
    register_routes(app)

    return app


# ------------------------------------------------------------------
# Module-level ASGI export (for uvicorn stepladder_server.app:app)
# ------------------------------------------------------------------
app = create_app()


# ------------------------------------------------------------------
# CLI entry point
# ------------------------------------------------------------------

def cli() -> None:
    """Console-script entry point: ``stepladder-server``."""
    import uvicorn

    settings = load_settings()
    uvicorn.run(
        "stepladder_server.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=False,
    )
