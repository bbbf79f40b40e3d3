"""Route registration — mounts all routers under ``/api/v1``."""

from fastapi import FastAPI

from stepladder_server.routes.assignments import router as assignments_router
from stepladder_server.routes.portal import router as portal_router
from stepladder_server.routes.templates import router as templates_router

API_PREFIX = "/api/v1"


def register_routes(app: FastAPI) -> None:
    """Include all sub-routers under the versioned API prefix."""
    app.include_router(templates_router, prefix=API_PREFIX)
    app.include_router(assignments_router, prefix=API_PREFIX)
    app.include_router(portal_router, prefix=API_PREFIX)
