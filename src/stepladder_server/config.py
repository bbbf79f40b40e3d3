"""Server configuration — reads settings from environment variables.

All settings have sensible defaults for local development.  In production
the values are typically overridden via env vars or a ``.env`` file.
"""

import os
from dataclasses import dataclass, field

# Persistence backends selectable with ASSIGNMENT_BACKEND.
ASSIGNMENT_BACKENDS = ("sql", "memory")


@dataclass(frozen=True)
class ServerSettings:
    """Immutable server configuration read from environment at startup."""

    # Network
    host: str = "0.0.0.0"
    port: int = 8080

    # CORS — comma-separated origins, or "*" for wide-open dev mode
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    # Catalog directory (None → the packaged catalog)
    catalog_dir: str | None = None

    # Logging
    log_level: str = "INFO"

    # "sql" persists to PostgreSQL; "memory" keeps assignments in-process
    # (demos and tests, lost on restart)
    assignment_backend: str = "sql"


def load_settings() -> ServerSettings:
    """Build settings from ``SERVER_*`` and related environment variables."""
    raw_origins = os.getenv("SERVER_CORS_ORIGINS", "*")
    origins = [o.strip() for o in raw_origins.split(",") if o.strip()]

    backend = os.getenv("ASSIGNMENT_BACKEND", "sql").strip().lower()
    if backend not in ASSIGNMENT_BACKENDS:
        raise ValueError(
            f"ASSIGNMENT_BACKEND must be one of {ASSIGNMENT_BACKENDS}, got {backend!r}"
        )

    return ServerSettings(
        host=os.getenv("SERVER_HOST", "0.0.0.0"),
        port=int(os.getenv("SERVER_PORT", "8080")),
        cors_origins=origins,
        catalog_dir=os.getenv("WORKSHEET_CATALOG_DIR") or None,
        log_level=os.getenv("SERVER_LOG_LEVEL", "INFO").upper(),
        assignment_backend=backend,
    )
