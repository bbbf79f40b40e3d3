"""FastAPI dependency injection — provides DB sessions, the template store and the manager.

Each request that touches the database gets a fresh ``AsyncSession`` via
``get_db()``.  The session is committed on success and rolled back on error,
matching the SDK convention where the repository calls ``flush()`` but
never ``commit()``.
"""

from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from stepladder_db.engine import get_session_factory
from stepladder_worksheets.manager import AssignmentManager
from stepladder_worksheets.registry import TemplateStore


# ------------------------------------------------------------------
# Database session — transaction boundary lives here
# ------------------------------------------------------------------

async def get_db(request: Request) -> AsyncGenerator[AsyncSession | None, None]:
    """Yield an async DB session; commit on success, rollback on error.

    With the in-memory backend there is no database and ``None`` is
    yielded instead; the in-memory repository ignores its session argument.
    """
    if request.app.state.settings.assignment_backend == "memory":
        yield None
        return

    factory = get_session_factory()
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


# ------------------------------------------------------------------
# Store & manager — stashed on app.state during lifespan
# ------------------------------------------------------------------

def get_store(request: Request) -> TemplateStore:
    """Return the TemplateStore singleton from ``app.state``."""
    return request.app.state.store


def get_manager(request: Request) -> AssignmentManager:
    """Return the AssignmentManager singleton from ``app.state``."""
    return request.app.state.manager
