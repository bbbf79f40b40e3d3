"""Async SQLAlchemy engine and session factory.

Both are created lazily and shared by the whole process.  Call
``dispose_engine()`` on shutdown.
"""

import os

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from stepladder_db.config import get_async_url

_POOL_SIZE = int(os.getenv("PG_POOL_SIZE", "5"))
_MAX_OVERFLOW = int(os.getenv("PG_MAX_OVERFLOW", "10"))

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """Return (and lazily create) the process-wide async engine."""
    global _engine
    if _engine is None:
        _engine = create_async_engine(
            get_async_url(),
            pool_size=_POOL_SIZE,
            max_overflow=_MAX_OVERFLOW,
        )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return (and lazily create) the async session factory."""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            bind=get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _session_factory


async def dispose_engine() -> None:
    """Close the connection pool; a later call to get_engine() starts fresh."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None
