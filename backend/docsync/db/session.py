"""
Database Session Management
===========================

SQLAlchemy async engine and session factory for the documentation store.
PostgreSQL via asyncpg in deployments; any async dialect URL works
(the test-suite runs on sqlite+aiosqlite).

Connection Pattern:
-------------------
HTTP requests get a session per request through get_db(). Celery tasks and
the CLI open their own sessions with DBSessionContext / async_session_maker.
The sync service commits per document, so a failed pass never leaves a
half-written row behind.
"""

from typing import Any, AsyncGenerator
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import AsyncAdaptedQueuePool
from docsync.config import settings
from docsync.db.base import Base


def _engine_options(url: str) -> dict[str, Any]:
    """Pool and driver options; only PostgreSQL gets a sized pool."""
    if not url.startswith("postgresql"):
        return {}

    options: dict[str, Any] = {
        "pool_pre_ping": True,  # Test connections before using (catches stale)
        "pool_recycle": 3600,  # Recycle connections after 1 hour
        "connect_args": {"command_timeout": 60},  # 60s query timeout
    }
    if settings.is_production:
        options.update(poolclass=AsyncAdaptedQueuePool, pool_size=5, max_overflow=10)
    else:
        options.update(pool_size=2, max_overflow=5)
    return options


def create_engine_for(url: str) -> AsyncEngine:
    return create_async_engine(
        url,
        echo=settings.debug,  # Log SQL queries in debug mode
        **_engine_options(url),
    )


def create_session_maker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,  # Don't expire objects after commit (avoid lazy loads)
        autoflush=False,
    )


# =============================================================================
# Engine & Session Factory
# =============================================================================

engine = create_engine_for(settings.database_url)
async_session_maker = create_session_maker(engine)

# Alias used by task helpers
AsyncSessionLocal = async_session_maker


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session.

    Transaction Behavior:
    - Session is created at request start
    - Commits on successful request completion
    - Rolls back on any exception
    - Session is closed after request
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db(bind: AsyncEngine | None = None) -> None:
    """
    Create the documentation table if it does not exist.

    Called on application startup and before CLI syncs.
    """
    # Register mapped classes on Base.metadata
    import docsync.models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose of the connection pool on shutdown."""
    await engine.dispose()
