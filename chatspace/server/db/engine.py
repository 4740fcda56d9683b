"""Async SQLAlchemy engine and session factory.

Uses psycopg3 which supports both sync and async with the same
``postgresql+psycopg://`` URL, so Alembic and the app share one setting.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

ENGINE_DEFAULTS: dict[str, object] = {
    "echo": False,
    "pool_size": 5,
    "max_overflow": 10,
    "pool_pre_ping": True,
    "pool_recycle": 3600,
}
"""Pool settings for a small API service.

- **pool_size / max_overflow**: five baseline connections, ten burst.
- **pool_pre_ping**: survive PG restarts and idle disconnects.
- **pool_recycle**: drop connections after an hour, before middleboxes do.
"""


def normalize_database_url(database_url: str) -> str:
    """Force the psycopg3 dialect for plain or asyncpg PostgreSQL URLs."""
    for prefix in ("postgresql+asyncpg://", "postgresql://", "postgres://"):
        if database_url.startswith(prefix):
            return "postgresql+psycopg://" + database_url[len(prefix) :]
    return database_url


def create_engine(database_url: str, **kwargs: object) -> AsyncEngine:
    """Create an async engine; any of ``ENGINE_DEFAULTS`` can be overridden via *kwargs*."""
    options = {**ENGINE_DEFAULTS, **kwargs}
    return create_async_engine(normalize_database_url(database_url), **options)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to *engine*.

    ``expire_on_commit=False`` keeps ORM instances readable after commit
    without lazy loads, which async sessions cannot perform implicitly.
    """
    return async_sessionmaker(engine, expire_on_commit=False)
