"""Shared test fixtures: a testcontainers PostgreSQL with migrations applied.

The container is session-scoped (started once per test run).  Each test
function gets an isolated DB session whose changes are rolled back at
teardown (savepoint mode), so tests can commit freely.

Tests needing the container are marked ``@pytest.mark.integration`` and are
skipped when Docker is not reachable.
"""

from __future__ import annotations

import os
from collections.abc import AsyncIterator, Iterator
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import NullPool
from testcontainers.postgres import PostgresContainer

from chatspace.server.settings import _get_settings_cached


def _set_env(key: str, value: str) -> None:
    """Set an env var and invalidate the settings cache."""
    os.environ[key] = value
    _get_settings_cached.cache_clear()


def _docker_available() -> bool:
    import docker
    from docker.errors import DockerException

    try:
        docker.from_env().ping()
    except DockerException:
        return False
    return True


# ---------------------------------------------------------------------------
# Session-scoped: container, URL with migrations applied, engine
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def pg_container() -> Iterator[PostgresContainer]:
    """Start a PostgreSQL 17 container for the test session."""
    if not _docker_available():
        pytest.skip("Docker is not available; skipping PostgreSQL integration tests")

    with PostgresContainer(
        image="postgres:17",
        username="test",
        password="test",
        dbname="chatspace_test",
        driver="psycopg",
    ) as pg:
        yield pg


@pytest.fixture(scope="session")
def pg_url(pg_container: PostgresContainer) -> str:
    """PostgreSQL URL (psycopg3 dialect) with Alembic migrations applied."""
    url = pg_container.get_connection_url()
    _set_env("CHATSPACE_DATABASE_URL", url)

    from alembic import command
    from alembic.config import Config

    ini_path = Path(__file__).parent.parent / "chatspace" / "server" / "alembic.ini"
    command.upgrade(Config(str(ini_path)), "head")

    return url


@pytest.fixture(scope="session")
def async_engine(pg_url: str) -> Iterator[AsyncEngine]:
    """Session-scoped async engine.

    ``NullPool``: every test runs on its own event loop, so connections are
    never reused across tests.
    """
    engine = create_async_engine(pg_url, poolclass=NullPool)
    yield engine
    engine.sync_engine.dispose()


# ---------------------------------------------------------------------------
# Function-scoped: DB session with savepoint rollback for test isolation
# ---------------------------------------------------------------------------


@pytest.fixture
async def db_session(async_engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    """Async SQLAlchemy session; all changes rolled back after the test.

    ``join_transaction_mode="create_savepoint"`` turns ``session.commit()``
    inside tested code into a savepoint release, while the outer transaction
    is rolled back at teardown.  ``expire_on_commit=False`` matches the
    application's session factory.
    """
    async with async_engine.connect() as conn:
        await conn.begin()
        session = AsyncSession(bind=conn, join_transaction_mode="create_savepoint", expire_on_commit=False)
        yield session
        await session.close()
        await conn.rollback()
