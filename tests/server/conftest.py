"""Shared fixtures for workspace API integration tests."""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from datetime import datetime

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from chatspace.server.app import app
from chatspace.server.db.tables import Conversation, File
from chatspace.server.deps import get_db, get_optional_db

USER_A = "user-a"
USER_B = "user-b"


def word_count(text: str) -> int:
    """Deterministic stand-in for the tiktoken counter."""
    return len(text.split())


@pytest.fixture
async def api(db_session: AsyncSession) -> AsyncIterator[Callable[[str], AsyncClient]]:
    """Factory of HTTP clients wired to the app, one per user ID.

    Overrides both session dependencies so every request uses the savepoint-isolated
    ``db_session`` fixture.  The app lifespan does NOT run under
    ``ASGITransport``, so state fields are pre-set here.
    """

    async def _override_get_db() -> AsyncIterator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_optional_db] = _override_get_db

    app.state.db_engine = None
    app.state.db_session_factory = None
    app.state.auth_token = None
    app.state.token_counter = word_count

    clients: list[AsyncClient] = []

    def _client(user_id: str) -> AsyncClient:
        client = AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
            headers={"X-User-Id": user_id},
        )
        clients.append(client)
        return client

    yield _client

    for client in clients:
        await client.aclose()
    app.dependency_overrides.clear()


@pytest.fixture
def client(api: Callable[[str], AsyncClient]) -> AsyncClient:
    """Client authenticated as ``USER_A``."""
    return api(USER_A)


@pytest.fixture
def other_client(api: Callable[[str], AsyncClient]) -> AsyncClient:
    """Client authenticated as ``USER_B``."""
    return api(USER_B)


@pytest.fixture
def add_file(db_session: AsyncSession) -> Callable[..., File]:
    """Insert a file row (pending until the next flush/commit)."""

    def _add(file_id: str, owner_id: str = USER_A, **fields: object) -> File:
        file = File(file_id=file_id, owner_id=owner_id, filename=fields.pop("filename", f"{file_id}.txt"), **fields)
        db_session.add(file)
        return file

    return _add


@pytest.fixture
def add_conversation(db_session: AsyncSession) -> Callable[..., Conversation]:
    """Insert a conversation row (pending until the next flush/commit)."""

    def _add(conversation_id: str, updated_at: datetime, owner_id: str = USER_A, **fields: object) -> Conversation:
        conversation = Conversation(
            conversation_id=conversation_id,
            owner_id=owner_id,
            updated_at=updated_at,
            **fields,
        )
        db_session.add(conversation)
        return conversation

    return _add
