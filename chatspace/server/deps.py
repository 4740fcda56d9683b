"""FastAPI dependency injection for DB sessions, caller identity and token counting.

Usage in route handlers::

    @router.get("/things/{thing_id}")
    async def get_thing(thing_id: str, db: DbSession, user_id: CurrentUser) -> ThingResponse:
        ...

The chat pipeline consumes :data:`PreparedChatRequest` to receive the request
body with workspace context already applied.
"""

from __future__ import annotations

import secrets
from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from chatspace.server.context.assembler import inject_workspace_context
from chatspace.server.models.chat import ChatRequest
from chatspace.server.tokens import TokenCounter


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """Yield an async SQLAlchemy session, closing it after the request.

    The caller (route handler or manager) is responsible for committing on
    success.  If the handler raises, the session is closed and the implicit
    transaction is rolled back.
    """
    session_factory = request.app.state.db_session_factory
    if session_factory is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database not configured (CHATSPACE_DATABASE_URL is unset).",
        )
    session: AsyncSession = session_factory()
    try:
        yield session
    finally:
        await session.close()


async def get_current_user(
    request: Request,
    authorization: Annotated[str | None, Header()] = None,
    x_user_id: Annotated[str | None, Header()] = None,
) -> str:
    """Return the caller's user ID.

    The trusted gateway in front of this service authenticates users and
    forwards the identity in ``X-User-Id``.  When an API token is active,
    the gateway must also present it as ``Authorization: Bearer <token>``.
    """
    expected = getattr(request.app.state, "auth_token", None)
    if expected is not None:
        scheme, _, token = (authorization or "").partition(" ")
        if scheme.lower() != "bearer" or not secrets.compare_digest(token, expected):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid or missing bearer token.",
                headers={"WWW-Authenticate": "Bearer"},
            )

    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing X-User-Id header.")
    return x_user_id.strip()


def get_token_counter(request: Request) -> TokenCounter:
    counter: TokenCounter | None = getattr(request.app.state, "token_counter", None)
    if counter is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Token counter not initialised.",
        )
    return counter


# -- Annotated type aliases for concise route signatures ---------------------

DbSession = Annotated[AsyncSession, Depends(get_db)]
"""Annotated dependency: async SQLAlchemy session (auto-closed after request)."""

CurrentUser = Annotated[str, Depends(get_current_user)]
"""Annotated dependency: authenticated caller's user ID."""

Tokens = Annotated[TokenCounter, Depends(get_token_counter)]
"""Annotated dependency: process-wide token counter."""


async def get_optional_db(request: Request) -> AsyncIterator[AsyncSession | None]:
    """Like :func:`get_db`, but yields None instead of failing when no database is configured."""
    session_factory = getattr(request.app.state, "db_session_factory", None)
    if session_factory is None:
        yield None
        return
    session: AsyncSession = session_factory()
    try:
        yield session
    finally:
        await session.close()


OptionalDbSession = Annotated[AsyncSession | None, Depends(get_optional_db)]
"""Annotated dependency: async session, or None without a database."""


async def prepare_chat_request(body: ChatRequest, db: OptionalDbSession, user_id: CurrentUser) -> ChatRequest:
    """Chat request body with workspace context applied (first message only)."""
    return await inject_workspace_context(db, body, user_id)


PreparedChatRequest = Annotated[ChatRequest, Depends(prepare_chat_request)]
"""Annotated dependency: chat body after workspace context injection."""
