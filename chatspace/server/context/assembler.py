"""Workspace context injection for new conversations.

When the first message of a conversation carries a ``workspace_id``, the
workspace's instructions are prepended to the prompt prefix and its files are
attached after the caller's own files.

Injection is split into two steps so ordering between request transforms is
explicit:

1. :func:`load_workspace_context` reads the workspace and its files.
2. :func:`augment` is a pure transform that returns a new request.

:func:`inject_workspace_context` composes both and never fails the request:
workspace context is an enhancement, so a missing workspace or a backend
error leaves the request untouched.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from chatspace.server.managers.files import get_files
from chatspace.server.managers.workspaces import WorkspaceNotFoundError, get_workspace
from chatspace.server.models.api import FileResponse
from chatspace.server.models.chat import ChatRequest


@dataclass(frozen=True)
class WorkspaceContext:
    instructions: str | None = None
    files: list[dict[str, Any]] = field(default_factory=list)


def augment(request: ChatRequest, context: WorkspaceContext) -> ChatRequest:
    """Return a copy of *request* with *context* applied; *request* is not modified.

    Instructions go first, separated from any existing prompt prefix by a
    blank line.  Workspace files are appended after the caller's files;
    de-duplication is left to downstream file processing.
    """
    updates: dict[str, Any] = {}

    if context.instructions:
        existing = request.prompt_prefix
        updates["prompt_prefix"] = f"{context.instructions}\n\n{existing}" if existing else context.instructions

    if context.files:
        updates["files"] = [*request.files, *context.files]

    if not updates:
        return request
    return request.model_copy(update=updates)


async def load_workspace_context(db: AsyncSession, workspace_id: str, owner_id: str) -> WorkspaceContext | None:
    """Read the injectable context of a workspace, or None if it is not visible to *owner_id*."""
    try:
        workspace = await get_workspace(db, workspace_id, owner_id)
    except WorkspaceNotFoundError:
        return None

    files: list[dict[str, Any]] = []
    if workspace.files:
        rows = await get_files(db, workspace.files)
        files = [FileResponse.model_validate(row).model_dump(mode="json") for row in rows]
        if not files:
            logger.debug("Couldn't find workspace files for workspace {}", workspace_id)

    return WorkspaceContext(instructions=workspace.instructions, files=files)


async def inject_workspace_context(db: AsyncSession | None, request: ChatRequest, owner_id: str) -> ChatRequest:
    """Apply workspace context to the first message of a conversation.

    Returns *request* itself when no injection applies, no database is
    available (*db* is None) or loading fails.
    """
    if not request.workspace_id or not request.is_first_message:
        return request

    if db is None:
        logger.warning("No database configured; skipping context for workspace {}", request.workspace_id)
        return request

    try:
        context = await load_workspace_context(db, request.workspace_id, owner_id)
    except Exception:
        logger.opt(exception=True).warning(
            "Failed to load context for workspace {}; continuing without it", request.workspace_id
        )
        await db.rollback()
        return request

    if context is None:
        return request

    augmented = augment(request, context)
    logger.debug(
        "Injected workspace {} context (instructions={}, files={})",
        request.workspace_id,
        bool(context.instructions),
        len(context.files),
    )
    return augmented
