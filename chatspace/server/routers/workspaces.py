"""Workspace endpoints.

Thin HTTP adapter -- delegates to the workspace managers and maps their
domain exceptions to status codes.  Every route is scoped to the caller; a
workspace owned by someone else is reported as 404, never 403.
"""

from __future__ import annotations

import math

from fastapi import APIRouter, HTTPException, Query, status

from chatspace.server.db.tables import File, Workspace
from chatspace.server.deps import CurrentUser, DbSession, Tokens
from chatspace.server.managers import conversations as conversation_manager
from chatspace.server.managers import workspace_files as file_manager
from chatspace.server.managers import workspaces as workspace_manager
from chatspace.server.managers.conversations import ConversationCursor, InvalidCursorError
from chatspace.server.managers.workspace_files import FileOwnershipError, WorkspaceFileNotFoundError
from chatspace.server.managers.workspaces import WorkspaceNotFoundError, WorkspaceValidationError
from chatspace.server.models.api import (
    ContextBreakdown,
    ConversationPageResponse,
    ConversationResponse,
    FileResponse,
    Pagination,
    WorkspaceContextResponse,
    WorkspaceCreate,
    WorkspaceFilesUpdate,
    WorkspaceListResponse,
    WorkspaceResponse,
    WorkspaceUpdate,
)
from chatspace.server.settings import get_settings

router = APIRouter(prefix="/workspaces", tags=["workspaces"])

_LIMIT_DESCRIPTION = "Page size; 0 or omitted uses the default, capped at the configured maximum."


def _not_found() -> HTTPException:
    return HTTPException(status.HTTP_404_NOT_FOUND, detail="Workspace not found.")


@router.post("", response_model=WorkspaceResponse, status_code=status.HTTP_201_CREATED)
async def create_workspace(body: WorkspaceCreate, db: DbSession, user_id: CurrentUser) -> Workspace:
    """Create a new workspace owned by the caller."""
    return await workspace_manager.create_workspace(db, user_id, body)


@router.get("", response_model=WorkspaceListResponse)
async def list_workspaces(
    db: DbSession,
    user_id: CurrentUser,
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=0, description=_LIMIT_DESCRIPTION),
) -> WorkspaceListResponse:
    """List the caller's workspaces, most recently updated first."""
    settings = get_settings()
    limit = min(limit or settings.list_default_limit, settings.list_max_limit)

    workspaces, total = await workspace_manager.list_workspaces(db, user_id, limit=limit, skip=(page - 1) * limit)
    return WorkspaceListResponse(
        workspaces=[WorkspaceResponse.model_validate(w) for w in workspaces],
        pagination=Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit)),
    )


@router.get("/{workspace_id}", response_model=WorkspaceResponse)
async def get_workspace(workspace_id: str, db: DbSession, user_id: CurrentUser) -> Workspace:
    try:
        return await workspace_manager.get_workspace(db, workspace_id, user_id)
    except WorkspaceNotFoundError:
        raise _not_found() from None


@router.patch("/{workspace_id}", response_model=WorkspaceResponse)
async def update_workspace(workspace_id: str, body: WorkspaceUpdate, db: DbSession, user_id: CurrentUser) -> Workspace:
    """Partially update name, description and/or instructions."""
    try:
        return await workspace_manager.update_workspace(db, workspace_id, user_id, body)
    except WorkspaceValidationError as exc:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail=str(exc)) from None
    except WorkspaceNotFoundError:
        raise _not_found() from None


@router.delete("/{workspace_id}", response_model=WorkspaceResponse)
async def delete_workspace(workspace_id: str, db: DbSession, user_id: CurrentUser) -> Workspace:
    """Delete a workspace and return the deleted record."""
    try:
        return await workspace_manager.delete_workspace(db, workspace_id, user_id)
    except WorkspaceNotFoundError:
        raise _not_found() from None


@router.get("/{workspace_id}/conversations", response_model=ConversationPageResponse)
async def list_workspace_conversations(
    workspace_id: str,
    db: DbSession,
    user_id: CurrentUser,
    limit: int | None = Query(None, ge=0, description=_LIMIT_DESCRIPTION),
    cursor: str | None = Query(None, description="``next_cursor`` from the previous page."),
) -> ConversationPageResponse:
    """Page through the workspace's conversations, most recently updated first."""
    settings = get_settings()
    limit = min(limit or settings.conversations_default_limit, settings.conversations_max_limit)

    try:
        parsed = ConversationCursor.parse(cursor) if cursor else None
    except InvalidCursorError as exc:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail=f"cursor: {exc}") from None

    try:
        page = await conversation_manager.list_workspace_conversations(
            db, workspace_id, user_id, limit=limit, cursor=parsed
        )
    except WorkspaceNotFoundError:
        raise _not_found() from None

    return ConversationPageResponse(
        conversations=[ConversationResponse.model_validate(c) for c in page.conversations],
        next_cursor=page.next_cursor,
    )


@router.get("/{workspace_id}/files", response_model=list[FileResponse])
async def list_workspace_files(workspace_id: str, db: DbSession, user_id: CurrentUser) -> list[File]:
    """List the workspace's files (extracted text excluded)."""
    try:
        return await file_manager.get_workspace_files(db, workspace_id, user_id)
    except WorkspaceNotFoundError:
        raise _not_found() from None


@router.patch("/{workspace_id}/files", response_model=WorkspaceResponse)
async def manage_workspace_files(
    workspace_id: str,
    body: WorkspaceFilesUpdate,
    db: DbSession,
    user_id: CurrentUser,
) -> Workspace:
    """Add files to, or remove files from, a workspace."""
    try:
        return await file_manager.manage_files(db, workspace_id, user_id, body.action, body.file_ids)
    except WorkspaceNotFoundError:
        raise _not_found() from None
    except WorkspaceFileNotFoundError as exc:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail=str(exc)) from None
    except FileOwnershipError as exc:
        raise HTTPException(status.HTTP_403_FORBIDDEN, detail=str(exc)) from None


@router.get("/{workspace_id}/context", response_model=WorkspaceContextResponse)
async def get_workspace_context(
    workspace_id: str,
    db: DbSession,
    user_id: CurrentUser,
    count_tokens: Tokens,
) -> WorkspaceContextResponse:
    """Estimate how many tokens the workspace adds to a new conversation."""
    try:
        usage = await file_manager.get_context_usage(db, workspace_id, user_id, count_tokens)
    except WorkspaceNotFoundError:
        raise _not_found() from None

    return WorkspaceContextResponse(
        token_count=usage.total_tokens,
        breakdown=ContextBreakdown(instructions=usage.instructions_tokens, files=usage.files_tokens),
        file_tokens=usage.file_tokens,
        unknown_bytes=usage.unknown_bytes,
    )
