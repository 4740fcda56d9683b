"""Workspace CRUD operations.

Every query is scoped to the calling user through ``scope_to_owner``; a
workspace owned by someone else raises the same ``WorkspaceNotFoundError``
as a missing one.
"""

from __future__ import annotations

import uuid

from loguru import logger
from sqlalchemy import Select, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from chatspace.server.db.scoping import scope_to_owner
from chatspace.server.db.tables import Conversation, Workspace
from chatspace.server.models.api import WorkspaceCreate, WorkspaceUpdate


class WorkspaceNotFoundError(LookupError):
    """Raised when a workspace is missing or not owned by the caller."""


class WorkspaceValidationError(ValueError):
    """Raised when a request cannot be applied to a workspace."""


def _select_owned(workspace_id: str, owner_id: str) -> Select[tuple[Workspace]]:
    stmt = select(Workspace).where(Workspace.workspace_id == workspace_id)
    return scope_to_owner(stmt, Workspace, owner_id)


async def create_workspace(db: AsyncSession, owner_id: str, body: WorkspaceCreate) -> Workspace:
    """Create a new workspace owned by *owner_id*."""
    workspace = Workspace(
        workspace_id=uuid.uuid4().hex,
        owner_id=owner_id,
        name=body.name,
        description=body.description,
        instructions=body.instructions,
        files=[],
    )
    db.add(workspace)
    await db.commit()
    await db.refresh(workspace)

    logger.info("Workspace created: {} (owner={})", workspace.workspace_id, owner_id)
    return workspace


async def list_workspaces(
    db: AsyncSession,
    owner_id: str,
    *,
    limit: int = 20,
    skip: int = 0,
) -> tuple[list[Workspace], int]:
    """Return one page of the owner's workspaces (most recently updated first) and their total count."""
    stmt = (
        scope_to_owner(select(Workspace), Workspace, owner_id)
        .order_by(Workspace.updated_at.desc(), Workspace.workspace_id)
        .limit(limit)
        .offset(skip)
    )
    count_stmt = scope_to_owner(select(func.count()).select_from(Workspace), Workspace, owner_id)

    result = await db.execute(stmt)
    total = await db.scalar(count_stmt)
    return list(result.scalars().all()), total or 0


async def get_workspace(
    db: AsyncSession,
    workspace_id: str,
    owner_id: str,
    *,
    for_update: bool = False,
) -> Workspace:
    """Get a workspace by ID.  Raises ``WorkspaceNotFoundError`` if missing or not owned.

    With *for_update* the row is locked until the transaction ends, which
    serializes concurrent read-modify-write cycles on the same workspace.
    """
    stmt = _select_owned(workspace_id, owner_id)
    if for_update:
        stmt = stmt.with_for_update()

    result = await db.execute(stmt)
    workspace = result.scalar_one_or_none()
    if workspace is None:
        raise WorkspaceNotFoundError(workspace_id)
    return workspace


async def update_workspace(db: AsyncSession, workspace_id: str, owner_id: str, body: WorkspaceUpdate) -> Workspace:
    """Apply the fields explicitly set in *body*.

    Raises ``WorkspaceValidationError`` if nothing was set and
    ``WorkspaceNotFoundError`` if the workspace is missing.
    """
    changes = body.model_dump(exclude_unset=True)
    if not changes:
        msg = "No valid fields to update"
        raise WorkspaceValidationError(msg)

    workspace = await get_workspace(db, workspace_id, owner_id, for_update=True)
    for key, value in changes.items():
        setattr(workspace, key, value)

    await db.commit()
    await db.refresh(workspace)

    logger.info("Workspace updated: {} (fields={})", workspace_id, sorted(changes))
    return workspace


async def delete_workspace(db: AsyncSession, workspace_id: str, owner_id: str) -> Workspace:
    """Hard-delete a workspace and return the deleted record.

    Conversations of the same owner that point at the workspace are detached
    (``workspace_id`` cleared) in the same transaction; their ``updated_at``
    is left alone so conversation ordering does not change.  Referenced files
    are not touched.
    """
    workspace = await get_workspace(db, workspace_id, owner_id, for_update=True)

    detach = scope_to_owner(
        update(Conversation).where(Conversation.workspace_id == workspace_id),
        Conversation,
        owner_id,
    ).values(workspace_id=None, updated_at=Conversation.updated_at)
    detached = await db.execute(detach)

    await db.delete(workspace)
    await db.commit()

    logger.info("Workspace deleted: {} (detached_conversations={})", workspace_id, detached.rowcount)
    return workspace
