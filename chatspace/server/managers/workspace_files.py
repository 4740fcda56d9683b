"""Workspace file membership and context token accounting.

File references on a workspace behave as an ordered set: adding never
duplicates an ID and keeps existing order, removing an absent ID is a no-op.
"""

from __future__ import annotations

from collections.abc import Sequence
from functools import partial

from anyio import to_thread
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import flag_modified

from chatspace.server.context.accounting import ContextUsage, compute_context
from chatspace.server.db.tables import File, Workspace
from chatspace.server.managers.files import get_files
from chatspace.server.managers.workspaces import get_workspace
from chatspace.server.models.enums import FileAction
from chatspace.server.tokens import TokenCounter


class WorkspaceFileNotFoundError(LookupError):
    """Raised when one or more requested files do not exist."""


class FileOwnershipError(PermissionError):
    """Raised when adding a file the caller does not own."""


def merge_file_ids(existing: Sequence[str], requested: Sequence[str]) -> list[str]:
    """Append requested IDs not already present, preserving both orders."""
    merged = list(existing)
    seen = set(merged)
    for file_id in requested:
        if file_id not in seen:
            merged.append(file_id)
            seen.add(file_id)
    return merged


def remove_file_ids(existing: Sequence[str], requested: Sequence[str]) -> list[str]:
    drop = set(requested)
    return [file_id for file_id in existing if file_id not in drop]


async def get_workspace_files(db: AsyncSession, workspace_id: str, owner_id: str) -> list[File]:
    """Return the workspace's files (without text) in workspace order."""
    workspace = await get_workspace(db, workspace_id, owner_id)
    if not workspace.files:
        return []

    by_id = {f.file_id: f for f in await get_files(db, workspace.files)}
    return [by_id[file_id] for file_id in workspace.files if file_id in by_id]


async def _check_addable(db: AsyncSession, owner_id: str, file_ids: Sequence[str]) -> None:
    """All-or-nothing check that every requested file exists and belongs to *owner_id*.

    Compares the fetched count to the requested count, so a request that
    repeats an ID is rejected as not found.
    """
    files = await get_files(db, file_ids)
    if len(files) != len(file_ids):
        msg = "One or more files not found"
        raise WorkspaceFileNotFoundError(msg)

    foreign = [f.file_id for f in files if f.owner_id != owner_id]
    if foreign:
        msg = "You can only add files you own to the workspace"
        raise FileOwnershipError(msg)


async def manage_files(
    db: AsyncSession,
    workspace_id: str,
    owner_id: str,
    action: FileAction,
    file_ids: Sequence[str],
) -> Workspace:
    """Add or remove file references and return the updated workspace.

    Raises ``WorkspaceNotFoundError`` for a missing workspace,
    ``WorkspaceFileNotFoundError`` / ``FileOwnershipError`` when an add
    references missing or foreign files (nothing is persisted in that case).
    """
    workspace = await get_workspace(db, workspace_id, owner_id, for_update=True)

    if action == FileAction.ADD:
        await _check_addable(db, owner_id, file_ids)
        workspace.files = merge_file_ids(workspace.files, file_ids)
    else:
        workspace.files = remove_file_ids(workspace.files, file_ids)

    # Always written, even when the set is unchanged (updated_at must move).
    flag_modified(workspace, "files")
    await db.commit()
    await db.refresh(workspace)

    logger.info(
        "Workspace files {}: {} ({} requested, {} now)",
        action.value,
        workspace_id,
        len(file_ids),
        len(workspace.files),
    )
    return workspace


async def get_context_usage(
    db: AsyncSession,
    workspace_id: str,
    owner_id: str,
    count_tokens: TokenCounter,
) -> ContextUsage:
    """Estimate the tokens the workspace would add to a new conversation."""
    workspace = await get_workspace(db, workspace_id, owner_id)
    files = await get_files(db, workspace.files, include_text=True) if workspace.files else []

    # Tokenizer work is CPU-bound.
    return await to_thread.run_sync(partial(compute_context, workspace.instructions, files, count_tokens))
