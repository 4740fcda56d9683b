"""Workspace conversation listing.

Conversations are created by the chat pipeline; this module only pages
through the ones tagged with a workspace, using keyset pagination on
``(updated_at DESC, conversation_id ASC)``.

The cursor handed out points at the first row of the *next* page (the
overflow row fetched with ``limit + 1``), and the next request starts there
inclusively.  It is the row's ISO-8601 ``updated_at``, or
``<updated_at>|<conversation_id>`` when the row shares its timestamp with the
last row of the current page and the timestamp alone cannot tell them apart.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from chatspace.server.db.scoping import scope_to_owner
from chatspace.server.db.tables import Conversation
from chatspace.server.managers.workspaces import get_workspace

CURSOR_SEPARATOR = "|"


class InvalidCursorError(ValueError):
    """Raised when a pagination cursor cannot be parsed."""


@dataclass(frozen=True)
class ConversationCursor:
    updated_at: datetime
    conversation_id: str | None = None

    @classmethod
    def parse(cls, raw: str) -> ConversationCursor:
        timestamp, sep, conversation_id = raw.partition(CURSOR_SEPARATOR)
        try:
            updated_at = datetime.fromisoformat(timestamp.strip())
        except ValueError:
            msg = f"Invalid cursor: {raw!r}"
            raise InvalidCursorError(msg) from None
        if sep and not conversation_id:
            msg = f"Invalid cursor: {raw!r}"
            raise InvalidCursorError(msg)
        return cls(updated_at=updated_at, conversation_id=conversation_id or None)

    def __str__(self) -> str:
        if self.conversation_id is None:
            return self.updated_at.isoformat()
        return f"{self.updated_at.isoformat()}{CURSOR_SEPARATOR}{self.conversation_id}"


@dataclass
class ConversationPage:
    conversations: list[Conversation]
    next_cursor: str | None
    """Cursor of the next page's first row, or None on the last page."""


def next_page_cursor(last: Conversation, overflow: Conversation) -> ConversationCursor:
    if overflow.updated_at == last.updated_at:
        return ConversationCursor(overflow.updated_at, overflow.conversation_id)
    return ConversationCursor(overflow.updated_at)


async def list_workspace_conversations(
    db: AsyncSession,
    workspace_id: str,
    owner_id: str,
    *,
    limit: int = 25,
    cursor: ConversationCursor | None = None,
) -> ConversationPage:
    """Return one page of non-expired conversations linked to a workspace.

    Raises ``WorkspaceNotFoundError`` if the workspace is missing or not
    owned by *owner_id* (never an empty page).
    """
    await get_workspace(db, workspace_id, owner_id)

    stmt = scope_to_owner(select(Conversation), Conversation, owner_id).where(
        Conversation.workspace_id == workspace_id,
        Conversation.expired_at.is_(None),
    )
    if cursor is not None and cursor.conversation_id is None:
        stmt = stmt.where(Conversation.updated_at <= cursor.updated_at)
    elif cursor is not None:
        stmt = stmt.where(
            or_(
                Conversation.updated_at < cursor.updated_at,
                and_(
                    Conversation.updated_at == cursor.updated_at,
                    Conversation.conversation_id >= cursor.conversation_id,
                ),
            )
        )

    # One extra row tells us whether another page exists.
    stmt = stmt.order_by(Conversation.updated_at.desc(), Conversation.conversation_id).limit(limit + 1)
    result = await db.execute(stmt)
    conversations = list(result.scalars().all())

    next_cursor = None
    if len(conversations) > limit:
        overflow = conversations.pop()
        next_cursor = str(next_page_cursor(conversations[-1], overflow))

    return ConversationPage(conversations=conversations, next_cursor=next_cursor)
