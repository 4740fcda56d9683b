"""Data models for the workspace service."""

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
from chatspace.server.models.chat import NO_PARENT, ChatRequest
from chatspace.server.models.enums import FileAction

__all__ = [
    "NO_PARENT",
    # Chat
    "ChatRequest",
    # API schemas
    "ContextBreakdown",
    "ConversationPageResponse",
    "ConversationResponse",
    # Enums
    "FileAction",
    "FileResponse",
    "Pagination",
    "WorkspaceContextResponse",
    "WorkspaceCreate",
    "WorkspaceFilesUpdate",
    "WorkspaceListResponse",
    "WorkspaceResponse",
    "WorkspaceUpdate",
]
