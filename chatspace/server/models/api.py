"""API request / response schemas for the workspace endpoints.

- **Create** schemas validate user input and normalise whitespace.
- **Update** schemas allow partial updates via ``exclude_unset``.
- **Response** schemas serialize ORM rows via ``from_attributes``.

Validation failures raised here surface as HTTP 400 (see ``errors.py``).
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from chatspace.server.models.enums import FileAction

# ---------------------------------------------------------------------------
# Workspace
# ---------------------------------------------------------------------------


class WorkspaceCreate(BaseModel):
    """Input for creating a new workspace."""

    name: str
    description: str | None = None
    instructions: str | None = Field(default=None, description="Prepended to the prompt of new conversations.")

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            msg = "Workspace name is required"
            raise ValueError(msg)
        return value

    @field_validator("description", "instructions")
    @classmethod
    def _strip_optional(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None


class WorkspaceUpdate(BaseModel):
    """Partial workspace update.

    Routers should use ``body.model_dump(exclude_unset=True)`` so that only
    the fields sent by the caller are applied.  An explicit ``null`` for
    ``description`` or ``instructions`` clears the field; ``name`` can never
    be cleared.
    """

    name: str | None = None
    description: str | None = None
    instructions: str | None = None

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str | None) -> str:
        stripped = value.strip() if value is not None else ""
        if not stripped:
            msg = "Workspace name cannot be empty"
            raise ValueError(msg)
        return stripped

    @field_validator("description", "instructions")
    @classmethod
    def _strip_or_clear(cls, value: str | None) -> str:
        return value.strip() if value else ""


class WorkspaceResponse(BaseModel):
    """Serialized workspace returned to clients."""

    model_config = ConfigDict(from_attributes=True)

    workspace_id: str
    owner_id: str
    name: str
    description: str | None = None
    instructions: str | None = None
    files: list[str]
    created_at: datetime
    updated_at: datetime


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class WorkspaceListResponse(BaseModel):
    workspaces: list[WorkspaceResponse]
    pagination: Pagination


# ---------------------------------------------------------------------------
# Workspace files
# ---------------------------------------------------------------------------


class WorkspaceFilesUpdate(BaseModel):
    """Add or remove file references on a workspace."""

    action: FileAction
    file_ids: list[str] = Field(min_length=1, description="Non-empty list of file IDs.")


class FileResponse(BaseModel):
    """Serialized file record.  Extracted text is never included."""

    model_config = ConfigDict(from_attributes=True)

    file_id: str
    owner_id: str
    filename: str
    type: str
    bytes: int
    width: int | None = None
    height: int | None = None
    created_at: datetime
    updated_at: datetime


class ContextBreakdown(BaseModel):
    instructions: int
    files: int


class WorkspaceContextResponse(BaseModel):
    """Token estimate for the context a workspace injects into a conversation."""

    token_count: int
    breakdown: ContextBreakdown
    file_tokens: dict[str, int] = Field(description="Per-file estimate; only files with a positive estimate.")
    unknown_bytes: int = Field(description="Total size of files whose tokens could not be estimated.")


# ---------------------------------------------------------------------------
# Conversation
# ---------------------------------------------------------------------------


class ConversationResponse(BaseModel):
    """Serialized conversation summary returned to clients."""

    model_config = ConfigDict(from_attributes=True)

    conversation_id: str
    owner_id: str
    title: str | None = None
    endpoint: str | None = None
    model: str | None = None
    workspace_id: str | None = None
    created_at: datetime
    updated_at: datetime


class ConversationPageResponse(BaseModel):
    conversations: list[ConversationResponse]
    next_cursor: str | None = Field(
        default=None, description="ISO-8601 ``updated_at`` to pass as ``cursor``; null on the last page."
    )
