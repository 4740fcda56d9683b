"""Chat request payload as seen by the completion pipeline.

Only the fields workspace context injection reads or writes are modelled;
anything else the client sends is kept as an extra field and passed through
unchanged.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

NO_PARENT = "00000000-0000-0000-0000-000000000000"
"""``parent_message_id`` sentinel for the first message of a conversation."""


class ChatRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    text: str = ""
    conversation_id: str | None = None
    parent_message_id: str | None = None
    workspace_id: str | None = None
    prompt_prefix: str | None = None
    files: list[dict[str, Any]] = Field(default_factory=list)

    @property
    def is_first_message(self) -> bool:
        return self.parent_message_id in (None, NO_PARENT)
