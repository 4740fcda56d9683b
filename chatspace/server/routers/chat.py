"""Chat request preparation endpoint.

The completion pipeline depends on ``PreparedChatRequest`` directly; this
route exposes the same transform so clients can preview what a first message
will carry once workspace context is applied.
"""

from __future__ import annotations

from fastapi import APIRouter

from chatspace.server.deps import PreparedChatRequest
from chatspace.server.models.chat import ChatRequest

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("/prepare", response_model=ChatRequest)
async def prepare_chat(request: PreparedChatRequest) -> ChatRequest:
    return request
