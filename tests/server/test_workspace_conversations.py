"""Integration tests for keyset-paginated workspace conversations."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

pytestmark = pytest.mark.integration

T0 = datetime(2026, 2, 1, 9, 30, tzinfo=UTC)


async def _workspace(client: AsyncClient) -> str:
    resp = await client.post("/api/workspaces", json={"name": "Chats"})
    return resp.json()["workspace_id"]


async def test_cursor_pagination(client: AsyncClient, add_conversation: Callable, db_session: AsyncSession) -> None:
    ws_id = await _workspace(client)
    add_conversation("c-old", T0, workspace_id=ws_id, title="old")
    add_conversation("c-mid", T0 + timedelta(minutes=1), workspace_id=ws_id, title="mid")
    add_conversation("c-new", T0 + timedelta(minutes=2), workspace_id=ws_id, title="new", model="gpt-4o")
    await db_session.flush()

    resp = await client.get(f"/api/workspaces/{ws_id}/conversations", params={"limit": 2})
    assert resp.status_code == 200
    page = resp.json()
    assert [c["conversation_id"] for c in page["conversations"]] == ["c-new", "c-mid"]
    assert page["conversations"][0]["model"] == "gpt-4o"
    # Cursor points at the first conversation of the next page.
    assert page["next_cursor"] is not None
    assert datetime.fromisoformat(page["next_cursor"]) == T0

    resp = await client.get(
        f"/api/workspaces/{ws_id}/conversations",
        params={"limit": 2, "cursor": page["next_cursor"]},
    )
    assert resp.status_code == 200
    page = resp.json()
    assert [c["conversation_id"] for c in page["conversations"]] == ["c-old"]
    assert page["next_cursor"] is None


async def test_walks_every_row_exactly_once(
    client: AsyncClient, add_conversation: Callable, db_session: AsyncSession
) -> None:
    ws_id = await _workspace(client)
    for i in range(7):
        add_conversation(f"c{i}", T0 + timedelta(seconds=i), workspace_id=ws_id)
    await db_session.flush()

    seen: list[str] = []
    params: dict[str, object] = {"limit": 3}
    while True:
        page = (await client.get(f"/api/workspaces/{ws_id}/conversations", params=params)).json()
        seen.extend(c["conversation_id"] for c in page["conversations"])
        if page["next_cursor"] is None:
            break
        params = {"limit": 3, "cursor": page["next_cursor"]}

    assert seen == [f"c{i}" for i in reversed(range(7))]


async def test_pages_advance_through_shared_timestamps(
    client: AsyncClient, add_conversation: Callable, db_session: AsyncSession
) -> None:
    ws_id = await _workspace(client)
    for conversation_id in ("a", "b", "c", "d", "e"):
        add_conversation(conversation_id, T0, workspace_id=ws_id)
    add_conversation("older", T0 - timedelta(hours=1), workspace_id=ws_id)
    await db_session.flush()

    pages: list[list[str]] = []
    params: dict[str, object] = {"limit": 2}
    for _ in range(10):
        page = (await client.get(f"/api/workspaces/{ws_id}/conversations", params=params)).json()
        pages.append([c["conversation_id"] for c in page["conversations"]])
        if page["next_cursor"] is None:
            break
        params = {"limit": 2, "cursor": page["next_cursor"]}

    assert pages == [["a", "b"], ["c", "d"], ["e", "older"]]


async def test_zero_limit_uses_default(
    client: AsyncClient, add_conversation: Callable, db_session: AsyncSession
) -> None:
    ws_id = await _workspace(client)
    for i in range(30):
        add_conversation(f"c{i:02d}", T0 + timedelta(seconds=i), workspace_id=ws_id)
    await db_session.flush()

    resp = await client.get(f"/api/workspaces/{ws_id}/conversations", params={"limit": 0})
    assert resp.status_code == 200
    assert len(resp.json()["conversations"]) == 25
    assert resp.json()["next_cursor"] is not None


async def test_filters_expired_foreign_and_untagged(
    client: AsyncClient, add_conversation: Callable, db_session: AsyncSession
) -> None:
    ws_id = await _workspace(client)
    other_ws = await _workspace(client)
    add_conversation("keep", T0, workspace_id=ws_id)
    add_conversation("expired", T0, workspace_id=ws_id, expired_at=T0 + timedelta(days=30))
    add_conversation("other-workspace", T0, workspace_id=other_ws)
    add_conversation("untagged", T0)
    add_conversation("other-user", T0, owner_id="user-b", workspace_id=ws_id)
    await db_session.flush()

    resp = await client.get(f"/api/workspaces/{ws_id}/conversations")
    assert resp.status_code == 200
    assert [c["conversation_id"] for c in resp.json()["conversations"]] == ["keep"]
    assert resp.json()["next_cursor"] is None


async def test_foreign_workspace_is_not_found(client: AsyncClient, other_client: AsyncClient) -> None:
    ws_id = await _workspace(client)
    resp = await other_client.get(f"/api/workspaces/{ws_id}/conversations")
    assert resp.status_code == 404


async def test_invalid_cursor(client: AsyncClient) -> None:
    ws_id = await _workspace(client)
    resp = await client.get(f"/api/workspaces/{ws_id}/conversations", params={"cursor": "yesterday"})
    assert resp.status_code == 400
