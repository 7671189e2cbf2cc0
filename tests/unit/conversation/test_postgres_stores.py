"""Tests for PostgresMessageStore row decoding against a fake pool."""

import json
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from prometheus_client import REGISTRY

from canvaspartner.conversation.history import reconstruct_history
from canvaspartner.conversation.models import MessageRole
from canvaspartner.conversation.stores.postgres import PostgresMessageStore


class FakePool:
    """Stands in for PostgresPool; every query returns the configured rows."""

    def __init__(self, rows: list[dict[str, Any]]) -> None:
        self.conn = MagicMock()
        self.conn.fetch = AsyncMock(return_value=rows)

    @asynccontextmanager
    async def acquire(self):
        yield self.conn


def _row(role: str, content: str | None = "", **columns: Any) -> dict[str, Any]:
    return {
        "message_id": uuid4(),
        "session_id": "s-1",
        "role": role,
        "content": content,
        "tool_calls": None,
        "tool_call_id": None,
        "location": None,
        "created_at": datetime.now(UTC),
        **columns,
    }


def _skipped(reason: str) -> float:
    return REGISTRY.get_sample_value(
        "canvaspartner_history_rows_skipped_total", {"reason": reason}
    ) or 0.0


def _store(rows: list[dict[str, Any]]) -> PostgresMessageStore:
    return PostgresMessageStore(FakePool(rows))  # type: ignore[arg-type]


class TestListBySession:
    @pytest.mark.asyncio
    async def test_json_columns_are_decoded(self):
        call = {"id": "c1", "type": "function", "function": {"name": "search_web", "arguments": "{}"}}
        store = _store([
            _row("user", "Where should I open?", location='{"lat": 1.5, "lon": 2.5}'),
            _row("assistant", "", tool_calls=json.dumps([call])),
            _row("tool", None, tool_call_id="c1"),
        ])

        messages = await store.list_by_session("s-1")

        assert [m.role for m in messages] == [
            MessageRole.USER,
            MessageRole.ASSISTANT,
            MessageRole.TOOL,
        ]
        assert messages[0].location.lat == 1.5
        assert messages[1].tool_calls == [call]
        assert messages[2].content == ""

    @pytest.mark.asyncio
    async def test_tool_calls_object_skips_the_row(self):
        before = _skipped("malformed_row")
        store = _store([
            _row("user", "hello"),
            _row("assistant", "", tool_calls='{"id": "c1", "name": "x"}'),
        ])

        messages = await store.list_by_session("s-1")

        assert [(m.role, m.content) for m in messages] == [(MessageRole.USER, "hello")]
        assert _skipped("malformed_row") == before + 1

    @pytest.mark.asyncio
    async def test_undecodable_json_skips_the_row(self):
        store = _store([
            _row("user", "hello"),
            _row("assistant", "", tool_calls="[{not json"),
            _row("assistant", "Still here."),
        ])

        messages = await store.list_by_session("s-1")

        assert [m.content for m in messages] == ["hello", "Still here."]

    @pytest.mark.asyncio
    async def test_invalid_location_is_dropped_but_message_kept(self):
        store = _store([
            _row("user", "hello"),
            _row("user", "I am north of here", location='{"lat": "north"}'),
        ])

        messages = await store.list_by_session("s-1")

        assert [m.content for m in messages] == ["hello", "I am north of here"]
        assert messages[1].location is None

    @pytest.mark.asyncio
    async def test_unknown_role_is_skipped(self):
        before = _skipped("unknown_role")
        store = _store([_row("function", "legacy"), _row("user", "hello")])

        messages = await store.list_by_session("s-1")

        assert [m.content for m in messages] == ["hello"]
        assert _skipped("unknown_role") == before + 1

    @pytest.mark.asyncio
    async def test_skipped_call_row_orphans_its_tool_reply(self):
        store = _store([
            _row("user", "Find competitors"),
            _row("assistant", "", tool_calls='{"id": "c1"}'),
            _row("tool", '{"status": "success"}', tool_call_id="c1"),
            _row("assistant", "Here is what I found."),
        ])

        history = reconstruct_history(await store.list_by_session("s-1"))

        assert [m.role for m in history.messages] == ["user", "assistant"]
        assert history.messages[1].content == "Here is what I found."
