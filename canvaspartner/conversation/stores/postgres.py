"""PostgreSQL implementations of SessionStore and MessageStore."""

import json
from typing import Any
from uuid import UUID, uuid4

import asyncpg
from pydantic import ValidationError

from canvaspartner.canvas.models import GeoPoint
from canvaspartner.conversation.models import Message, MessageRole, Session
from canvaspartner.conversation.models.session import utc_now
from canvaspartner.conversation.store import MessageStore, SessionStore
from canvaspartner.db.errors import ConnectionError
from canvaspartner.db.pool import PostgresPool
from canvaspartner.observability.logging import get_logger
from canvaspartner.observability.metrics import HISTORY_ROWS_SKIPPED

logger = get_logger(__name__)

_SESSION_COLUMNS = "session_id, user_id, title, active_canvas_id, created_at, updated_at"
_MESSAGE_COLUMNS = (
    "message_id, session_id, role, content, tool_calls, tool_call_id, location, created_at"
)


def _decode_json(value: Any) -> Any:
    if isinstance(value, str):
        return json.loads(value)
    return value


def _skip_row(data: dict[str, Any], reason: str, **fields: Any) -> None:
    logger.warning(
        "message_row_skipped",
        message_id=str(data["message_id"]),
        reason=reason,
        **fields,
    )
    HISTORY_ROWS_SKIPPED.labels(reason=reason).inc()


def _decode_location(data: dict[str, Any]) -> GeoPoint | None:
    """Decode the location side payload; an invalid one is dropped, not the row."""
    try:
        location = _decode_json(data["location"])
        return GeoPoint.model_validate(location) if location else None
    except (ValueError, ValidationError) as e:
        logger.warning(
            "message_location_dropped",
            message_id=str(data["message_id"]),
            error=str(e),
        )
        return None


def _row_to_message(data: dict[str, Any]) -> Message | None:
    """Build a Message from a row, or None when the row cannot be decoded."""
    if data["role"] not in MessageRole._value2member_map_:
        _skip_row(data, "unknown_role", role=data["role"])
        return None

    try:
        tool_calls = _decode_json(data["tool_calls"])
        if tool_calls is not None and not isinstance(tool_calls, list):
            raise ValueError(f"tool_calls must be an array, got {type(tool_calls).__name__}")
        return Message.model_validate(
            {
                **data,
                "content": data["content"] or "",
                "tool_calls": tool_calls,
                "location": _decode_location(data),
            }
        )
    except (ValueError, ValidationError) as e:
        _skip_row(data, "malformed_row", error=str(e))
        return None


class PostgresSessionStore(SessionStore):
    """Sessions in the `chat_sessions` table."""

    def __init__(self, pool: PostgresPool) -> None:
        self._pool = pool

    async def get(self, session_id: str) -> Session | None:
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"SELECT {_SESSION_COLUMNS} FROM chat_sessions WHERE session_id = $1",
                    session_id,
                )
        except asyncpg.PostgresError as e:
            logger.error("postgres_get_error", session_id=session_id, error=str(e))
            raise ConnectionError(f"Failed to get session: {e}", cause=e) from e

        if not row:
            logger.debug("session_not_found", session_id=session_id)
            return None
        return Session.model_validate(dict(row))

    async def create(self, session_id: str, user_id: str, title: str) -> Session:
        session = Session(session_id=session_id, user_id=user_id, title=title)
        try:
            async with self._pool.acquire() as conn:
                await conn.execute(
                    f"""
                    INSERT INTO chat_sessions ({_SESSION_COLUMNS})
                    VALUES ($1, $2, $3, $4, $5, $6)
                    """,
                    session.session_id,
                    session.user_id,
                    session.title,
                    session.active_canvas_id,
                    session.created_at,
                    session.updated_at,
                )
        except asyncpg.PostgresError as e:
            logger.error("postgres_create_error", session_id=session_id, error=str(e))
            raise ConnectionError(f"Failed to create session: {e}", cause=e) from e

        logger.info("session_created", session_id=session_id)
        return session

    async def touch(self, session_id: str) -> None:
        await self._execute(
            "UPDATE chat_sessions SET updated_at = $2 WHERE session_id = $1",
            session_id,
            utc_now(),
        )

    async def set_active_canvas(self, session_id: str, canvas_id: UUID | None) -> None:
        await self._execute(
            "UPDATE chat_sessions SET active_canvas_id = $2 WHERE session_id = $1",
            session_id,
            canvas_id,
        )

    async def list_by_user(self, user_id: str, *, limit: int = 100) -> list[Session]:
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(
                    f"""
                    SELECT {_SESSION_COLUMNS} FROM chat_sessions
                    WHERE user_id = $1
                    ORDER BY updated_at DESC
                    LIMIT $2
                    """,
                    user_id,
                    limit,
                )
        except asyncpg.PostgresError as e:
            logger.error("postgres_list_error", error=str(e))
            raise ConnectionError(f"Failed to list sessions: {e}", cause=e) from e
        return [Session.model_validate(dict(row)) for row in rows]

    async def delete(self, session_id: str) -> bool:
        result = await self._execute(
            "DELETE FROM chat_sessions WHERE session_id = $1",
            session_id,
        )
        deleted = result.split()[-1] == "1"
        logger.info("session_deleted", session_id=session_id, deleted=deleted)
        return deleted

    async def _execute(self, query: str, *args: Any) -> str:
        try:
            async with self._pool.acquire() as conn:
                return await conn.execute(query, *args)
        except asyncpg.PostgresError as e:
            logger.error("postgres_execute_error", error=str(e))
            raise ConnectionError(f"Session update failed: {e}", cause=e) from e


class PostgresMessageStore(MessageStore):
    """Messages in the `chat_messages` table, ordered by insertion sequence."""

    def __init__(self, pool: PostgresPool) -> None:
        self._pool = pool

    async def append(
        self,
        session_id: str,
        role: MessageRole,
        content: str,
        *,
        tool_calls: list[dict[str, Any]] | None = None,
        tool_call_id: str | None = None,
        location: GeoPoint | None = None,
    ) -> Message:
        message = Message(
            message_id=uuid4(),
            session_id=session_id,
            role=role,
            content=content,
            tool_calls=tool_calls,
            tool_call_id=tool_call_id,
            location=location,
        )
        try:
            async with self._pool.acquire() as conn:
                await conn.execute(
                    f"""
                    INSERT INTO chat_messages ({_MESSAGE_COLUMNS})
                    VALUES ($1, $2, $3, $4, $5::jsonb, $6, $7::jsonb, $8)
                    """,
                    message.message_id,
                    message.session_id,
                    message.role.value,
                    message.content,
                    json.dumps(tool_calls) if tool_calls is not None else None,
                    message.tool_call_id,
                    location.model_dump_json() if location else None,
                    message.created_at,
                )
        except asyncpg.PostgresError as e:
            logger.error("postgres_append_error", session_id=session_id, error=str(e))
            raise ConnectionError(f"Failed to append message: {e}", cause=e) from e
        return message

    async def list_by_session(self, session_id: str) -> list[Message]:
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(
                    f"""
                    SELECT {_MESSAGE_COLUMNS} FROM chat_messages
                    WHERE session_id = $1
                    ORDER BY seq ASC
                    """,
                    session_id,
                )
        except asyncpg.PostgresError as e:
            logger.error("postgres_list_error", session_id=session_id, error=str(e))
            raise ConnectionError(f"Failed to list messages: {e}", cause=e) from e

        messages: list[Message] = []
        for row in rows:
            message = _row_to_message(dict(row))
            if message is not None:
                messages.append(message)
        return messages

    async def delete_by_session(self, session_id: str) -> int:
        try:
            async with self._pool.acquire() as conn:
                result = await conn.execute(
                    "DELETE FROM chat_messages WHERE session_id = $1",
                    session_id,
                )
        except asyncpg.PostgresError as e:
            logger.error("postgres_delete_error", session_id=session_id, error=str(e))
            raise ConnectionError(f"Failed to delete messages: {e}", cause=e) from e
        return int(result.split()[-1])
