"""Session listing, history and deletion endpoints."""

from fastapi import APIRouter, Query, Response, status

from canvaspartner.api.dependencies import MessageStoreDep, SessionStoreDep
from canvaspartner.api.exceptions import SessionNotFoundError
from canvaspartner.api.middleware.auth import UserContextDep
from canvaspartner.api.models.session import (
    MessageListResponse,
    MessageView,
    SessionListResponse,
    SessionSummary,
)
from canvaspartner.conversation.models import MessageRole, Session
from canvaspartner.conversation.store import SessionStore
from canvaspartner.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()

_VISIBLE_ROLES = {MessageRole.USER, MessageRole.ASSISTANT}


async def _owned_session(store: SessionStore, session_id: str, user_id: str) -> Session:
    session = await store.get(session_id)
    if session is None or not session.is_owned_by(user_id):
        raise SessionNotFoundError(f"Session {session_id} not found")
    return session


@router.get("/sessions", response_model=SessionListResponse)
async def list_sessions(
    user: UserContextDep,
    session_store: SessionStoreDep,
    limit: int = Query(default=50, ge=1, le=100),
) -> SessionListResponse:
    """List the caller's sessions, most recently active first."""
    sessions = await session_store.list_by_user(user.user_id, limit=limit)
    return SessionListResponse(sessions=[SessionSummary.from_session(s) for s in sessions])


@router.get("/sessions/{session_id}/messages", response_model=MessageListResponse)
async def get_session_messages(
    session_id: str,
    user: UserContextDep,
    session_store: SessionStoreDep,
    message_store: MessageStoreDep,
) -> MessageListResponse:
    """Return the conversation as the user saw it.

    Tool traffic and the empty assistant messages that carried tool calls
    are left out.
    """
    await _owned_session(session_store, session_id, user.user_id)
    messages = await message_store.list_by_session(session_id)
    return MessageListResponse(
        session_id=session_id,
        messages=[
            MessageView.from_message(m)
            for m in messages
            if m.role in _VISIBLE_ROLES and m.content.strip()
        ],
    )


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(
    session_id: str,
    user: UserContextDep,
    session_store: SessionStoreDep,
    message_store: MessageStoreDep,
) -> Response:
    """Delete a session and its messages. Canvases are kept."""
    await _owned_session(session_store, session_id, user.user_id)
    removed = await message_store.delete_by_session(session_id)
    await session_store.delete(session_id)
    logger.info("session_deleted", session_id=session_id, messages_removed=removed)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
