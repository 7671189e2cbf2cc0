"""Chat endpoint streaming one turn as Server-Sent Events."""

from collections.abc import AsyncGenerator

from fastapi import APIRouter
from sse_starlette.sse import EventSourceResponse

from canvaspartner.api.dependencies import OrchestratorDep
from canvaspartner.api.exceptions import InvalidRequestError, SessionNotFoundError
from canvaspartner.api.middleware.auth import UserContextDep
from canvaspartner.api.middleware.context import update_request_context
from canvaspartner.api.models.chat import ChatRequest
from canvaspartner.observability.logging import get_logger
from canvaspartner.orchestration.errors import InvalidMessageError, SessionAccessError
from canvaspartner.orchestration.models import TurnEvent
from canvaspartner.orchestration.streaming import TurnRelay

logger = get_logger(__name__)

router = APIRouter()


@router.post("/chat")
async def chat(
    request: ChatRequest,
    user: UserContextDep,
    orchestrator: OrchestratorDep,
) -> EventSourceResponse:
    """Send a message and stream the partner's answer.

    The stream carries `token` events with assistant text, then exactly one
    `done` or `error` event. Rejected messages and foreign sessions fail
    with a regular error response before the stream opens.

    Raises:
        InvalidRequestError: If the message is blank or too long
        SessionNotFoundError: If the session belongs to another user
    """
    update_request_context(session_id=request.session_id)
    logger.info(
        "chat_request_received",
        message_length=len(request.message),
        has_location=request.location is not None,
    )

    try:
        turn = await orchestrator.prepare_turn(
            user_id=user.user_id,
            session_id=request.session_id,
            message=request.message,
            location=request.location,
        )
    except InvalidMessageError as e:
        raise InvalidRequestError(str(e)) from e
    except SessionAccessError as e:
        raise SessionNotFoundError(str(e)) from e

    relay: TurnRelay[TurnEvent] = TurnRelay(
        lambda cancel: orchestrator.stream_turn(turn, cancel)
    )

    async def event_generator() -> AsyncGenerator[dict[str, str], None]:
        async for event in relay.events():
            yield {"event": event.type, "data": event.model_dump_json()}

    return EventSourceResponse(event_generator())
