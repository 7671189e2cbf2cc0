"""Turn orchestration: the step loop, streaming relay and instructions."""

from canvaspartner.orchestration.errors import (
    InvalidMessageError,
    SessionAccessError,
    TurnRejectedError,
)
from canvaspartner.orchestration.models import (
    DoneEvent,
    ErrorEvent,
    FinishReason,
    LoopState,
    PreparedTurn,
    TokenEvent,
    TurnEvent,
)
from canvaspartner.orchestration.orchestrator import TurnOrchestrator
from canvaspartner.orchestration.prompts import InstructionContext, build_instructions
from canvaspartner.orchestration.step_loop import StepLoop
from canvaspartner.orchestration.streaming import StreamAccumulator, TurnRelay

__all__ = [
    "DoneEvent",
    "ErrorEvent",
    "FinishReason",
    "InstructionContext",
    "InvalidMessageError",
    "LoopState",
    "PreparedTurn",
    "SessionAccessError",
    "StepLoop",
    "StreamAccumulator",
    "TokenEvent",
    "TurnEvent",
    "TurnOrchestrator",
    "TurnRejectedError",
    "TurnRelay",
    "build_instructions",
]
