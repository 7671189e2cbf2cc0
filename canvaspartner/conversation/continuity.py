"""Tracks which canvas a session is working on.

Tool results that touch a canvas carry its id in a `canvas_id` field.
Scanning them in order and keeping the last id seen gives the canvas the
next model call should update instead of creating a new one.
"""

import json
from collections.abc import Iterable
from typing import Any
from uuid import UUID

from canvaspartner.observability.logging import get_logger

logger = get_logger(__name__)


def extract_canvas_id(content: str | None) -> UUID | None:
    """Return the canvas id carried by a tool result payload, if any."""
    if not content:
        return None
    try:
        payload = json.loads(content)
    except (TypeError, ValueError):
        return None
    if not isinstance(payload, dict):
        return None

    raw = payload.get("canvas_id")
    if not raw or not isinstance(raw, str):
        return None
    try:
        return UUID(raw)
    except ValueError:
        logger.debug("continuity_invalid_canvas_id", canvas_id=raw)
        return None


class ContinuityTracker:
    """Last-write-wins view of the active canvas over tool messages."""

    def __init__(self, initial: UUID | None = None) -> None:
        self._active: UUID | None = initial

    @property
    def active_canvas_id(self) -> UUID | None:
        return self._active

    def observe(self, message: Any) -> UUID | None:
        """Feed one message; non-tool messages are ignored."""
        if getattr(message, "role", None) != "tool":
            return self._active
        canvas_id = extract_canvas_id(getattr(message, "content", None))
        if canvas_id is not None:
            self._active = canvas_id
        return self._active


def track_active_canvas(messages: Iterable[Any]) -> UUID | None:
    tracker = ContinuityTracker()
    for message in messages:
        tracker.observe(message)
    return tracker.active_canvas_id
