"""Conversation domain: sessions, the message log and its replay."""

from canvaspartner.conversation.continuity import ContinuityTracker, track_active_canvas
from canvaspartner.conversation.history import ReconstructedHistory, reconstruct_history
from canvaspartner.conversation.models import Message, MessageRole, Session
from canvaspartner.conversation.store import MessageStore, SessionStore

__all__ = [
    "ContinuityTracker",
    "Message",
    "MessageRole",
    "MessageStore",
    "ReconstructedHistory",
    "Session",
    "SessionStore",
    "reconstruct_history",
    "track_active_canvas",
]
