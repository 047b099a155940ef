"""Core event-to-response logic for PageBot."""

from .classify import EventKind, classify_event
from .command import parse_command
from .dispatcher import DispatchResult, MessengerDispatcher

__all__ = [
    "DispatchResult",
    "EventKind",
    "MessengerDispatcher",
    "classify_event",
    "parse_command",
]
