"""Pure classification of inbound Messenger events."""

from __future__ import annotations

from enum import Enum

from pagebot.core.text import has_greeting, has_shopping_keyword
from pagebot.models import InboundEvent

DEFAULT_GET_STARTED_PAYLOAD = "GET_STARTED"


class EventKind(str, Enum):
    GET_STARTED = "get_started"
    POSTBACK_ECHO = "postback_echo"
    MISSING_PAYLOAD = "missing_payload"
    EMPTY_MESSAGE = "empty_message"
    GREETING = "greeting"
    SHOPPING = "shopping"
    REVERSE = "reverse"
    UNKNOWN = "unknown"


def classify_event(
    event: InboundEvent,
    get_started_payload: str = DEFAULT_GET_STARTED_PAYLOAD,
) -> EventKind:
    """Decide which reply an event gets. Postbacks win over message fields."""
    if event.postback is not None:
        payload = event.postback.payload
        if payload is None:
            return EventKind.MISSING_PAYLOAD
        if payload == get_started_payload:
            return EventKind.GET_STARTED
        return EventKind.POSTBACK_ECHO

    if event.has_message:
        text = event.message_text or ""
        if not text:
            return EventKind.EMPTY_MESSAGE
        if has_greeting(text):
            return EventKind.GREETING
        if has_shopping_keyword(text):
            return EventKind.SHOPPING
        return EventKind.REVERSE

    return EventKind.UNKNOWN
