"""Typed values for inbound webhook events and outbound replies."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Union

from pagebot.utils.logging import get_logger

log = get_logger(__name__)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Command:
    name: str
    parameters: str = ""


# ---------------------------------------------------------------------------
# Inbound (Messenger webhook)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Postback:
    payload: str | None = None
    title: str = ""


@dataclass(frozen=True)
class InboundEvent:
    """One entry of a page's ``messaging`` array."""

    sender_id: str
    postback: Postback | None = None
    message_text: str | None = None
    has_message: bool = False

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> InboundEvent:
        """Decode one event, treating odd-shaped fields as absent."""
        sender = raw.get("sender")
        sender_id = sender.get("id") if isinstance(sender, dict) else None
        if not isinstance(sender_id, (str, int)) or isinstance(sender_id, bool):
            sender_id = ""

        postback = None
        raw_postback = raw.get("postback")
        if isinstance(raw_postback, dict):
            payload = raw_postback.get("payload")
            title = raw_postback.get("title")
            postback = Postback(
                payload=payload if isinstance(payload, str) else None,
                title=title if isinstance(title, str) else "",
            )

        raw_message = raw.get("message")
        has_message = isinstance(raw_message, dict)
        message_text = None
        if has_message:
            # Attachment-only messages carry no text
            text = raw_message.get("text")
            message_text = text if isinstance(text, str) else ""

        return cls(
            sender_id=str(sender_id),
            postback=postback,
            message_text=message_text,
            has_message=has_message,
        )


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def parse_entries(payload: dict[str, Any]) -> Iterator[InboundEvent]:
    """Yield every messaging event of every entry, in input order.

    Entries and events that cannot be decoded, or that name no sender to
    reply to, are logged and skipped.
    """
    for entry in _as_list(payload.get("entry")):
        if not isinstance(entry, dict):
            log.warning("messenger_entry_skipped", entry_type=type(entry).__name__)
            continue
        for raw in _as_list(entry.get("messaging")):
            if not isinstance(raw, dict):
                log.warning("messenger_event_skipped", reason="not an object")
                continue
            event = InboundEvent.from_dict(raw)
            if not event.sender_id:
                log.warning("messenger_event_skipped", reason="no sender id")
                continue
            yield event


@dataclass(frozen=True)
class UserInfo:
    first_name: str


# ---------------------------------------------------------------------------
# Outbound (Messenger Send API)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Button:
    type: str
    title: str
    url: str | None = None
    payload: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.type, "title": self.title}
        if self.url is not None:
            data["url"] = self.url
        if self.payload is not None:
            data["payload"] = self.payload
        return data


@dataclass(frozen=True)
class Element:
    title: str
    subtitle: str = ""
    item_url: str | None = None
    image_url: str | None = None
    buttons: tuple[Button, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"title": self.title}
        if self.subtitle:
            data["subtitle"] = self.subtitle
        if self.item_url:
            data["item_url"] = self.item_url
        if self.image_url:
            data["image_url"] = self.image_url
        if self.buttons:
            data["buttons"] = [b.to_dict() for b in self.buttons]
        return data


@dataclass(frozen=True)
class TemplatePayload:
    template_type: str = "generic"
    elements: tuple[Element, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "template_type": self.template_type,
            "elements": [e.to_dict() for e in self.elements],
        }


@dataclass(frozen=True)
class Attachment:
    payload: TemplatePayload
    type: str = "template"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "payload": self.payload.to_dict()}


@dataclass(frozen=True)
class TextMessage:
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text}


@dataclass(frozen=True)
class StructuredMessage:
    attachment: Attachment

    def to_dict(self) -> dict[str, Any]:
        return {"attachment": self.attachment.to_dict()}


OutboundMessage = Union[TextMessage, StructuredMessage]


@dataclass
class Response:
    """Send API envelope. Built fresh for every event."""

    message: OutboundMessage = field(default_factory=lambda: TextMessage("Unknown error."))
    recipient_id: str | None = None
    messaging_type: str = "RESPONSE"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"messaging_type": self.messaging_type}
        if self.recipient_id is not None:
            data["recipient"] = {"id": self.recipient_id}
        data["message"] = self.message.to_dict()
        return data


# ---------------------------------------------------------------------------
# Telegram
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TelegramReply:
    chat_id: int | str
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"method": "sendMessage", "chat_id": self.chat_id, "text": self.text}
