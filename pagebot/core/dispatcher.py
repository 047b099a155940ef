"""Messenger webhook dispatch: one reply per inbound event."""

from __future__ import annotations

import asyncio
import functools
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable, Sequence

from pagebot.core.classify import DEFAULT_GET_STARTED_PAYLOAD, EventKind, classify_event
from pagebot.core.text import reverse_preserving_format
from pagebot.errors import InvalidPayloadSource, SendFailure
from pagebot.messenger.catalog import example_elements
from pagebot.models import (
    Attachment,
    Element,
    InboundEvent,
    OutboundMessage,
    Response,
    StructuredMessage,
    TemplatePayload,
    TextMessage,
    UserInfo,
    parse_entries,
)
from pagebot.utils.logging import get_logger

log = get_logger(__name__)

PAGE_OBJECT = "page"

EMPTY_MESSAGE_NOTICE = "I'm sorry but your message is empty 😢"
MISSING_PAYLOAD_NOTICE = "No payload provided by developer."
UNKNOWN_EVENT_NOTICE = "Webhook received unknown event."
GREETING_BODY = (
    "This is an example on how to create a bot with Python.\n"
    'If you want to see more try to send me "buy", "sell" or "shop".'
)

SendReplyFn = Callable[[Response], Awaitable[None]]
MarkSeenFn = Callable[[str], Awaitable[None]]
LookupUserFn = Callable[[str], Awaitable[UserInfo]]
CatalogFn = Callable[[], Sequence[Element]]


@dataclass
class DispatchResult:
    responses: list[Response] = field(default_factory=list)
    failures: list[SendFailure] = field(default_factory=list)

    @property
    def last_response(self) -> Response:
        """The envelope echoed in the webhook acknowledgement."""
        return self.responses[-1] if self.responses else Response()


class MessengerDispatcher:
    """Turns Messenger page events into Send API replies.

    Replies are built synchronously so the webhook acknowledgement is ready
    at once. Mark-seen notifications, user profile lookups and, on the
    ``accept_payload`` path, reply delivery run as detached background work.
    """

    def __init__(
        self,
        send_reply: SendReplyFn,
        mark_seen: MarkSeenFn,
        lookup_user_info: LookupUserFn,
        catalog: CatalogFn = example_elements,
        get_started_payload: str = DEFAULT_GET_STARTED_PAYLOAD,
    ) -> None:
        self._send_reply = send_reply
        self._mark_seen = mark_seen
        self._lookup_user_info = lookup_user_info
        self._catalog = catalog
        self._get_started_payload = get_started_payload
        self._background: set[asyncio.Future[Any]] = set()

    @property
    def pending(self) -> int:
        return len(self._background)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def accept_payload(self, payload: Any) -> DispatchResult:
        """Validate and build every reply, delivering them in the background.

        Failures are appended to the returned result as delivery proceeds.
        """
        result = self.prepare(self._events(payload))
        self._detach(self.deliver(result), label="deliver")
        return result

    async def handle_payload(self, payload: Any) -> DispatchResult:
        """Validate the top-level object type, then dispatch every event."""
        return await self.handle_entries(self._events(payload))

    async def handle_entries(self, events: Iterable[InboundEvent]) -> DispatchResult:
        result = self.prepare(events)
        await self.deliver(result)
        return result

    def prepare(self, events: Iterable[InboundEvent]) -> DispatchResult:
        result = DispatchResult()
        for event in events:
            self._detach(self._mark_seen(event.sender_id), label="mark_seen")

            response = Response(message=self.build_message(event))
            response.recipient_id = event.sender_id
            result.responses.append(response)
        return result

    async def deliver(self, result: DispatchResult) -> None:
        """Send each prepared reply in order. One failure never stops the rest."""
        for response in list(result.responses):
            try:
                await self._send_reply(response)
            except SendFailure as e:
                result.failures.append(e)
                log.warning("reply_send_failed", recipient=e.recipient_id, error=e.reason)
            except Exception as e:
                failure = SendFailure(response.recipient_id, str(e))
                result.failures.append(failure)
                log.exception("reply_send_error", recipient=response.recipient_id)

        log.info(
            "webhook_dispatched",
            events=len(result.responses),
            failures=len(result.failures),
        )

    @staticmethod
    def _events(payload: Any) -> Iterable[InboundEvent]:
        if not isinstance(payload, dict) or payload.get("object") != PAGE_OBJECT:
            raise InvalidPayloadSource()
        return list(parse_entries(payload))

    def build_message(self, event: InboundEvent) -> OutboundMessage:
        kind = classify_event(event, self._get_started_payload)
        log.debug("event_classified", kind=kind.value, sender=event.sender_id)

        if kind in (EventKind.GET_STARTED, EventKind.GREETING):
            return self._greeting(event.sender_id)
        if kind is EventKind.POSTBACK_ECHO:
            return TextMessage(event.postback.payload)
        if kind is EventKind.MISSING_PAYLOAD:
            return TextMessage(MISSING_PAYLOAD_NOTICE)
        if kind is EventKind.EMPTY_MESSAGE:
            return TextMessage(EMPTY_MESSAGE_NOTICE)
        if kind is EventKind.SHOPPING:
            payload = TemplatePayload(template_type="generic", elements=tuple(self._catalog()))
            return StructuredMessage(Attachment(payload=payload))
        if kind is EventKind.REVERSE:
            return TextMessage(reverse_preserving_format(event.message_text or ""))
        return TextMessage(UNKNOWN_EVENT_NOTICE)

    # ------------------------------------------------------------------
    # Greeting
    # ------------------------------------------------------------------

    def _greeting(self, sender_id: str) -> TextMessage:
        first_name = self._peek_first_name(sender_id)
        salutation = f"Hi {first_name}!" if first_name else "Hi!"
        return TextMessage(f"{salutation}\n{GREETING_BODY}")

    def _peek_first_name(self, sender_id: str) -> str | None:
        """Start the profile lookup and use it only if it has already resolved."""
        try:
            lookup = self._detach(self._lookup_user_info(sender_id), label="user_info")
        except Exception:
            log.debug("user_info_lookup_failed", exc_info=True)
            return None

        if not lookup.done() or lookup.cancelled() or lookup.exception() is not None:
            return None
        info = lookup.result()
        return getattr(info, "first_name", None) or None

    # ------------------------------------------------------------------
    # Background work
    # ------------------------------------------------------------------

    def _detach(self, awaitable: Awaitable[Any], label: str) -> asyncio.Future[Any]:
        future = asyncio.ensure_future(awaitable)
        self._background.add(future)
        future.add_done_callback(functools.partial(self._on_background_done, label))
        return future

    def _on_background_done(self, label: str, future: asyncio.Future[Any]) -> None:
        self._background.discard(future)
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            log.debug("background_task_failed", task=label, error=str(exc))

    async def drain(self) -> None:
        """Wait for outstanding mark-seen and lookup work to finish."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    async def aclose(self) -> None:
        pending = list(self._background)
        for future in pending:
            future.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        self._background.clear()
