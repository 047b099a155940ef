"""Exception types raised across the dispatch path."""

from __future__ import annotations


class PageBotError(Exception):
    """Base class for PageBot errors."""


class InvalidPayloadSource(PageBotError):
    """The webhook payload was not generated by a page subscription."""

    def __init__(self, reason: str = "Message not generated by a page.") -> None:
        super().__init__(reason)
        self.reason = reason


class LookupFailure(PageBotError):
    """The user profile lookup failed. Recovered locally, never surfaced."""


class SendFailure(PageBotError):
    """Delivering a reply to the messaging platform failed."""

    def __init__(self, recipient_id: str | None, reason: str) -> None:
        super().__init__(f"send to {recipient_id or '?'} failed: {reason}")
        self.recipient_id = recipient_id
        self.reason = reason
