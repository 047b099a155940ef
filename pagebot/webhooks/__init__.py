"""Inbound webhook HTTP surface."""

from .server import WebhookServer

__all__ = ["WebhookServer"]
