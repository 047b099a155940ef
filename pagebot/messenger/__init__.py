"""Messenger platform integration."""

from .catalog import example_elements
from .client import MessengerClient

__all__ = ["MessengerClient", "example_elements"]
