"""Slash command parsing."""

from __future__ import annotations

from pagebot.models import Command


def parse_command(text: str, marker: str = "/") -> Command | None:
    """Parse ``/name rest of line`` into a Command, or None if not a command.

    The name is everything before the first space with the marker stripped;
    the parameters are everything after that space, possibly empty.
    """
    if not text or not text.startswith(marker):
        return None

    name, sep, parameters = text.partition(" ")
    return Command(name=name.replace(marker, ""), parameters=parameters if sep else "")
