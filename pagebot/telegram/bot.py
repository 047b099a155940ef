"""Telegram webhook updates answered inline with a sendMessage reply."""

from __future__ import annotations

from typing import Any

from pagebot.config import TelegramConfig
from pagebot.core.command import parse_command
from pagebot.core.dispatcher import EMPTY_MESSAGE_NOTICE
from pagebot.core.text import reverse_preserving_format
from pagebot.models import Command, TelegramReply
from pagebot.utils.logging import get_logger

log = get_logger(__name__)


class TelegramBot:
    """Handles /start, /help and echoes any other text reversed."""

    def __init__(self, config: TelegramConfig | None = None) -> None:
        self._config = config or TelegramConfig()

    @property
    def marker(self) -> str:
        return self._config.command_marker

    def handle_update(self, update: dict[str, Any]) -> TelegramReply | None:
        message = update.get("message")
        if not isinstance(message, dict):
            return None
        chat = message.get("chat")
        chat_id = chat.get("id") if isinstance(chat, dict) else None
        if not isinstance(chat_id, (int, str)) or isinstance(chat_id, bool):
            log.warning("telegram_update_skipped", reason="no chat id")
            return None

        text = message.get("text")
        if not isinstance(text, str):
            text = ""
        sender = message.get("from")
        first_name = sender.get("first_name") if isinstance(sender, dict) else None
        if not isinstance(first_name, str):
            first_name = ""
        return TelegramReply(chat_id=chat_id, text=self.reply_text(text, first_name))

    def reply_text(self, text: str, first_name: str = "") -> str:
        if not text:
            return EMPTY_MESSAGE_NOTICE

        command = parse_command(text, self.marker)
        if command is None:
            return reverse_preserving_format(text)

        log.info("telegram_command", command=command.name)
        return self._run(command, first_name)

    def _run(self, command: Command, first_name: str) -> str:
        m = self.marker
        if command.name == "start":
            who = f" {first_name}" if first_name else ""
            return (
                f"Welcome to {self._config.bot_name}{who}!\n"
                f"To list all available commands type {m}help"
            )
        if command.name == "help":
            return (
                f"Welcome to {self._config.bot_name}, an example on how to create "
                "a Telegram bot with Python.\n\n"
                f"{m}start - Welcome message\n"
                f"{m}help - Help message\n"
                "Any text - Returns the reversed message"
            )
        return f"Unrecognized command.\nTo list all available commands type {m}help"
