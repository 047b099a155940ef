"""Static demo items shown when a user asks to buy, sell or shop."""

from __future__ import annotations

from pagebot.models import Button, Element


_EXAMPLES: tuple[Element, ...] = (
    Element(
        title="PageBot",
        subtitle="Webhook chatbot adapter for Messenger pages and Telegram",
        item_url="https://example.com/pagebot",
        image_url="https://example.com/static/pagebot.png",
        buttons=(
            Button(type="web_url", title="Open Project", url="https://example.com/pagebot"),
            Button(type="postback", title="Call Postback", payload="PageBot payload"),
        ),
    ),
    Element(
        title="Messenger Platform",
        subtitle="Structured messages with generic templates",
        item_url="https://developers.facebook.com/docs/messenger-platform",
        image_url="https://example.com/static/messenger.png",
        buttons=(
            Button(
                type="web_url",
                title="Read the Docs",
                url="https://developers.facebook.com/docs/messenger-platform",
            ),
            Button(type="postback", title="Call Postback", payload="Messenger payload"),
        ),
    ),
    Element(
        title="Telegram Bots",
        subtitle="Slash commands answered straight from the webhook",
        item_url="https://core.telegram.org/bots/api",
        image_url="https://example.com/static/telegram.png",
        buttons=(
            Button(type="web_url", title="Read the Docs", url="https://core.telegram.org/bots/api"),
            Button(type="postback", title="Call Postback", payload="Telegram payload"),
        ),
    ),
)


def example_elements() -> list[Element]:
    return list(_EXAMPLES)
