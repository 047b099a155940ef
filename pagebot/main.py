"""PageBot entry point: wires everything together and runs the webhook server."""

from __future__ import annotations

import asyncio
import signal
import sys

import click
import httpx

from pagebot import __version__
from pagebot.config import Settings, load_settings
from pagebot.core.dispatcher import MessengerDispatcher
from pagebot.messenger.catalog import example_elements
from pagebot.messenger.client import MessengerClient
from pagebot.telegram.bot import TelegramBot
from pagebot.utils.logging import get_logger, setup_logging
from pagebot.webhooks.server import WebhookServer

log = get_logger(__name__)


class PageBot:
    """Main application orchestrator."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

        if not settings.messenger.access_token:
            log.warning(
                "messenger_no_access_token",
                msg="No page access token configured; Send API calls will be rejected.",
            )

        self.http = httpx.AsyncClient(timeout=settings.messenger.timeout)
        self.messenger = MessengerClient(settings.messenger, self.http)
        self.dispatcher = MessengerDispatcher(
            send_reply=self.messenger.send_reply,
            mark_seen=self.messenger.mark_seen,
            lookup_user_info=self.messenger.get_user_info,
            catalog=example_elements,
            get_started_payload=settings.messenger.get_started_payload,
        )
        self.telegram = TelegramBot(settings.telegram)
        self.server = WebhookServer(settings.webhooks, self.dispatcher, self.telegram)

    async def start(self) -> None:
        log.info("pagebot_starting", version=__version__)
        await self.server.start()
        log.info("pagebot_ready")

    async def stop(self) -> None:
        log.info("pagebot_stopping")
        await self.server.stop()
        await self.dispatcher.aclose()
        await self.messenger.aclose()
        await self.http.aclose()
        log.info("pagebot_stopped")


async def run(settings: Settings) -> None:
    app = PageBot(settings)

    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()

    def _signal_handler() -> None:
        log.info("shutdown_signal")
        stop_event.set()

    if sys.platform != "win32":
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, _signal_handler)

    await app.start()

    try:
        if sys.platform == "win32":
            while not stop_event.is_set():
                await asyncio.sleep(1)
        else:
            await stop_event.wait()
    except KeyboardInterrupt:
        pass
    finally:
        await app.stop()


@click.command()
@click.option("--config", "config_path", default=None, help="Path to config YAML file")
@click.option("--log-level", default=None, help="Log level (DEBUG, INFO, WARNING, ERROR)")
@click.option("--port", default=None, type=int, help="Override the webhook listen port")
def cli(config_path: str | None, log_level: str | None, port: int | None) -> None:
    """Start the PageBot webhook server."""
    settings = load_settings(config_path)
    if log_level:
        settings.log_level = log_level
    if port is not None:
        settings.webhooks.port = port
    setup_logging(level=settings.log_level, json_output=settings.log_json)
    asyncio.run(run(settings))


if __name__ == "__main__":
    cli()
