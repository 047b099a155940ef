"""Webhook HTTP server using aiohttp."""

from __future__ import annotations

from typing import Any

import structlog
from aiohttp import web

from pagebot.config import WebhooksConfig
from pagebot.core.dispatcher import MessengerDispatcher
from pagebot.errors import InvalidPayloadSource
from pagebot.telegram.bot import TelegramBot
from pagebot.utils.logging import get_logger

log = get_logger(__name__)

_INVALID_JSON = object()


def _route(path: str) -> str:
    return path if path.startswith("/") else f"/{path}"


class WebhookServer:
    """Receives Messenger and Telegram webhooks and acknowledges them."""

    def __init__(
        self,
        config: WebhooksConfig,
        dispatcher: MessengerDispatcher,
        telegram: TelegramBot,
    ) -> None:
        self._config = config
        self._dispatcher = dispatcher
        self._telegram = telegram
        self._runner: web.AppRunner | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        app = self._build_app()
        self._runner = web.AppRunner(app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self._config.bind, self._config.port)
        await site.start()
        log.info(
            "webhook_server_started",
            bind=self._config.bind,
            port=self._config.port,
        )

    async def stop(self) -> None:
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
        log.info("webhook_server_stopped")

    # ------------------------------------------------------------------
    # App construction
    # ------------------------------------------------------------------

    def _build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_post(_route(self._config.messenger_path), self._handle_messenger)
        app.router.add_post(_route(self._config.telegram_path), self._handle_telegram)
        return app

    # ------------------------------------------------------------------
    # Request handling
    # ------------------------------------------------------------------

    async def _handle_messenger(self, request: web.Request) -> web.Response:
        payload = await self._read_json(request)
        if payload is _INVALID_JSON:
            return web.Response(status=400, text="Invalid JSON")

        with structlog.contextvars.bound_contextvars(webhook="messenger"):
            try:
                result = self._dispatcher.accept_payload(payload)
            except InvalidPayloadSource as e:
                log.warning("webhook_rejected", reason=e.reason)
                return web.json_response({"error": e.reason}, status=400)

        # The platform requires a prompt 200; replies are delivered afterwards
        return web.json_response(result.last_response.to_dict())

    async def _handle_telegram(self, request: web.Request) -> web.Response:
        update = await self._read_json(request)
        if update is _INVALID_JSON or not isinstance(update, dict):
            return web.Response(status=400, text="Invalid JSON")

        with structlog.contextvars.bound_contextvars(webhook="telegram"):
            reply = self._telegram.handle_update(update)

        if reply is None:
            return web.json_response({})
        return web.json_response(reply.to_dict())

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    async def _read_json(request: web.Request) -> Any:
        try:
            return await request.json()
        except ValueError:
            return _INVALID_JSON
