"""Graph API client for the Messenger Send and User Profile APIs."""

from __future__ import annotations

from typing import Any

import httpx

from pagebot.config import MessengerConfig
from pagebot.errors import LookupFailure, SendFailure
from pagebot.models import Response, UserInfo
from pagebot.utils.logging import get_logger

log = get_logger(__name__)


class MessengerClient:
    """Posts replies and sender actions to the page's ``me/messages`` endpoint."""

    def __init__(
        self,
        config: MessengerConfig,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=config.timeout)

    @property
    def _auth_params(self) -> dict[str, str]:
        return {"access_token": self._config.access_token}

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    # ------------------------------------------------------------------
    # Send API
    # ------------------------------------------------------------------

    async def send_reply(self, response: Response) -> None:
        try:
            resp = await self._post_messages(response.to_dict())
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise SendFailure(
                response.recipient_id,
                f"HTTP {e.response.status_code}: {e.response.text[:200]}",
            ) from e
        except httpx.HTTPError as e:
            raise SendFailure(response.recipient_id, str(e) or type(e).__name__) from e
        log.debug("reply_sent", recipient=response.recipient_id)

    async def mark_seen(self, sender_id: str) -> None:
        """Best-effort read receipt. Never raises on delivery errors."""
        body = {"recipient": {"id": sender_id}, "sender_action": "mark_seen"}
        try:
            resp = await self._post_messages(body)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            log.warning("mark_seen_failed", error=str(e) or type(e).__name__)

    async def _post_messages(self, body: dict[str, Any]) -> httpx.Response:
        return await self._http.post(
            self._config.messages_url,
            params=self._auth_params,
            json=body,
        )

    # ------------------------------------------------------------------
    # User Profile API
    # ------------------------------------------------------------------

    async def get_user_info(self, sender_id: str) -> UserInfo:
        try:
            resp = await self._http.get(
                self._config.profile_url(sender_id),
                params={"fields": "first_name", **self._auth_params},
            )
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise LookupFailure(f"profile lookup for {sender_id} failed: {e}") from e

        first_name = data.get("first_name") if isinstance(data, dict) else None
        if not isinstance(first_name, str):
            raise LookupFailure(f"profile for {sender_id} has no first_name")
        return UserInfo(first_name=first_name)
