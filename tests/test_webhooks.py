"""Tests for the webhook HTTP server."""

import asyncio

import pytest
from unittest.mock import AsyncMock
from aiohttp.test_utils import TestClient, TestServer

from pagebot.config import TelegramConfig, WebhooksConfig
from pagebot.core.dispatcher import MessengerDispatcher
from pagebot.errors import SendFailure
from pagebot.telegram.bot import TelegramBot
from pagebot.webhooks.server import WebhookServer


@pytest.fixture
def send_reply():
    return AsyncMock()


@pytest.fixture
async def dispatcher(send_reply):
    d = MessengerDispatcher(send_reply, AsyncMock(), AsyncMock(side_effect=LookupError))
    yield d
    await d.aclose()


@pytest.fixture
def webhook_config():
    return WebhooksConfig(port=0, messenger_path="/webhooks/messenger", telegram_path="telegram")


@pytest.fixture
def server(webhook_config, dispatcher):
    return WebhookServer(webhook_config, dispatcher, TelegramBot(TelegramConfig()))


@pytest.fixture
async def client(server):
    app = server._build_app()
    async with TestClient(TestServer(app)) as c:
        yield c


def page_payload(text):
    return {
        "object": "page",
        "entry": [
            {
                "id": "page-1",
                "time": 1,
                "messaging": [
                    {
                        "sender": {"id": "user-1"},
                        "recipient": {"id": "page-1"},
                        "message": {"mid": "m1", "text": text},
                    }
                ],
            }
        ],
    }


class TestMessengerWebhook:
    async def test_malformed_payload_returns_400(self, client, send_reply):
        resp = await client.post(
            "/webhooks/messenger",
            data=b"not json",
            headers={"Content-Type": "application/json"},
        )
        assert resp.status == 400
        send_reply.assert_not_awaited()

    async def test_non_page_object_returns_400(self, client, send_reply):
        resp = await client.post("/webhooks/messenger", json={"object": "instagram", "entry": []})
        assert resp.status == 400
        body = await resp.json()
        assert body == {"error": "Message not generated by a page."}
        send_reply.assert_not_awaited()

    async def test_valid_message_returns_200_with_envelope(self, client, send_reply, dispatcher):
        resp = await client.post("/webhooks/messenger", json=page_payload("abc"))
        assert resp.status == 200
        body = await resp.json()
        assert body == {
            "messaging_type": "RESPONSE",
            "recipient": {"id": "user-1"},
            "message": {"text": "cba"},
        }
        await dispatcher.drain()
        send_reply.assert_awaited_once()

    async def test_send_failure_still_acknowledged(self, client, send_reply):
        send_reply.side_effect = SendFailure("user-1", "HTTP 500")
        resp = await client.post("/webhooks/messenger", json=page_payload("abc"))
        assert resp.status == 200

    async def test_greeting_with_failing_lookup(self, client, send_reply):
        resp = await client.post("/webhooks/messenger", json=page_payload("Hello"))
        assert resp.status == 200
        body = await resp.json()
        assert body["message"]["text"].startswith("Hi!")

    async def test_unknown_path_returns_404(self, client):
        resp = await client.post("/webhooks/unknown", json={"object": "page"})
        assert resp.status == 404


class TestTelegramWebhook:
    async def test_command_reply(self, client):
        resp = await client.post(
            "/telegram",
            json={"update_id": 1, "message": {"chat": {"id": 3}, "text": "/start"}},
        )
        assert resp.status == 200
        body = await resp.json()
        assert body["method"] == "sendMessage"
        assert body["chat_id"] == 3
        assert body["text"].startswith("Welcome to PageBot!")

    async def test_update_without_message(self, client):
        resp = await client.post("/telegram", json={"update_id": 1})
        assert resp.status == 200
        assert await resp.json() == {}

    async def test_malformed_payload_returns_400(self, client):
        resp = await client.post("/telegram", data=b"{", headers={"Content-Type": "application/json"})
        assert resp.status == 400


class TestMessengerOddPayloads:
    async def test_json_null_rejected_as_non_page(self, client, send_reply):
        resp = await client.post(
            "/webhooks/messenger",
            data=b"null",
            headers={"Content-Type": "application/json"},
        )
        assert resp.status == 400
        assert await resp.json() == {"error": "Message not generated by a page."}
        send_reply.assert_not_awaited()

    @pytest.mark.parametrize(
        "event",
        [
            {"sender": None, "message": {"text": "hi"}},
            {"sender": {"id": None}, "message": {"text": "hi"}},
            {"sender": {"id": "user-2"}, "message": {"text": 5}},
            {"sender": {"id": "user-2"}, "message": "hi"},
            {"sender": {"id": "user-2"}, "postback": {"payload": ["x"]}},
            "not an event",
        ],
    )
    async def test_odd_event_acknowledged(self, client, dispatcher, event):
        payload = {"object": "page", "entry": [{"id": "page-1", "messaging": [event]}]}
        resp = await client.post("/webhooks/messenger", json=payload)
        assert resp.status == 200
        await dispatcher.drain()

    async def test_odd_entry_does_not_block_siblings(self, client, dispatcher, send_reply):
        payload = page_payload("abc")
        payload["entry"].insert(0, "garbage")
        payload["entry"].append({"id": "page-1", "messaging": None})
        resp = await client.post("/webhooks/messenger", json=payload)
        assert resp.status == 200
        await dispatcher.drain()
        send_reply.assert_awaited_once()
        assert send_reply.await_args.args[0].message.text == "cba"


class TestAcknowledgementTiming:
    async def test_ack_does_not_wait_for_delivery(self, client, dispatcher, send_reply):
        release = asyncio.Event()

        async def slow_send(response):
            await release.wait()

        send_reply.side_effect = slow_send
        payload = page_payload("abc")
        payload["entry"][0]["messaging"] *= 3

        resp = await asyncio.wait_for(
            client.post("/webhooks/messenger", json=payload), timeout=1
        )
        assert resp.status == 200
        assert (await resp.json())["message"] == {"text": "cba"}
        assert dispatcher.pending >= 1

        release.set()
        await dispatcher.drain()
        assert send_reply.await_count == 3


class TestTelegramOddPayloads:
    @pytest.mark.parametrize(
        "message",
        [
            {"chat": None, "text": "/start"},
            {"chat": {"id": None}, "text": "/start"},
            {"chat": "3", "text": "/start"},
        ],
    )
    async def test_no_usable_chat(self, client, message):
        resp = await client.post("/telegram", json={"update_id": 1, "message": message})
        assert resp.status == 200
        assert await resp.json() == {}

    async def test_null_sender_and_odd_text(self, client):
        resp = await client.post(
            "/telegram",
            json={"update_id": 1, "message": {"chat": {"id": 3}, "from": None, "text": 7}},
        )
        assert resp.status == 200
        body = await resp.json()
        assert body["chat_id"] == 3
        assert "empty" in body["text"]

    async def test_json_null_returns_400(self, client):
        resp = await client.post(
            "/telegram", data=b"null", headers={"Content-Type": "application/json"}
        )
        assert resp.status == 400
