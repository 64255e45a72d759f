"""
Infobip sender tests.

HTTP is faked with httpx.MockTransport; no network access.
"""

import json

import httpx
import pytest

from transport.whatsapp.sender import InfobipSender, WhatsAppSenderError

API_KEY = "0123456789abcdef0123456789abcdef"


def _sender(handler) -> tuple[InfobipSender, list[httpx.Request]]:
    seen: list[httpx.Request] = []

    def record(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    sender = InfobipSender(
        api_key=API_KEY,
        sender_number="385916376631",
        base_url="https://xyz.api.infobip.com/",
        transport=httpx.MockTransport(record),
    )
    return sender, seen


def _ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(
        200,
        json={
            "to": "41780000001",
            "messageCount": 1,
            "messageId": "a28dd97c-1ffb-4fcf-99f1-0b557ed381da",
            "status": {"groupId": 1, "groupName": "PENDING", "name": "PENDING_ENROUTE"},
        },
    )


class TestFormatting:

    def test_adds_plus(self):
        assert InfobipSender.format_phone_number("41780000001") == "+41780000001"

    def test_keeps_existing_plus(self):
        assert InfobipSender.format_phone_number(" +41780000001 ") == "+41780000001"

    def test_generated_ids_unique(self):
        assert InfobipSender.generate_message_id() != InfobipSender.generate_message_id()


class TestSendText:

    @pytest.mark.asyncio
    async def test_request_shape(self):
        sender, seen = _sender(_ok)

        result = await sender.send_text("41780000001", "See you at 17:30!", message_id="out-1")

        assert result.status_name == "PENDING_ENROUTE"
        assert result.message_id == "a28dd97c-1ffb-4fcf-99f1-0b557ed381da"

        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == "https://xyz.api.infobip.com/whatsapp/1/message/text"
        assert request.headers["Authorization"] == f"App {API_KEY}"
        body = json.loads(request.content)
        assert body == {
            "from": "385916376631",
            "to": "+41780000001",
            "messageId": "out-1",
            "content": {"text": "See you at 17:30!"},
        }

    @pytest.mark.asyncio
    async def test_optional_fields(self):
        sender, seen = _sender(_ok)

        await sender.send_text(
            "41780000001", "hi", callback_data="conv-1", notify_url="https://relay.example/webhook/delivery"
        )

        body = json.loads(seen[0].content)
        assert body["callbackData"] == "conv-1"
        assert body["notifyUrl"] == "https://relay.example/webhook/delivery"
        assert body["messageId"]

    @pytest.mark.asyncio
    async def test_missing_api_key(self):
        sender = InfobipSender(api_key="", sender_number="385916376631")
        with pytest.raises(WhatsAppSenderError):
            await sender.send_text("41780000001", "hi")

    @pytest.mark.asyncio
    async def test_unauthorized(self):
        sender, _ = _sender(lambda request: httpx.Response(401, json={"requestError": {}}))

        with pytest.raises(WhatsAppSenderError) as exc:
            await sender.send_text("41780000001", "hi")
        assert exc.value.status_code == 401

    @pytest.mark.asyncio
    async def test_server_error(self):
        sender, _ = _sender(lambda request: httpx.Response(500, text="upstream down"))

        with pytest.raises(WhatsAppSenderError) as exc:
            await sender.send_text("41780000001", "hi")
        assert exc.value.status_code == 500

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        sender, _ = _sender(refuse)

        with pytest.raises(WhatsAppSenderError) as exc:
            await sender.send_text("41780000001", "hi")
        assert exc.value.status_code is None
