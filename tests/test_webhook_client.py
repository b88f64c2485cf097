"""Tests for the signed webhook sender."""
from __future__ import annotations

import json

import httpx
import pytest

from lancer.common.enums import Event
from lancer.core.gatekeeper import Lancer
from lancer.schemas.webhook import FileRecord, SessionRecord
from lancer.services.webhook_client import WebhookSender
from lancer.utils.security import verify_signature


@pytest.mark.asyncio
async def test_send_signs_canonical_body(secret):
    captured = []

    def respond(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200)

    sender = WebhookSender(
        "https://hooks.example.com/lancer",
        signing_secret=secret,
        transport=httpx.MockTransport(respond),
    )

    response = await sender.send(Event.SESSION_CREATED, SessionRecord(id="sess_1", owner_id="owner-1"))

    assert response.status_code == 200
    request = captured[0]
    body = request.content.decode("utf-8")
    assert json.loads(body) == {"event": "session.created", "data": {"id": "sess_1", "ownerId": "owner-1"}}
    assert verify_signature(body, request.headers["x-timestamp"], request.headers["x-signature"], secret)


def test_build_request_without_secret_is_unsigned():
    sender = WebhookSender("https://hooks.example.com/lancer", signing_secret="")

    content, headers = sender.build_request("file.deleted", {"id": "file_9"})

    assert json.loads(content) == {"event": "file.deleted", "data": {"id": "file_9"}}
    assert "x-signature" not in headers
    assert "x-timestamp" not in headers


@pytest.mark.asyncio
async def test_receiver_accepts_sender_signature(make_app, secret):
    received = []

    async def on_event(*, event, payload):
        received.append((event, payload))
        return True

    app = make_app(webhooks=Lancer(signing_secret=secret).webhook(on_event, verification=True))
    sender = WebhookSender(
        "http://testserver/webhooks",
        signing_secret=secret,
        transport=httpx.ASGITransport(app=app),
    )

    await sender.send(Event.FILE_UPLOADED, FileRecord(id="file_1", file_name="naïve.txt", file_size=3))

    assert received == [("file.uploaded", {"id": "file_1", "file_name": "naïve.txt", "file_size": 3})]


@pytest.mark.asyncio
async def test_declined_delivery_raises(make_app, secret):
    async def decline(*, event, payload):
        return False

    app = make_app(webhooks=Lancer(signing_secret=secret).webhook(decline, verification=True))
    sender = WebhookSender(
        "http://testserver/webhooks",
        signing_secret=secret,
        transport=httpx.ASGITransport(app=app),
    )

    with pytest.raises(httpx.HTTPStatusError) as exc_info:
        await sender.send("session.failed", {"id": "sess_2"})

    assert exc_info.value.response.status_code == 400


@pytest.mark.asyncio
async def test_connection_error_is_raised(secret):
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    sender = WebhookSender(
        "https://hooks.example.com/lancer",
        signing_secret=secret,
        transport=httpx.MockTransport(refuse),
    )

    with pytest.raises(httpx.RequestError):
        await sender.send("session.completed", {"id": "sess_3"})
