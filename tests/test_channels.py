"""Tests for delivery channels and channel selection."""

import json

import httpx
import pytest

from notifier.config import Config
from notifier.delivery.channels import LogChannel, WebhookChannel, build_channel
from notifier.exceptions import DeliveryError
from notifier.models import Notification


def _notification():
    return Notification(
        notification_id=3,
        user_id="u1",
        notification_type="message",
        title="New message",
        message="Hi",
        metadata='{"room": 9}',
    )


@pytest.mark.asyncio
async def test_log_channel_delivers():
    await LogChannel().deliver(_notification(), {"room": 9})


@pytest.mark.asyncio
async def test_webhook_posts_payload():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(202)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    channel = WebhookChannel("https://relay.example/notify", client=client)
    await channel.deliver(_notification(), {"room": 9})
    await client.aclose()

    assert seen["url"] == "https://relay.example/notify"
    assert seen["body"]["notification_id"] == 3
    assert seen["body"]["metadata"] == {"room": 9}


@pytest.mark.asyncio
async def test_webhook_error_status_raises():
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(500)))
    channel = WebhookChannel("https://relay.example/notify", client=client)
    with pytest.raises(DeliveryError):
        await channel.deliver(_notification(), None)
    await client.aclose()


@pytest.mark.asyncio
async def test_webhook_transport_error_raises():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    channel = WebhookChannel("https://relay.example/notify", client=client)
    with pytest.raises(DeliveryError):
        await channel.deliver(_notification(), None)
    await client.aclose()


@pytest.mark.asyncio
async def test_webhook_does_not_close_borrowed_client():
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    channel = WebhookChannel("https://relay.example/notify", client=client)
    await channel.close()
    assert not client.is_closed
    await client.aclose()


def test_build_channel_defaults_to_log():
    cfg = Config()
    cfg.DELIVERY_CHANNEL = "log"
    assert isinstance(build_channel(cfg), LogChannel)


def test_build_channel_webhook():
    cfg = Config()
    cfg.DELIVERY_CHANNEL = "webhook"
    cfg.WEBHOOK_URL = "https://relay.example/notify"
    channel = build_channel(cfg)
    assert isinstance(channel, WebhookChannel)
    assert channel.url == "https://relay.example/notify"


def test_build_channel_rejects_unknown():
    cfg = Config()
    cfg.DELIVERY_CHANNEL = "pigeon"
    with pytest.raises(ValueError):
        build_channel(cfg)


def test_build_channel_webhook_requires_url():
    cfg = Config()
    cfg.DELIVERY_CHANNEL = "webhook"
    cfg.WEBHOOK_URL = ""
    with pytest.raises(ValueError):
        build_channel(cfg)
