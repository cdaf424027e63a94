"""
Delivery channels: the side effect the poller performs for each due notification.
"""
import logging
from typing import Any, Optional

import httpx

from ..config import config as default_config
from ..exceptions import DeliveryError
from ..models import Notification

logger = logging.getLogger(__name__)


class DeliveryChannel:
    """Base channel. Subclasses implement deliver()."""

    name = "base"

    async def connect(self) -> None:
        pass

    async def close(self) -> None:
        pass

    async def deliver(self, notification: Notification, metadata: Any) -> None:
        raise NotImplementedError


class LogChannel(DeliveryChannel):
    """Reference channel: records delivery intent in the log."""

    name = "log"

    async def deliver(self, notification: Notification, metadata: Any) -> None:
        logger.info(
            f'[deliver] -> user:{notification.user_id} type:{notification.notification_type} '
            f'title:"{notification.title}" meta: {metadata}'
        )


class WebhookChannel(DeliveryChannel):
    """
    POSTs each notification as JSON to an HTTP endpoint (push/email/SMS relay)
    """

    name = "webhook"

    def __init__(self, url: str, timeout: float = 10.0, client: Optional[httpx.AsyncClient] = None):
        self.url = url
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def connect(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                limits=httpx.Limits(max_keepalive_connections=10, max_connections=20),
            )
            self._owns_client = True

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def deliver(self, notification: Notification, metadata: Any) -> None:
        if self._client is None:
            await self.connect()

        payload = {
            "notification_id": notification.notification_id,
            "user_id": notification.user_id,
            "notification_type": notification.notification_type,
            "title": notification.title,
            "message": notification.message,
            "metadata": metadata,
        }
        try:
            response = await self._client.post(self.url, json=payload)
        except httpx.HTTPError as e:
            raise DeliveryError(f"Webhook request failed: {e}") from e

        if response.status_code >= 300:
            raise DeliveryError(
                f"Webhook returned {response.status_code} for notification {notification.notification_id}"
            )
        logger.info(
            f'[deliver] -> user:{notification.user_id} type:{notification.notification_type} '
            f'title:"{notification.title}" via webhook ({response.status_code})'
        )


def build_channel(cfg=None) -> DeliveryChannel:
    """Pick the delivery channel named by configuration."""
    cfg = cfg or default_config
    if cfg.DELIVERY_CHANNEL == "webhook":
        if not cfg.WEBHOOK_URL:
            raise ValueError("WEBHOOK_URL is required for the webhook channel")
        return WebhookChannel(cfg.WEBHOOK_URL, timeout=cfg.REQUEST_TIMEOUT)
    if cfg.DELIVERY_CHANNEL == "log":
        return LogChannel()
    raise ValueError(f"Unsupported delivery channel: {cfg.DELIVERY_CHANNEL}")
