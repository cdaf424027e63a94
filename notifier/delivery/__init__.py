"""Pluggable delivery channels."""

from .channels import DeliveryChannel, LogChannel, WebhookChannel, build_channel

__all__ = [
    "DeliveryChannel",
    "LogChannel",
    "WebhookChannel",
    "build_channel",
]
