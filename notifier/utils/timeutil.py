"""Naive-UTC time helpers. The store keeps every timestamp as naive UTC."""

from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current time as a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_timestamp(value: datetime | str | None) -> datetime | None:
    """Normalize a datetime or ISO-8601 string to naive UTC.

    Aware values are converted to UTC; naive values are assumed to be UTC
    already. A trailing ``Z`` is accepted.
    """
    if value is None or value == "":
        return None
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        value = datetime.fromisoformat(text)
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value
