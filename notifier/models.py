"""Value types shared by the store, the poller and the delivery channels."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .exceptions import MetadataParseError

NOTIFICATION_TYPES = (
    "session_reminder",
    "group_invite",
    "progress_update",
    "partner_match",
    "message",
    "system",
)


@dataclass
class Notification:
    """One row of the notifications table."""

    notification_id: int
    user_id: str
    notification_type: str
    title: str
    message: str
    metadata: str | None = None
    scheduled_for: datetime | None = None
    sent_at: datetime | None = None
    is_read: bool = False
    created_at: datetime | None = None

    @classmethod
    def from_row(cls, row: Any, columns: list[str]) -> Notification:
        data = dict(zip(columns, row))
        return cls(
            notification_id=int(data["notification_id"]),
            user_id=str(data["user_id"]),
            notification_type=data["notification_type"],
            title=data["title"],
            message=data["message"],
            metadata=data.get("metadata"),
            scheduled_for=data.get("scheduled_for"),
            sent_at=data.get("sent_at"),
            is_read=bool(data.get("is_read") or False),
            created_at=data.get("created_at"),
        )

    def parsed_metadata(self) -> Any:
        """Parse the metadata payload. A missing payload yields None."""
        if self.metadata is None or self.metadata == "":
            return None
        try:
            return json.loads(self.metadata)
        except (json.JSONDecodeError, TypeError) as e:
            raise MetadataParseError(self.notification_id, str(e)) from e

    def to_dict(self) -> dict[str, Any]:
        d = {}
        for key, val in self.__dict__.items():
            if hasattr(val, "isoformat"):
                val = val.isoformat()
            d[key] = val
        return d


@dataclass
class DeliveryOutcome:
    """Tagged per-record result of a delivery attempt."""

    notification_id: int
    ok: bool
    error: str | None = None

    @classmethod
    def success(cls, notification_id: int) -> DeliveryOutcome:
        return cls(notification_id, True)

    @classmethod
    def failure(cls, notification_id: int, error: BaseException) -> DeliveryOutcome:
        return cls(notification_id, False, f"{type(error).__name__}: {error}")


@dataclass
class PassResult:
    """Summary of one delivery or scheduling pass."""

    name: str
    started_at: datetime
    finished_at: datetime | None = None
    outcomes: list[DeliveryOutcome] = field(default_factory=list)
    sent_at: datetime | None = None
    enqueued: int = 0
    aborted: bool = False
    skipped: bool = False
    error: str | None = None

    @property
    def delivered_ids(self) -> list[int]:
        return [o.notification_id for o in self.outcomes if o.ok]

    @property
    def failed_ids(self) -> list[int]:
        return [o.notification_id for o in self.outcomes if not o.ok]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "delivered": len(self.delivered_ids),
            "failed": len(self.failed_ids),
            "enqueued": self.enqueued,
            "sent_at": self.sent_at.isoformat() if self.sent_at else None,
            "aborted": self.aborted,
            "skipped": self.skipped,
            "error": self.error,
        }
