"""Notification repository: the rows the delivery poller reads and marks sent."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any

from ...models import Notification
from ...utils.timeutil import utcnow
from .base import BaseRepository

logger = logging.getLogger(__name__)

_COLUMNS = (
    "notification_id, user_id, notification_type, title, message, metadata, "
    "scheduled_for, sent_at, is_read, created_at"
)


class NotificationRepository(BaseRepository):
    """Queries and updates on the notifications table."""

    def fetch_due(self, now: datetime) -> list[Notification]:
        """Rows eligible for delivery at ``now``, earliest-due first."""
        with self.get_read_connection() as conn:
            rows = conn.execute(
                f"""
                SELECT {_COLUMNS}
                FROM notifications
                WHERE scheduled_for IS NOT NULL
                  AND scheduled_for <= ?
                  AND sent_at IS NULL
                ORDER BY scheduled_for ASC, notification_id ASC
                """,  # noqa: S608
                [now],
            ).fetchall()
            columns = self._columns(conn)
        return [Notification.from_row(r, columns) for r in rows]

    def mark_sent(self, notification_ids: list[int], sent_at: datetime) -> int:
        """Stamp every id in one statement. Rows already sent keep their sent_at.

        Returns the number of rows now carrying ``sent_at``.
        """
        if not notification_ids:
            return 0
        ids = [int(i) for i in notification_ids]
        placeholders = ", ".join("?" for _ in ids)
        with self.get_connection() as conn:
            conn.execute(
                f"""
                UPDATE notifications
                SET sent_at = ?
                WHERE notification_id IN ({placeholders})
                  AND sent_at IS NULL
                """,  # noqa: S608
                [sent_at, *ids],
            )
            # DuckDB rowcount is unreliable; count manually
            row = conn.execute(
                f"SELECT COUNT(*) FROM notifications WHERE sent_at = ? AND notification_id IN ({placeholders})",  # noqa: S608
                [sent_at, *ids],
            ).fetchone()
        return int(row[0])

    def create(
        self,
        user_id: str,
        notification_type: str,
        title: str,
        message: str,
        metadata: dict | None = None,
        scheduled_for: datetime | None = None,
    ) -> Notification:
        """Insert a notification row and return it."""
        payload = json.dumps(metadata, default=str) if metadata is not None else None
        with self.get_connection() as conn:
            row = conn.execute(
                f"""
                INSERT INTO notifications
                (user_id, notification_type, title, message, metadata, scheduled_for, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                RETURNING {_COLUMNS}
                """,  # noqa: S608
                [str(user_id), notification_type, title, message, payload, scheduled_for, utcnow()],
            ).fetchone()
            columns = self._columns(conn)
        return Notification.from_row(row, columns)

    def get(self, notification_id: int) -> Notification | None:
        """Fetch a single notification by id."""
        with self.get_read_connection() as conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM notifications WHERE notification_id = ?",  # noqa: S608
                [notification_id],
            ).fetchone()
            if not row:
                return None
            columns = self._columns(conn)
        return Notification.from_row(row, columns)

    def count_pending(self) -> int:
        """Number of scheduled notifications not yet sent."""
        with self.get_read_connection() as conn:
            row = conn.execute(
                "SELECT COUNT(*) FROM notifications WHERE scheduled_for IS NOT NULL AND sent_at IS NULL"
            ).fetchone()
        return int(row[0])

    def reminder_exists(
        self, user_id: str, session_id: int, reminder_kind: str, since: datetime
    ) -> bool:
        """True if a session reminder of this kind was created for the user since ``since``."""
        with self.get_read_connection() as conn:
            rows = conn.execute(
                """
                SELECT metadata FROM notifications
                WHERE user_id = ?
                  AND notification_type = 'session_reminder'
                  AND created_at > ?
                  AND metadata IS NOT NULL
                """,
                [str(user_id), since],
            ).fetchall()

        for (raw,) in rows:
            meta = _loads(raw)
            if not isinstance(meta, dict):
                continue
            if str(meta.get("session_id")) == str(session_id) and meta.get("reminder") == reminder_kind:
                return True
        return False


def _loads(raw: str) -> Any:
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return None
