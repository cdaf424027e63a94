"""Study session repository: read side used by the reminder scheduling functions."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from .base import BaseRepository

logger = logging.getLogger(__name__)


class SessionRepository(BaseRepository):
    """Lookups over study_sessions joined with attendees, users and groups."""

    def attendees_starting_between(
        self,
        start: datetime,
        end: datetime,
        statuses: tuple[str, ...] = ("scheduled",),
    ) -> list[dict[str, Any]]:
        """One row per attending user of every session starting in [start, end]."""
        placeholders = ", ".join("?" for _ in statuses)
        with self.get_read_connection() as conn:
            rows = conn.execute(
                f"""
                SELECT
                    ss.session_id,
                    ss.group_id,
                    ss.session_title,
                    ss.scheduled_start,
                    ss.location,
                    sg.group_name,
                    sa.user_id,
                    u.first_name,
                    u.last_name
                FROM study_sessions ss
                JOIN session_attendees sa ON ss.session_id = sa.session_id
                LEFT JOIN users u ON sa.user_id = u.user_id
                LEFT JOIN study_groups sg ON ss.group_id = sg.group_id
                WHERE ss.scheduled_start BETWEEN ? AND ?
                  AND ss.status IN ({placeholders})
                  AND sa.attendance_status = 'attending'
                ORDER BY ss.scheduled_start, ss.session_id, sa.user_id
                """,  # noqa: S608
                [start, end, *statuses],
            ).fetchall()
            columns = self._columns(conn)
        return [dict(zip(columns, r)) for r in rows]

    def upsert_group(self, group_id: int, group_name: str) -> None:
        with self.get_connection() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO study_groups (group_id, group_name) VALUES (?, ?)",
                [group_id, group_name],
            )

    def upsert_user(self, user_id: str, first_name: str = "", last_name: str = "") -> None:
        with self.get_connection() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO users (user_id, first_name, last_name) VALUES (?, ?, ?)",
                [str(user_id), first_name, last_name],
            )

    def upsert_session(
        self,
        session_id: int,
        group_id: int,
        session_title: str,
        scheduled_start: datetime,
        location: str | None = None,
        status: str = "scheduled",
    ) -> None:
        with self.get_connection() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO study_sessions
                (session_id, group_id, session_title, scheduled_start, location, status)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                [session_id, group_id, session_title, scheduled_start, location, status],
            )

    def set_attendance(self, session_id: int, user_id: str, attendance_status: str = "attending") -> None:
        with self.get_connection() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO session_attendees (session_id, user_id, attendance_status)
                VALUES (?, ?, ?)
                """,
                [session_id, str(user_id), attendance_status],
            )
