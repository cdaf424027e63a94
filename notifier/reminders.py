"""
Reminder scheduling functions.

Both enqueue ``session_reminder`` rows into the notifications table; the
delivery poller sends them once their ``scheduled_for`` time arrives.
"""
import asyncio
import logging
from datetime import datetime, timedelta
from typing import Optional

from .config import config
from .database.manager import DatabaseManager
from .utils.timeutil import utcnow

logger = logging.getLogger(__name__)

DEDUPE_WINDOW = timedelta(days=1)


async def send_session_reminders(db: DatabaseManager, now: Optional[datetime] = None) -> int:
    """Enqueue 1-hour reminders for sessions starting within the next hour."""
    return await asyncio.to_thread(_enqueue_hourly, db, now or utcnow())


async def schedule_daily_24h_reminders(db: DatabaseManager, now: Optional[datetime] = None) -> int:
    """Enqueue day-ahead reminders for sessions starting 20-28 hours from now."""
    return await asyncio.to_thread(_enqueue_daily, db, now or utcnow())


def _enqueue_hourly(db: DatabaseManager, now: datetime) -> int:
    rows = db.sessions.attendees_starting_between(now, now + timedelta(hours=1), ("scheduled",))
    send_at = now + timedelta(minutes=config.SESSION_REMINDER_LEAD_MINUTES)

    count = 0
    for row in rows:
        if db.notifications.reminder_exists(row["user_id"], row["session_id"], "1h", now - DEDUPE_WINDOW):
            continue
        start = row["scheduled_start"]
        group = row.get("group_name") or "your study group"
        db.notifications.create(
            row["user_id"],
            "session_reminder",
            "Study Session Reminder",
            f'Your study session "{row["session_title"]}" in {group} starts at {start:%H:%M} UTC.',
            metadata=_reminder_metadata(row, "1h"),
            scheduled_for=send_at,
        )
        count += 1

    logger.info(f"Sent {count} session reminders")
    return count


def _enqueue_daily(db: DatabaseManager, now: datetime) -> int:
    low, high = config.DAILY_REMINDER_WINDOW_HOURS
    rows = db.sessions.attendees_starting_between(
        now + timedelta(hours=low), now + timedelta(hours=high), ("scheduled", "upcoming")
    )

    count = 0
    for row in rows:
        if db.notifications.reminder_exists(row["user_id"], row["session_id"], "24h", now - DEDUPE_WINDOW):
            continue
        start = row["scheduled_start"]
        location = f' at {row["location"]}' if row.get("location") else ""
        db.notifications.create(
            row["user_id"],
            "session_reminder",
            "Study Session Tomorrow",
            f'Reminder: "{row["session_title"]}" starts {start:%a %d %b, %H:%M} UTC{location}.',
            metadata=_reminder_metadata(row, "24h"),
            scheduled_for=max(start - timedelta(hours=24), now),
        )
        count += 1

    logger.info(f"Scheduled {count} 24-hour session reminders")
    return count


def _reminder_metadata(row: dict, kind: str) -> dict:
    return {
        "session_id": row["session_id"],
        "group_id": row["group_id"],
        "scheduled_start": row["scheduled_start"].isoformat(),
        "reminder": kind,
    }
