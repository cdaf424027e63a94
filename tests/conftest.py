"""
Shared pytest fixtures for notifier tests.
"""

from datetime import datetime, timedelta

import pytest

from notifier.config import Config
from notifier.delivery.channels import DeliveryChannel

NOW = datetime(2025, 3, 10, 12, 0, 0)


class RecordingChannel(DeliveryChannel):
    """Channel that records deliveries and can be told to fail for given ids."""

    name = "recording"

    def __init__(self, fail_ids=()):
        self.delivered = []
        self.fail_ids = set(fail_ids)
        self.closed = False

    async def deliver(self, notification, metadata):
        if notification.notification_id in self.fail_ids:
            raise RuntimeError(f"push gateway rejected {notification.notification_id}")
        self.delivered.append((notification.notification_id, metadata))

    async def close(self):
        self.closed = True


class SteppingClock:
    """Clock that advances one second on every call."""

    def __init__(self, start=NOW):
        self.current = start

    def __call__(self):
        value = self.current
        self.current = self.current + timedelta(seconds=1)
        return value


@pytest.fixture
def tmp_db(tmp_path):
    """Fresh, initialized DuckDB store for each test."""
    from notifier.database.manager import DatabaseManager

    db = DatabaseManager(db_path=tmp_path / "test.duckdb")
    db.init()
    yield db
    db.close()


@pytest.fixture
def test_config():
    """Config with timers far enough apart that they never fire inside a test."""
    cfg = Config()
    cfg.DELIVERY_INTERVAL = 60
    cfg.SCHEDULING_INTERVAL = 900
    cfg.SHUTDOWN_TIMEOUT = 5.0
    cfg.SCHEDULER_MISFIRE_GRACE_TIME = 30
    cfg.DELIVERY_CHANNEL = "log"
    return cfg


@pytest.fixture
def channel():
    return RecordingChannel()


@pytest.fixture
def add_notification(tmp_db):
    """Insert a notification with sensible defaults; returns its id."""

    def _add(scheduled_for=NOW - timedelta(minutes=1), user_id="u1", metadata=None, title="Hello", **kwargs):
        n = tmp_db.notifications.create(
            user_id,
            kwargs.pop("notification_type", "system"),
            title,
            kwargs.pop("message", "Body"),
            metadata=metadata,
            scheduled_for=scheduled_for,
        )
        return n.notification_id

    return _add


def set_raw_metadata(db, notification_id, raw):
    """Write a metadata string verbatim (bypassing JSON serialization)."""
    with db.get_connection() as conn:
        conn.execute(
            "UPDATE notifications SET metadata = ? WHERE notification_id = ?",
            [raw, notification_id],
        )


def set_sent_at(db, notification_id, sent_at):
    with db.get_connection() as conn:
        conn.execute(
            "UPDATE notifications SET sent_at = ? WHERE notification_id = ?",
            [sent_at, notification_id],
        )
