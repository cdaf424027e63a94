"""Migration m001: notifications table consumed by the delivery poller."""

from typing import Any


def up(conn: Any) -> None:
    conn.execute("""
        CREATE SEQUENCE IF NOT EXISTS notifications_id_seq START 1
    """)
    conn.execute("""
        CREATE TABLE IF NOT EXISTS notifications (
            notification_id INTEGER PRIMARY KEY DEFAULT nextval('notifications_id_seq'),
            user_id VARCHAR NOT NULL,
            notification_type VARCHAR NOT NULL CHECK (notification_type IN (
                'session_reminder', 'group_invite', 'progress_update',
                'partner_match', 'message', 'system'
            )),
            title VARCHAR NOT NULL,
            message TEXT NOT NULL,
            metadata TEXT,
            is_read BOOLEAN DEFAULT FALSE,
            scheduled_for TIMESTAMP,
            sent_at TIMESTAMP,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """)
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_notifications_user ON notifications(user_id, is_read)"
    )


def down(conn: Any) -> None:
    conn.execute("DROP TABLE IF EXISTS notifications")
    conn.execute("DROP SEQUENCE IF EXISTS notifications_id_seq")
