"""Migration m002: session tables read by the reminder scheduling functions."""

from typing import Any


def up(conn: Any) -> None:
    conn.execute("""
        CREATE TABLE IF NOT EXISTS users (
            user_id VARCHAR PRIMARY KEY,
            first_name VARCHAR,
            last_name VARCHAR
        )
    """)
    conn.execute("""
        CREATE TABLE IF NOT EXISTS study_groups (
            group_id INTEGER PRIMARY KEY,
            group_name VARCHAR NOT NULL
        )
    """)
    conn.execute("""
        CREATE TABLE IF NOT EXISTS study_sessions (
            session_id INTEGER PRIMARY KEY,
            group_id INTEGER NOT NULL,
            session_title VARCHAR NOT NULL,
            scheduled_start TIMESTAMP NOT NULL,
            location VARCHAR,
            status VARCHAR DEFAULT 'scheduled'
        )
    """)
    conn.execute("""
        CREATE TABLE IF NOT EXISTS session_attendees (
            session_id INTEGER NOT NULL,
            user_id VARCHAR NOT NULL,
            attendance_status VARCHAR DEFAULT 'pending',
            PRIMARY KEY (session_id, user_id)
        )
    """)


def down(conn: Any) -> None:
    conn.execute("DROP TABLE IF EXISTS session_attendees")
    conn.execute("DROP TABLE IF EXISTS study_sessions")
    conn.execute("DROP TABLE IF EXISTS study_groups")
    conn.execute("DROP TABLE IF EXISTS users")
