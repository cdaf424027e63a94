"""Repository classes for domain-specific database operations."""

from .notifications import NotificationRepository
from .sessions import SessionRepository

__all__ = [
    "NotificationRepository",
    "SessionRepository",
]
