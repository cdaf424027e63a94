"""Store access for the notification worker."""

from .manager import DatabaseManager

__all__ = ["DatabaseManager"]
