"""
Study Buddy notifier - scheduled notification delivery worker
"""

__version__ = "1.0.0"

from .database.manager import DatabaseManager
from .worker import DeliveryPoller, NotificationWorker, ReminderTrigger, build_worker

__all__ = [
    "DatabaseManager",
    "DeliveryPoller",
    "NotificationWorker",
    "ReminderTrigger",
    "build_worker",
]
