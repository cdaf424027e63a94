"""Delivery poller, reminder trigger and the process lifecycle around them."""

from .poller import DeliveryPoller
from .service import NotificationWorker, WorkerState, build_worker
from .trigger import ReminderTrigger

__all__ = [
    "DeliveryPoller",
    "NotificationWorker",
    "ReminderTrigger",
    "WorkerState",
    "build_worker",
]
