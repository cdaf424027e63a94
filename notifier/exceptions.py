"""Exception hierarchy for the notification worker."""


class NotifierError(Exception):
    """Base class for worker errors."""


class StoreNotInitializedError(NotifierError):
    """Raised when the store is used before DatabaseManager.init()."""


class MetadataParseError(NotifierError):
    """Raised when a notification's metadata column is not valid JSON."""

    def __init__(self, notification_id: int, reason: str) -> None:
        super().__init__(f"Notification {notification_id}: malformed metadata ({reason})")
        self.notification_id = notification_id


class DeliveryError(NotifierError):
    """Raised by a delivery channel when a notification could not be delivered."""
