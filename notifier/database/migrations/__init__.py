"""Schema migrations for the notification store."""
