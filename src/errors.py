class NotificationJobError(Exception):
    """Raised when a reminder cycle cannot run at all."""
