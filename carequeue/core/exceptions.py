"""
Queue error taxonomy.

Every error carries the HTTP status it maps to and a message that is safe to
show to the caller. Driver errors are never placed in ``message``.
"""

from typing import Any, Dict, Optional


class QueueError(Exception):
    """Base class for all queue errors."""

    status_code = 500
    default_message = "Queue operation failed"

    def __init__(self, message: Optional[str] = None, **context: Any):
        self.message = message or self.default_message
        self.context: Dict[str, Any] = context
        super().__init__(self.message)


class MissingParameter(QueueError):
    status_code = 400
    default_message = "Missing required parameter"


class InvalidParameter(QueueError):
    status_code = 400
    default_message = "Invalid parameter"


class InvalidStatus(InvalidParameter):
    default_message = "Invalid status"


class InvalidTransition(InvalidStatus):
    default_message = "Status transition not allowed"


class NotFound(QueueError):
    status_code = 404
    default_message = "Not found"


class Conflict(QueueError):
    status_code = 409
    default_message = "Queue entry was modified concurrently"


class StorageUnavailable(QueueError):
    status_code = 500
    default_message = "Storage unavailable"


class QueueFetchError(StorageUnavailable):
    default_message = "Failed to fetch queue"
