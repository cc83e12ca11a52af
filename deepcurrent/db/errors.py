"""Store error hierarchy.

All store implementations raise these errors for consistent error handling.
"""


class StoreError(Exception):
    """Base exception for all store errors.

    Store implementations wrap backend-specific errors in one of the
    StoreError subclasses.
    """

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class ConnectionError(StoreError):
    """Raised when store connection fails.

    Examples:
        - Database connection timeout
        - Network errors
    """


class NotFoundError(StoreError):
    """Raised when a specific entity lookup fails.

    Not raised for empty search results.
    """


class ConflictError(StoreError):
    """Raised on unique constraint violation.

    Examples:
        - Duplicate (topic_id, version) pair
        - Second active strategy version for a topic
    """


class InvalidTransitionError(ConflictError):
    """Raised when an episode status update would regress or touch a terminal episode."""
