"""API exception hierarchy for consistent error handling.

All API exceptions inherit from DeepCurrentAPIError, which provides
status_code and error_code attributes used by the global exception
handler to generate consistent error responses.
"""

from deepcurrent.api.models.errors import ErrorCode


class DeepCurrentAPIError(Exception):
    """Base exception for all API errors."""

    status_code: int = 500
    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidRequestError(DeepCurrentAPIError):
    """Raised when request validation fails."""

    status_code = 400
    error_code = ErrorCode.INVALID_REQUEST


class TopicNotFoundError(DeepCurrentAPIError):
    """Raised when topic_id doesn't exist."""

    status_code = 404
    error_code = ErrorCode.TOPIC_NOT_FOUND


class EpisodeNotFoundError(DeepCurrentAPIError):
    """Raised when an episode doesn't exist."""

    status_code = 404
    error_code = ErrorCode.EPISODE_NOT_FOUND


class StorageUnavailableError(DeepCurrentAPIError):
    """Raised when a backing store fails before a response is committed."""

    status_code = 503
    error_code = ErrorCode.STORAGE_UNAVAILABLE
