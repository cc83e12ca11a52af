"""Error response models for consistent API error handling."""

from enum import Enum

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    INVALID_REQUEST = "INVALID_REQUEST"
    """Request validation failed (malformed JSON, missing fields, empty query)."""

    TOPIC_NOT_FOUND = "TOPIC_NOT_FOUND"
    """The specified topic_id does not exist."""

    EPISODE_NOT_FOUND = "EPISODE_NOT_FOUND"
    """The specified episode does not exist."""

    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"
    """A backing store failed or could not be reached."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred."""


class ErrorDetail(BaseModel):
    """Field-level error information for validation errors."""

    field: str | None = None
    """The field that caused the error, if applicable."""

    message: str
    """Human-readable error description."""


class ErrorBody(BaseModel):
    """Error body content for API error responses."""

    code: ErrorCode
    """Machine-readable error code."""

    message: str
    """Human-readable error message."""

    details: list[ErrorDetail] | None = None
    """Additional error details for validation failures."""


class ErrorResponse(BaseModel):
    """Standard error response format for all API errors.

    Example:
        {
            "error": {
                "code": "TOPIC_NOT_FOUND",
                "message": "Topic 3f0c... not found"
            }
        }
    """

    error: ErrorBody
