"""Error response models for consistent API error handling."""

from enum import Enum

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Machine-readable error codes for API responses."""

    INVALID_REQUEST = "INVALID_REQUEST"
    """The request was rejected by the router or a handler."""

    NOT_FOUND = "NOT_FOUND"
    """No route matches the request path."""

    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    """The route exists but not for this HTTP method."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred."""

    @classmethod
    def for_status(cls, status_code: int) -> "ErrorCode":
        """Pick the code that describes an HTTP error status."""
        if status_code == 404:
            return cls.NOT_FOUND
        if status_code == 405:
            return cls.METHOD_NOT_ALLOWED
        if status_code >= 500:
            return cls.INTERNAL_ERROR
        return cls.INVALID_REQUEST


class ErrorBody(BaseModel):
    """Error body content for API error responses."""

    code: ErrorCode
    """Machine-readable error code."""

    message: str
    """Human-readable error description."""


class ErrorResponse(BaseModel):
    """Envelope for every error returned by the API."""

    error: ErrorBody
