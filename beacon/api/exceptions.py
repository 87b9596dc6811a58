"""API exception hierarchy for consistent error handling.

All API exceptions inherit from BeaconAPIError, which provides status_code
and error_code attributes used by the exception handlers to build the
ErrorResponse.
"""

from beacon.api.models.errors import ErrorCode


class BeaconAPIError(Exception):
    """Base exception for all API errors.

    Subclasses set status_code and error_code to define the HTTP response.
    """

    status_code: int = 500
    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)
