"""API response models."""

from beacon.api.models.errors import ErrorBody, ErrorCode, ErrorResponse
from beacon.api.models.health import HealthResponse

__all__ = ["ErrorBody", "ErrorCode", "ErrorResponse", "HealthResponse"]
