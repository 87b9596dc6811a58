"""Health check response models."""

from typing import Literal

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Health status response for GET /health."""

    status: Literal["healthy"]
    """Overall service status."""

    service: str
    """Short name of the service answering."""
