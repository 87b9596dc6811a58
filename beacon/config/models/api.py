"""API server configuration model."""

from pydantic import BaseModel, Field


class APIConfig(BaseModel):
    """HTTP server configuration.

    When ``port`` is left unset the service profile's default port is used.
    """

    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int | None = Field(
        default=None,
        ge=1,
        le=65535,
        description="Bind port (defaults to the service profile's port)",
    )
    access_log: bool = Field(
        default=False,
        description="Enable uvicorn's own access log in addition to request logs",
    )
