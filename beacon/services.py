"""Service profiles.

Each profile describes one of the thin HTTP services. They all run the same
application factory and observability stack; only their identity differs.
"""

from pydantic import BaseModel, ConfigDict, Field


class UnknownServiceError(ValueError):
    """Raised when a service profile key is not registered."""

    def __init__(self, key: str) -> None:
        self.key = key
        known = ", ".join(sorted(SERVICES))
        super().__init__(f"Unknown service profile '{key}' (known: {known})")


class ServiceProfile(BaseModel):
    """Identity of one service process."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(description="Profile key used in configuration")
    service_name: str = Field(description="Value of the `service` field in every log line")
    display_name: str = Field(description="Name shown by the root endpoint")
    short_name: str = Field(description="Name reported by the health endpoint")
    default_port: int = Field(ge=1, le=65535, description="Port used when none is configured")

    @property
    def banner(self) -> str:
        """Body returned by ``GET /``."""
        return f"{self.display_name} Service is running!"


DEFAULT_SERVICE = "go"

SERVICES: dict[str, ServiceProfile] = {
    profile.key: profile
    for profile in (
        ServiceProfile(
            key="go",
            service_name="go-service",
            display_name="Go",
            short_name="go",
            default_port=8080,
        ),
        ServiceProfile(
            key="typescript",
            service_name="typescript-service",
            display_name="TypeScript",
            short_name="typescript",
            default_port=3000,
        ),
        ServiceProfile(
            key="elixir",
            service_name="elixir-service",
            display_name="Elixir",
            short_name="elixir",
            default_port=4000,
        ),
    )
}


def get_profile(key: str) -> ServiceProfile:
    """Look up a service profile by key (case-insensitive).

    Raises:
        UnknownServiceError: If no profile is registered under ``key``
    """
    try:
        return SERVICES[key.strip().lower()]
    except KeyError:
        raise UnknownServiceError(key) from None
