"""Root settings model for Beacon configuration.

Sources, highest precedence first: constructor arguments, ``BEACON_*``
environment variables (nested with ``__``), then the merged TOML layers from
:func:`beacon.config.loader.load_config`, then the defaults below.
"""

from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    InitSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from beacon.config.models.api import APIConfig
from beacon.config.models.observability import ObservabilityConfig
from beacon.services import DEFAULT_SERVICE, ServiceProfile, get_profile

# Merged TOML layers used by the next Settings() construction
_file_config: dict[str, Any] = {}


def set_file_config(config: dict[str, Any]) -> None:
    """Set the TOML configuration read by Settings."""
    global _file_config
    _file_config = config


class Settings(BaseSettings):
    """Configuration of one service process."""

    model_config = SettingsConfigDict(
        env_prefix="BEACON_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    service: str = Field(
        default=DEFAULT_SERVICE,
        description="Service profile to run (go, typescript, elixir)",
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    api: APIConfig = Field(default_factory=APIConfig, description="API server configuration")
    observability: ObservabilityConfig = Field(
        default_factory=ObservabilityConfig,
        description="Observability configuration",
    )

    @field_validator("service")
    @classmethod
    def service_must_be_registered(cls, value: str) -> str:
        """Normalize the profile key; unknown keys fail validation."""
        return get_profile(value).key

    @property
    def profile(self) -> ServiceProfile:
        """Profile of the service these settings run."""
        return get_profile(self.service)

    @property
    def port(self) -> int:
        """Configured API port, or the profile's default port."""
        return self.api.port or self.profile.default_port

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Constructor arguments, then env vars, then the TOML layers."""
        return (
            init_settings,
            env_settings,
            InitSettingsSource(settings_cls, dict(_file_config)),
        )
