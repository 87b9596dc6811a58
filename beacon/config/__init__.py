"""Configuration loading for Beacon.

Configuration is loaded from TOML files with environment variable overrides.

Usage:
    from beacon.config import get_settings

    settings = get_settings("typescript")
    port = settings.port
"""

from functools import lru_cache

from beacon.config.loader import load_config
from beacon.config.settings import Settings, set_file_config


@lru_cache(maxsize=4)
def get_settings(service: str | None = None) -> Settings:
    """Get the settings for a service profile.

    Args:
        service: Profile key that overrides every configured one

    Raises:
        UnknownServiceError: If the selected profile or a profile table in
            the TOML files is not registered

    The result is cached per profile for the lifetime of the process.
    """
    set_file_config(load_config(service))

    if service:
        return Settings(service=service)
    return Settings()


def reload_settings() -> Settings:
    """Clear the settings cache and reload configuration."""
    get_settings.cache_clear()
    return get_settings()


__all__ = ["get_settings", "reload_settings", "Settings"]
