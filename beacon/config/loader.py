"""Layered TOML configuration.

Files in the config directory are merged, lowest precedence first:

1. ``default.toml``, shared by every service profile
2. ``{BEACON_ENV}.toml``, the deployment environment
3. the ``[profiles.<service>]`` table of the merged result, for the profile
   being run

Profile tables let one directory carry the overrides of every service::

    [profiles.typescript.api]
    port = 3001

    [profiles.elixir.observability.tracing]
    service_name = "elixir-edge"
"""

import os
import tomllib
from pathlib import Path
from typing import Any

from beacon.services import DEFAULT_SERVICE, SERVICES, UnknownServiceError, get_profile

CONFIG_DIR_ENV = "BEACON_CONFIG_DIR"
ENVIRONMENT_ENV = "BEACON_ENV"
SERVICE_ENV = "BEACON_SERVICE"

_SEARCH_DEPTH = 5


def get_config_dir() -> Path:
    """Directory holding the TOML files.

    ``BEACON_CONFIG_DIR`` wins. Otherwise the nearest ``config/`` directory
    from the working directory upwards is used, so a service can be started
    from any subdirectory of a checkout.

    Raises:
        FileNotFoundError: If BEACON_CONFIG_DIR names a missing directory
    """
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        path = Path(override)
        if not path.is_dir():
            raise FileNotFoundError(f"Config directory not found: {override}")
        return path

    cwd = Path.cwd()
    for candidate in (cwd, *cwd.parents)[:_SEARCH_DEPTH]:
        if (candidate / "config").is_dir():
            return candidate / "config"

    return Path("config")


def get_environment() -> str:
    """Deployment environment from BEACON_ENV, 'development' if unset."""
    return os.environ.get(ENVIRONMENT_ENV, "development")


def config_files(config_dir: Path, environment: str) -> list[Path]:
    """Existing TOML layers in merge order.

    Both layers are optional: every setting has a default in code.
    """
    names = ["default.toml"]
    if environment != "default":
        names.append(f"{environment}.toml")
    return [config_dir / name for name in names if (config_dir / name).is_file()]


def load_toml(file_path: Path) -> dict[str, Any]:
    """Read one TOML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the TOML syntax is invalid
    """
    if not file_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    with file_path.open("rb") as f:
        return tomllib.load(f)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge ``override`` into a copy of ``base``, recursing into tables."""
    result = base.copy()

    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def select_profile(config: dict[str, Any], service: str | None = None) -> dict[str, Any]:
    """Fold the profile table of the service being run into ``config``.

    The service is ``service`` (e.g. from the command line), then
    BEACON_SERVICE, then the ``service`` key of the files. The ``profiles``
    table itself is dropped from the result.

    Raises:
        UnknownServiceError: If the service, or the key of a profile table,
            names no registered profile
    """
    config = dict(config)
    profiles: dict[str, Any] = config.pop("profiles", None) or {}

    for key in profiles:
        if key not in SERVICES:
            raise UnknownServiceError(key)

    key = service or os.environ.get(SERVICE_ENV) or config.get("service") or DEFAULT_SERVICE
    profile = get_profile(key)

    return deep_merge(config, profiles.get(profile.key, {}))


def load_config(service: str | None = None) -> dict[str, Any]:
    """Load and merge the TOML layers for one service profile.

    Args:
        service: Profile key chosen by the caller, if any

    Returns:
        Merged configuration dictionary ({} when no file exists)
    """
    config: dict[str, Any] = {}
    for path in config_files(get_config_dir(), get_environment()):
        config = deep_merge(config, load_toml(path))

    return select_profile(config, service)
