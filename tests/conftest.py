"""Shared test fixtures for the Beacon test suite."""

import json
from collections.abc import Callable, Generator
from io import StringIO
from pathlib import Path
from typing import Any

import pytest
from prometheus_client import CollectorRegistry

from beacon.config.models.observability import (
    LoggingConfig,
    ObservabilityConfig,
    TracingConfig,
)
from beacon.config.settings import Settings, set_file_config


@pytest.fixture
def test_config_dir(tmp_path: Path) -> Path:
    """Create a temporary config directory for testing."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def mock_toml_files(test_config_dir: Path) -> Callable[[dict[str, str]], None]:
    """Factory fixture to create TOML files in the test config directory.

    Usage:
        def test_something(mock_toml_files):
            mock_toml_files({
                "default.toml": "service = 'go'",
                "development.toml": "debug = true",
            })
    """

    def _create_toml_files(files: dict[str, str]) -> None:
        for filename, content in files.items():
            (test_config_dir / filename).write_text(content)

    return _create_toml_files


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Clear cached settings and TOML state around each test."""
    from beacon.config import get_settings

    get_settings.cache_clear()
    set_file_config({})
    yield
    get_settings.cache_clear()
    set_file_config({})


@pytest.fixture
def log_stream() -> StringIO:
    """In-memory sink for JSON log lines."""
    return StringIO()


@pytest.fixture
def read_logs(log_stream: StringIO) -> Callable[[], list[dict[str, Any]]]:
    """Parse every line written to ``log_stream`` so far."""

    def _read() -> list[dict[str, Any]]:
        return [json.loads(line) for line in log_stream.getvalue().splitlines() if line]

    return _read


@pytest.fixture
def registry() -> CollectorRegistry:
    """Isolated Prometheus registry."""
    return CollectorRegistry()


@pytest.fixture
def settings() -> Settings:
    """Settings for an app with tracing off and INFO logging."""
    return Settings(
        service="go",
        observability=ObservabilityConfig(
            logging=LoggingConfig(level="INFO", format="json"),
            tracing=TracingConfig(enabled=False),
        ),
    )
