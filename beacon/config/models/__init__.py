"""Configuration model exports.

    from beacon.config.models import APIConfig, ObservabilityConfig
"""

from beacon.config.models.api import APIConfig
from beacon.config.models.observability import (
    LoggingConfig,
    MetricsConfig,
    ObservabilityConfig,
    TracingConfig,
)

__all__ = [
    "APIConfig",
    "LoggingConfig",
    "MetricsConfig",
    "ObservabilityConfig",
    "TracingConfig",
]
