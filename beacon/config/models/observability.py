"""Observability configuration models."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARN", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]

# Prometheus' default latency buckets, shared by every service
DEFAULT_BUCKETS: tuple[float, ...] = (
    0.005,
    0.01,
    0.025,
    0.05,
    0.075,
    0.1,
    0.25,
    0.5,
    0.75,
    1.0,
    2.5,
    5.0,
    7.5,
    10.0,
)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(default="INFO", description="Minimum log level")
    format: LogFormat = Field(default="json", description="Output format")


class TracingConfig(BaseModel):
    """Distributed tracing configuration."""

    enabled: bool = Field(default=True, description="Enable tracing")
    service_name: str | None = Field(
        default=None,
        description="Service name for traces (falls back to OTEL_SERVICE_NAME, then the profile)",
    )
    otlp_endpoint: str | None = Field(
        default=None,
        description="OTLP exporter endpoint (falls back to OTEL_EXPORTER_OTLP_ENDPOINT)",
    )
    console_export: bool = Field(
        default=False,
        description="Also export spans to stdout",
    )
    export_metrics: bool = Field(
        default=True,
        description="Push OpenTelemetry metrics to the collector",
    )


class MetricsConfig(BaseModel):
    """Metrics configuration."""

    enabled: bool = Field(default=True, description="Expose the metrics endpoint")
    path: str = Field(default="/metrics", description="Metrics endpoint path")
    buckets: tuple[float, ...] = Field(
        default=DEFAULT_BUCKETS,
        description="Histogram buckets for request durations, in seconds",
    )

    @field_validator("buckets")
    @classmethod
    def buckets_must_increase(cls, value: tuple[float, ...]) -> tuple[float, ...]:
        """Reject empty or unsorted bucket schemas."""
        if not value:
            raise ValueError("buckets must not be empty")
        if any(b <= a for a, b in zip(value, value[1:])):
            raise ValueError("buckets must be strictly increasing")
        return value


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging settings",
    )
    tracing: TracingConfig = Field(
        default_factory=TracingConfig,
        description="Tracing settings",
    )
    metrics: MetricsConfig = Field(
        default_factory=MetricsConfig,
        description="Metrics settings",
    )
