"""Observability: structured logging, request metrics, distributed tracing.

Provides the request logging convention shared by every service, using
structlog for logging, Prometheus for metrics and OpenTelemetry for tracing.
"""

from beacon.observability.interceptor import (
    RequestInterceptor,
    level_for_status,
    resolve_remote_addr,
)
from beacon.observability.logging import (
    StructuredLogger,
    get_logger,
    normalize_level,
    setup_logging,
)
from beacon.observability.metrics import MetricsRecorder
from beacon.observability.middleware import RequestLoggingMiddleware
from beacon.observability.models import LogEvent, MetricSample, RequestContext
from beacon.observability.tracing import (
    create_span,
    get_current_trace_id,
    get_tracer,
    record_exception,
    setup_tracing,
    shutdown_tracing,
)

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    "normalize_level",
    "StructuredLogger",
    # Metrics
    "MetricsRecorder",
    # Request interception
    "RequestInterceptor",
    "RequestLoggingMiddleware",
    "level_for_status",
    "resolve_remote_addr",
    # Models
    "LogEvent",
    "MetricSample",
    "RequestContext",
    # Tracing
    "setup_tracing",
    "shutdown_tracing",
    "get_tracer",
    "create_span",
    "get_current_trace_id",
    "record_exception",
]
