"""OpenTelemetry tracing and metrics export setup.

Spans and OpenTelemetry metrics are pushed over OTLP/gRPC to a collector.
The collector endpoint and service name come from configuration, then the
standard OTEL_EXPORTER_OTLP_ENDPOINT and OTEL_SERVICE_NAME variables, which
are read once at startup.

A failure to set up either pipeline is logged once at ERROR and the service
keeps running without that channel.
"""

import os
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from opentelemetry import metrics, trace
from opentelemetry.baggage.propagation import W3CBaggagePropagator
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.propagate import set_global_textmap
from opentelemetry.propagators.composite import CompositePropagator
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.trace import Span, SpanKind, Status, StatusCode, Tracer
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

from beacon.observability.logging import get_logger

logger = get_logger(__name__)

DEFAULT_OTLP_ENDPOINT = "otel-collector:4317"

_tracer: Tracer | None = None
_tracer_provider: TracerProvider | None = None
_meter_provider: MeterProvider | None = None


def resolve_otlp_endpoint(configured: str | None = None) -> str:
    """Collector endpoint: configuration, then env var, then the default."""
    return configured or os.environ.get("OTEL_EXPORTER_OTLP_ENDPOINT") or DEFAULT_OTLP_ENDPOINT


def resolve_service_name(configured: str | None, fallback: str) -> str:
    """Service name: configuration, then OTEL_SERVICE_NAME, then the fallback."""
    return configured or os.environ.get("OTEL_SERVICE_NAME") or fallback


def setup_tracing(
    service_name: str,
    otlp_endpoint: str | None = None,
    console_export: bool = False,
    export_metrics: bool = True,
) -> bool:
    """Initialize the OpenTelemetry SDK.

    Args:
        service_name: Name to identify this service in traces
        otlp_endpoint: OTLP gRPC endpoint (e.g., "otel-collector:4317")
        console_export: Also export spans to stdout (for debugging)
        export_metrics: Also push OpenTelemetry metrics to the collector

    Returns:
        True if tracing was initialized, False if setup failed
    """
    global _tracer, _tracer_provider, _meter_provider

    if _tracer is not None:
        logger.debug("OpenTelemetry SDK already initialized", service_name=service_name)
        return True

    endpoint = resolve_otlp_endpoint(otlp_endpoint)

    try:
        resource = Resource.create({SERVICE_NAME: service_name})

        provider = TracerProvider(resource=resource)
        provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint, insecure=True))
        )
        if console_export:
            provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
    except Exception as exc:
        logger.error("Failed to create OTLP trace exporter", error=str(exc))
        return False

    # OpenTelemetry accepts a global provider only once per process
    trace.set_tracer_provider(provider)
    if trace.get_tracer_provider() is provider:
        _tracer_provider = provider
    else:
        logger.warning("Tracer provider already set, keeping the installed one")
        provider.shutdown()
    set_global_textmap(
        CompositePropagator([TraceContextTextMapPropagator(), W3CBaggagePropagator()])
    )
    _tracer = trace.get_tracer(service_name)

    if export_metrics:
        try:
            reader = PeriodicExportingMetricReader(
                OTLPMetricExporter(endpoint=endpoint, insecure=True)
            )
            meter_provider = MeterProvider(resource=resource, metric_readers=[reader])
        except Exception as exc:
            logger.error("Failed to create OTLP metrics exporter", error=str(exc))
        else:
            metrics.set_meter_provider(meter_provider)
            if metrics.get_meter_provider() is meter_provider:
                _meter_provider = meter_provider
            else:
                meter_provider.shutdown()

    logger.info("OpenTelemetry SDK initialized", otlp_endpoint=endpoint)
    return True


def shutdown_tracing() -> None:
    """Flush and shut down the providers created by :func:`setup_tracing`."""
    global _tracer, _tracer_provider, _meter_provider

    for provider in (_tracer_provider, _meter_provider):
        if provider is None:
            continue
        try:
            provider.shutdown()
        except Exception as exc:
            logger.error("Failed to shut down OpenTelemetry provider", error=str(exc))

    _tracer = None
    _tracer_provider = None
    _meter_provider = None


def get_tracer() -> Tracer:
    """Get the configured tracer, or a no-op tracer if not initialized."""
    if _tracer is None:
        return trace.get_tracer("beacon")
    return _tracer


def get_current_trace_id() -> str | None:
    """Get the current trace ID as a hex string, or None outside a trace."""
    span = trace.get_current_span()
    if span and span.get_span_context().is_valid:
        return format(span.get_span_context().trace_id, "032x")
    return None


@contextmanager
def create_span(
    name: str,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: dict[str, Any] | None = None,
) -> Generator[Span, None, None]:
    """Create a new span as a context manager.

    Args:
        name: Span name
        kind: Span kind (INTERNAL, SERVER, CLIENT, etc.)
        attributes: Initial span attributes

    Yields:
        The created span
    """
    with get_tracer().start_as_current_span(
        name,
        kind=kind,
        attributes=attributes or {},
    ) as span:
        yield span


def record_exception(span: Span, exception: Exception) -> None:
    """Record an exception on a span and mark it as failed."""
    span.record_exception(exception)
    span.set_status(Status(StatusCode.ERROR, str(exception)))
