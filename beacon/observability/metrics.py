"""Prometheus metrics for HTTP requests.

Every service exposes the same two series:

- ``http_requests_total{method, endpoint, status}``
- ``http_request_duration_seconds{method, endpoint}``

The recorder owns its registry so each application instance (and each test)
gets isolated series instead of sharing the process-wide default registry.
"""

from collections.abc import Sequence

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

from beacon.config.models.observability import DEFAULT_BUCKETS
from beacon.observability.logging import get_logger
from beacon.observability.models import MetricSample

logger = get_logger(__name__)

REQUESTS_METRIC = "http_requests_total"
DURATION_METRIC = "http_request_duration_seconds"


class MetricsRecorder:
    """Request counter and duration histogram backed by a registry.

    Recording never raises: registry errors are logged and dropped so a
    telemetry problem cannot fail the request being measured.
    """

    def __init__(
        self,
        registry: CollectorRegistry | None = None,
        buckets: Sequence[float] = DEFAULT_BUCKETS,
    ) -> None:
        self.registry = registry if registry is not None else CollectorRegistry()
        self.buckets = tuple(buckets)

        self.requests = Counter(
            REQUESTS_METRIC,
            "Total number of HTTP requests",
            labelnames=["method", "endpoint", "status"],
            registry=self.registry,
        )
        self.duration = Histogram(
            DURATION_METRIC,
            "HTTP request duration in seconds",
            labelnames=["method", "endpoint"],
            buckets=self.buckets,
            registry=self.registry,
        )

    def record_request(self, method: str, endpoint: str, status: int | str) -> None:
        """Increment the request counter for one completed request."""
        try:
            self.requests.labels(
                method=method,
                endpoint=endpoint,
                status=str(status),
            ).inc()
        except Exception as exc:  # noqa: BLE001
            logger.warning("metrics_record_failed", metric=REQUESTS_METRIC, error=str(exc))

    def record_duration(self, method: str, endpoint: str, duration_seconds: float) -> None:
        """Observe one request duration, in seconds."""
        try:
            self.duration.labels(method=method, endpoint=endpoint).observe(duration_seconds)
        except Exception as exc:  # noqa: BLE001
            logger.warning("metrics_record_failed", metric=DURATION_METRIC, error=str(exc))

    def record(self, sample: MetricSample) -> None:
        """Record both projections of a sample."""
        self.record_request(sample.method, sample.endpoint, sample.status)
        self.record_duration(sample.method, sample.endpoint, sample.duration_seconds)

    def request_count(self, method: str, endpoint: str, status: int | str) -> float:
        """Current counter value for a label set (0.0 if never recorded)."""
        value = self.registry.get_sample_value(
            REQUESTS_METRIC,
            {"method": method, "endpoint": endpoint, "status": str(status)},
        )
        return value or 0.0

    def exposition(self) -> bytes:
        """Render the registry in the Prometheus text format."""
        return generate_latest(self.registry)

    @property
    def content_type(self) -> str:
        """Content type of :meth:`exposition` output."""
        return CONTENT_TYPE_LATEST
