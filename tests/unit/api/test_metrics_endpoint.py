"""Unit tests for the Prometheus exposition endpoint."""

from fastapi import FastAPI
from fastapi.testclient import TestClient
from prometheus_client import CollectorRegistry
from prometheus_client.parser import text_string_to_metric_families

from beacon.api.dependencies import get_recorder
from beacon.api.routes.metrics import build_metrics_router
from beacon.observability.metrics import MetricsRecorder


def make_client(recorder: MetricsRecorder, path: str = "/metrics") -> TestClient:
    app = FastAPI()
    app.include_router(build_metrics_router(path))
    app.dependency_overrides[get_recorder] = lambda: recorder
    return TestClient(app)


class TestMetricsEndpoint:
    """Tests for GET /metrics."""

    def test_serves_exposition(self) -> None:
        recorder = MetricsRecorder(CollectorRegistry())
        recorder.record_request("GET", "/health", 200)
        recorder.record_duration("GET", "/health", 0.02)

        response = make_client(recorder).get("/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        families = {f.name: f for f in text_string_to_metric_families(response.text)}
        assert {"http_requests", "http_request_duration_seconds"} <= set(families)
        (sample,) = [
            s for s in families["http_requests"].samples if s.name == "http_requests_total"
        ]
        assert sample.labels == {"method": "GET", "endpoint": "/health", "status": "200"}
        assert sample.value == 1.0

    def test_custom_path(self) -> None:
        client = make_client(MetricsRecorder(CollectorRegistry()), path="/internal/metrics")

        assert client.get("/internal/metrics").status_code == 200
        assert client.get("/metrics").status_code == 404
