"""Unit tests for the health check endpoint."""

import json
from io import StringIO
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from beacon.api.dependencies import get_profile, get_structured_logger
from beacon.api.routes.health import router
from beacon.observability.logging import StructuredLogger
from beacon.services import SERVICES


@pytest.fixture
def stream() -> StringIO:
    return StringIO()


def make_client(key: str, stream: StringIO) -> TestClient:
    """Mount the health router for one profile."""
    profile = SERVICES[key]
    app = FastAPI()
    app.include_router(router)
    app.dependency_overrides[get_profile] = lambda: profile
    app.dependency_overrides[get_structured_logger] = lambda: StructuredLogger(
        profile.service_name, stream=stream
    )
    return TestClient(app)


def records(stream: StringIO) -> list[dict[str, Any]]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line]


class TestHealthEndpoint:
    """Tests for GET /health endpoint."""

    @pytest.mark.parametrize("key", ["go", "typescript", "elixir"])
    def test_health_body(self, key: str, stream: StringIO) -> None:
        """Body names the service by its short name."""
        response = make_client(key, stream).get("/health")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/json")
        assert response.json() == {"status": "healthy", "service": key}

    def test_logs_requested_and_completed(self, stream: StringIO) -> None:
        make_client("go", stream).get("/health", headers={"X-Real-IP": "198.51.100.4"})

        requested, completed = records(stream)
        assert requested["message"] == "Health check requested"
        assert requested["service"] == "go-service"
        assert requested["fields"] == {
            "remote_addr": "198.51.100.4",
            "method": "GET",
            "path": "/health",
        }
        assert completed["message"] == "Health check completed"
        assert completed["fields"]["status"] == "healthy"

    def test_post_not_allowed(self, stream: StringIO) -> None:
        response = make_client("go", stream).post("/health")

        assert response.status_code == 405
