"""Tests for RequestLoggingMiddleware."""

import json
from io import StringIO
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from prometheus_client import CollectorRegistry
from starlette.responses import Response

from beacon.observability.interceptor import RequestInterceptor
from beacon.observability.logging import StructuredLogger
from beacon.observability.metrics import MetricsRecorder
from beacon.observability.middleware import RequestLoggingMiddleware


def records(stream: StringIO) -> list[dict[str, Any]]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line]


def make_request(
    method: str = "GET",
    path: str = "/test",
    headers: dict[str, str] | None = None,
    client_host: str | None = "10.0.0.1",
) -> MagicMock:
    """Build a Request double with lower-case header lookups."""
    values = {k.lower(): v for k, v in (headers or {}).items()}
    request = MagicMock(spec=Request)
    request.headers.get = MagicMock(side_effect=lambda key, default=None: values.get(key, default))
    request.method = method
    request.url.path = path
    if client_host is None:
        request.client = None
    else:
        request.client.host = client_host
    return request


class TestRequestLoggingMiddleware:
    """Tests for RequestLoggingMiddleware.dispatch."""

    @pytest.fixture
    def stream(self) -> StringIO:
        return StringIO()

    @pytest.fixture
    def recorder(self) -> MetricsRecorder:
        return MetricsRecorder(CollectorRegistry())

    @pytest.fixture
    def middleware(self, stream: StringIO, recorder: MetricsRecorder) -> RequestLoggingMiddleware:
        interceptor = RequestInterceptor(StructuredLogger("go-service", stream=stream), recorder)
        return RequestLoggingMiddleware(MagicMock(), interceptor=interceptor)

    @pytest.mark.asyncio
    async def test_logs_incoming_and_completed(
        self, middleware: RequestLoggingMiddleware, stream: StringIO
    ) -> None:
        request = make_request("POST", "/api/items", {"User-Agent": "pytest"})
        call_next = AsyncMock(return_value=Response(status_code=201))

        await middleware.dispatch(request, call_next)

        incoming, completed = records(stream)
        assert incoming["message"] == "Incoming HTTP request"
        assert incoming["fields"] == {
            "remote_addr": "10.0.0.1",
            "method": "POST",
            "path": "/api/items",
            "user_agent": "pytest",
        }
        assert completed["message"] == "HTTP request completed"
        assert completed["fields"]["status"] == 201

    @pytest.mark.asyncio
    async def test_returns_downstream_response(self, middleware: RequestLoggingMiddleware) -> None:
        response = Response(status_code=200)
        call_next = AsyncMock(return_value=response)

        result = await middleware.dispatch(make_request(), call_next)

        assert result is response
        call_next.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_uses_forwarded_for(
        self, middleware: RequestLoggingMiddleware, stream: StringIO
    ) -> None:
        request = make_request(headers={"X-Forwarded-For": "203.0.113.9, 10.0.0.2"})
        call_next = AsyncMock(return_value=Response(status_code=200))

        await middleware.dispatch(request, call_next)

        for record in records(stream):
            assert record["fields"]["remote_addr"] == "203.0.113.9"

    @pytest.mark.asyncio
    async def test_unknown_without_client(
        self, middleware: RequestLoggingMiddleware, stream: StringIO
    ) -> None:
        call_next = AsyncMock(return_value=Response(status_code=200))

        await middleware.dispatch(make_request(client_host=None), call_next)

        assert records(stream)[0]["fields"]["remote_addr"] == "unknown"

    @pytest.mark.asyncio
    async def test_records_metrics(
        self, middleware: RequestLoggingMiddleware, recorder: MetricsRecorder
    ) -> None:
        call_next = AsyncMock(return_value=Response(status_code=404))

        await middleware.dispatch(make_request("GET", "/missing"), call_next)

        assert recorder.request_count("GET", "/missing", "404") == 1.0

    @pytest.mark.asyncio
    async def test_downstream_error_completes_with_500(
        self, middleware: RequestLoggingMiddleware, stream: StringIO, recorder: MetricsRecorder
    ) -> None:
        call_next = AsyncMock(side_effect=RuntimeError("boom"))

        with pytest.raises(RuntimeError):
            await middleware.dispatch(make_request("GET", "/boom"), call_next)

        completed = records(stream)[-1]
        assert completed["level"] == "ERROR"
        assert completed["fields"]["status"] == 500
        assert recorder.request_count("GET", "/boom", "500") == 1.0

    @pytest.mark.asyncio
    async def test_binds_trace_id(self, middleware: RequestLoggingMiddleware) -> None:
        """The active trace id is bound for module loggers."""
        call_next = AsyncMock(return_value=Response(status_code=200))

        with (
            patch(
                "beacon.observability.middleware.get_current_trace_id",
                return_value="4bf92f3577b34da6a3ce929d0e0e4736",
            ),
            patch("beacon.observability.middleware.bind_contextvars") as mock_bind,
        ):
            await middleware.dispatch(make_request(), call_next)

        mock_bind.assert_called_once_with(trace_id="4bf92f3577b34da6a3ce929d0e0e4736")

    @pytest.mark.asyncio
    async def test_clears_context_vars_on_request_start(
        self, middleware: RequestLoggingMiddleware
    ) -> None:
        call_next = AsyncMock(return_value=Response(status_code=200))

        with patch("beacon.observability.middleware.clear_contextvars") as mock_clear:
            await middleware.dispatch(make_request(), call_next)
            mock_clear.assert_called_once()


class TestMiddlewareInApp:
    """The middleware mounted on a real application."""

    @pytest.fixture
    def stream(self) -> StringIO:
        return StringIO()

    @pytest.fixture
    def recorder(self) -> MetricsRecorder:
        return MetricsRecorder(CollectorRegistry())

    @pytest.fixture
    def client(self, stream: StringIO, recorder: MetricsRecorder) -> TestClient:
        app = FastAPI()
        interceptor = RequestInterceptor(StructuredLogger("svc", stream=stream), recorder)
        app.add_middleware(RequestLoggingMiddleware, interceptor=interceptor)

        @app.get("/test")
        async def test_endpoint() -> dict[str, str]:
            return {"status": "ok"}

        @app.get("/boom")
        async def boom() -> dict[str, str]:
            raise RuntimeError("boom")

        return TestClient(app, raise_server_exceptions=False)

    def test_one_pair_per_request(self, client: TestClient, stream: StringIO) -> None:
        client.get("/test")
        client.get("/test")

        messages = [r["message"] for r in records(stream)]
        assert messages == [
            "Incoming HTTP request",
            "HTTP request completed",
            "Incoming HTTP request",
            "HTTP request completed",
        ]

    def test_not_found_logged_as_warn(self, client: TestClient, stream: StringIO) -> None:
        response = client.get("/nope")

        assert response.status_code == 404
        completed = records(stream)[-1]
        assert completed["level"] == "WARN"
        assert completed["fields"]["status"] == 404

    def test_unhandled_error_logged_as_error(
        self, client: TestClient, stream: StringIO, recorder: MetricsRecorder
    ) -> None:
        response = client.get("/boom")

        assert response.status_code == 500
        completed = records(stream)[-1]
        assert completed["level"] == "ERROR"
        assert completed["fields"]["status"] == 500
        assert recorder.request_count("GET", "/boom", "500") == 1.0
