"""FastAPI application factory.

Creates and configures the application for one service profile with the
request logging middleware, exception handlers, tracing and routes.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import IO

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from opentelemetry import trace
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from prometheus_client import CollectorRegistry
from starlette.exceptions import HTTPException as StarletteHTTPException

import beacon
from beacon.api.exceptions import BeaconAPIError
from beacon.api.models.errors import ErrorBody, ErrorCode, ErrorResponse
from beacon.api.routes import register_routes
from beacon.config import Settings, get_settings
from beacon.observability.interceptor import RequestInterceptor
from beacon.observability.logging import StructuredLogger, get_logger, setup_logging
from beacon.observability.metrics import MetricsRecorder
from beacon.observability.middleware import RequestLoggingMiddleware
from beacon.observability.tracing import (
    record_exception,
    resolve_service_name,
    setup_tracing,
    shutdown_tracing,
)
from beacon.services import ServiceProfile

logger = get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    log_stream: IO[str] | None = None,
    registry: CollectorRegistry | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Configuration to use (loaded with get_settings() if omitted)
        log_stream: Sink for JSON log lines (stdout if omitted)
        registry: Prometheus registry owned by this app (a fresh one if omitted)

    Returns:
        Configured FastAPI application

    Raises:
        UnknownServiceError: If settings.service names no known profile
    """
    settings = settings or get_settings()
    profile = settings.profile
    observability = settings.observability

    setup_logging(
        profile.service_name,
        level=observability.logging.level,
        format=observability.logging.format,
        stream=log_stream,
    )

    structured_logger = StructuredLogger(
        profile.service_name,
        stream=log_stream,
        level=observability.logging.level,
    )
    recorder = MetricsRecorder(registry, buckets=observability.metrics.buckets)
    interceptor = RequestInterceptor(structured_logger, recorder)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        structured_logger.info(
            f"{profile.display_name} service starting",
            {"port": settings.port},
        )
        yield
        shutdown_tracing()
        structured_logger.info(f"{profile.display_name} service stopped")

    app = FastAPI(
        title=f"{profile.display_name} Service",
        version=beacon.__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.profile = profile
    app.state.structured_logger = structured_logger
    app.state.recorder = recorder
    app.state.interceptor = interceptor

    app.add_middleware(RequestLoggingMiddleware, interceptor=interceptor)

    _register_exception_handlers(app)

    register_routes(app, observability.metrics)

    if observability.tracing.enabled:
        _instrument(app, settings, profile)

    logger.debug(
        "app_created",
        service=profile.key,
        debug=settings.debug,
        tracing=observability.tracing.enabled,
    )

    return app


def _instrument(app: FastAPI, settings: Settings, profile: ServiceProfile) -> None:
    """Set up the OpenTelemetry SDK and instrument the app.

    Failures leave the service running without tracing.
    """
    tracing = settings.observability.tracing
    initialized = setup_tracing(
        resolve_service_name(tracing.service_name, profile.service_name),
        otlp_endpoint=tracing.otlp_endpoint,
        console_export=tracing.console_export,
        export_metrics=tracing.export_metrics,
    )
    if not initialized:
        return

    try:
        FastAPIInstrumentor.instrument_app(app)
    except Exception as exc:
        logger.error("Failed to instrument FastAPI application", error=str(exc))
        return

    logger.info("opentelemetry_instrumentation_enabled")


def _error_response(status_code: int, code: ErrorCode, message: str) -> JSONResponse:
    response = ErrorResponse(error=ErrorBody(code=code, message=message))
    return JSONResponse(status_code=status_code, content=response.model_dump(mode="json"))


def _register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers.

    Args:
        app: FastAPI application
    """

    @app.exception_handler(BeaconAPIError)
    async def beacon_api_error_handler(request: Request, exc: BeaconAPIError) -> JSONResponse:
        """Handle BeaconAPIError and its subclasses."""
        logger.warning(
            "api_error",
            error_code=exc.error_code.value,
            message=exc.message,
            path=request.url.path,
        )
        return _error_response(exc.status_code, exc.error_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request,  # noqa: ARG001
        exc: StarletteHTTPException,
    ) -> JSONResponse:
        """Render router errors (404, 405, ...) with the standard envelope."""
        return _error_response(
            exc.status_code,
            ErrorCode.for_status(exc.status_code),
            str(exc.detail),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        record_exception(trace.get_current_span(), exc)
        logger.exception(
            "unexpected_error",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
        )
        return _error_response(500, ErrorCode.INTERNAL_ERROR, "An unexpected error occurred")
