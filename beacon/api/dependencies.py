"""Dependency injection for API routes.

Everything a handler needs is owned by the application and stored on
``app.state`` by the factory, so tests can build isolated apps.
"""

from typing import Annotated, Any

from fastapi import Depends, Request

from beacon.observability.interceptor import resolve_remote_addr
from beacon.observability.logging import StructuredLogger
from beacon.observability.metrics import MetricsRecorder
from beacon.services import ServiceProfile


def get_profile(request: Request) -> ServiceProfile:
    """Profile of the service this application runs as."""
    return request.app.state.profile


def get_structured_logger(request: Request) -> StructuredLogger:
    """Request-path JSON logger owned by the application."""
    return request.app.state.structured_logger


def get_recorder(request: Request) -> MetricsRecorder:
    """Metrics recorder owned by the application."""
    return request.app.state.recorder


def get_request_fields(request: Request) -> dict[str, Any]:
    """Fields handlers attach to their own log lines."""
    return {
        "remote_addr": resolve_remote_addr(
            request.headers,
            request.client.host if request.client else None,
        ),
        "method": request.method,
        "path": request.url.path,
    }


ProfileDep = Annotated[ServiceProfile, Depends(get_profile)]
StructuredLoggerDep = Annotated[StructuredLogger, Depends(get_structured_logger)]
RecorderDep = Annotated[MetricsRecorder, Depends(get_recorder)]
RequestFieldsDep = Annotated[dict[str, Any], Depends(get_request_fields)]
