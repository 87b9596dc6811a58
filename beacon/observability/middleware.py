"""Request logging middleware for observability.

Drives the RequestInterceptor for every request handled by the application
and binds the request's trace id to structlog contextvars so module-level
logs emitted while handling it can be correlated.
"""

from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
from structlog.contextvars import bind_contextvars, clear_contextvars

from beacon.observability.interceptor import RequestInterceptor, resolve_remote_addr
from beacon.observability.tracing import get_current_trace_id


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware that logs and measures every HTTP request.

    The interceptor is passed in rather than looked up globally so the
    application owns its logger and metrics registry.
    """

    def __init__(self, app: ASGIApp, interceptor: RequestInterceptor) -> None:
        super().__init__(app)
        self.interceptor = interceptor

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Process request and complete the logging contract."""
        clear_contextvars()

        trace_id = get_current_trace_id()
        if trace_id:
            bind_contextvars(trace_id=trace_id)

        context = self.interceptor.begin(
            remote_addr=resolve_remote_addr(
                request.headers,
                request.client.host if request.client else None,
            ),
            method=request.method,
            path=request.url.path,
            user_agent=request.headers.get("user-agent", ""),
        )

        return await self.interceptor.intercept(
            context,
            lambda: call_next(request),
            lambda response: response.status_code,
        )
