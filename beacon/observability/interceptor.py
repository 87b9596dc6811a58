"""Request interception: one incoming log, one completion log, one metrics update.

The interceptor is independent of any web framework. Adapters (see
``beacon.observability.middleware``) call :meth:`RequestInterceptor.begin`
when a request arrives and :meth:`RequestInterceptor.complete` once its
response status is known. Completion runs at most once per request, so an
adapter may call it from several exit points without double counting.
"""

import time
from collections.abc import Awaitable, Callable, Mapping
from typing import TypeVar

from beacon.observability.logging import StructuredLogger
from beacon.observability.metrics import MetricsRecorder
from beacon.observability.models import MetricSample, RequestContext

T = TypeVar("T")

INCOMING_MESSAGE = "Incoming HTTP request"
COMPLETED_MESSAGE = "HTTP request completed"

UNKNOWN_ADDR = "unknown"


def level_for_status(status: int) -> str:
    """Map a response status code to the completion log level.

    >= 500 is ERROR, 400-499 is WARN, everything else INFO.
    """
    if status >= 500:
        return "ERROR"
    if status >= 400:
        return "WARN"
    return "INFO"


def resolve_remote_addr(headers: Mapping[str, str], peer: str | None) -> str:
    """Pick the client address for a request.

    Preference: first ``X-Forwarded-For`` entry, ``X-Real-IP``, the peer
    address of the connection, then the literal ``"unknown"``.

    Args:
        headers: Request headers; lookups use lower-case names
        peer: Host of the connected socket, if any
    """
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    real_ip = headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()

    if peer:
        return peer

    return UNKNOWN_ADDR


class RequestInterceptor:
    """Applies the request logging and metrics convention.

    Holds no per-request state; everything a request needs between entry
    and completion lives in its RequestContext.
    """

    def __init__(
        self,
        logger: StructuredLogger,
        recorder: MetricsRecorder,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.logger = logger
        self.recorder = recorder
        self._clock = clock

    def begin(
        self,
        remote_addr: str,
        method: str,
        path: str,
        user_agent: str = "",
    ) -> RequestContext:
        """Capture the request context and log its arrival."""
        context = RequestContext(
            remote_addr=remote_addr or UNKNOWN_ADDR,
            method=method,
            path=path,
            user_agent=user_agent or "",
            start_time=self._clock(),
        )
        self.logger.info(INCOMING_MESSAGE, context.request_fields())
        return context

    def complete(self, context: RequestContext, status: int) -> MetricSample | None:
        """Log the completion and record metrics for a request.

        Returns the recorded sample, or None if the request was already
        completed. Never raises.
        """
        if context.completed:
            return None
        context.completed = True

        duration = context.elapsed(self._clock())

        self.logger.emit(
            level_for_status(status),
            COMPLETED_MESSAGE,
            {
                "remote_addr": context.remote_addr,
                "method": context.method,
                "path": context.path,
                "status": status,
                "duration_seconds": duration,
            },
        )

        sample = MetricSample(
            method=context.method,
            endpoint=context.path,
            status=str(status),
            duration_seconds=duration,
        )
        self.recorder.record(sample)
        return sample

    async def intercept(
        self,
        context: RequestContext,
        handler: Callable[[], Awaitable[T]],
        status_of: Callable[[T], int],
    ) -> T:
        """Run a handler once and complete the request whatever happens.

        A handler exception completes the request with status 500 and is
        then re-raised for the host server to turn into a response.
        """
        try:
            result = await handler()
        except Exception:
            self.complete(context, 500)
            raise

        self.complete(context, status_of(result))
        return result
