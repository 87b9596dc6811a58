"""Telemetry data models shared by the logger, interceptor and recorder."""

import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

Level = Literal["DEBUG", "INFO", "WARN", "ERROR"]


class LogEvent(BaseModel):
    """One structured log record.

    Extra context lives under ``fields`` and is never merged into the top
    level. An empty ``fields`` mapping is left out of the rendered record.
    """

    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    level: Level
    service: str
    message: str
    fields: dict[str, Any] = Field(default_factory=dict)

    def to_record(self) -> dict[str, Any]:
        """Return the mapping that gets serialized to the log sink."""
        record: dict[str, Any] = {
            "timestamp": self.timestamp.astimezone(UTC).isoformat().replace("+00:00", "Z"),
            "level": self.level,
            "service": self.service,
            "message": self.message,
        }
        if self.fields:
            record["fields"] = dict(self.fields)
        return record


class MetricSample(BaseModel):
    """Observation recorded once per completed request."""

    method: str
    endpoint: str
    status: str
    duration_seconds: float = Field(ge=0.0)


@dataclass
class RequestContext:
    """Request attributes captured on entry and read again on completion.

    Owned by a single request; never shared between requests.
    """

    remote_addr: str
    method: str
    path: str
    user_agent: str
    start_time: float = field(default_factory=time.perf_counter)
    completed: bool = field(default=False, init=False)

    def elapsed(self, now: float | None = None) -> float:
        """Seconds elapsed since the request started, never negative."""
        end = time.perf_counter() if now is None else now
        return max(0.0, end - self.start_time)

    def request_fields(self) -> dict[str, Any]:
        """Fields attached to the incoming-request log line."""
        return {
            "remote_addr": self.remote_addr,
            "method": self.method,
            "path": self.path,
            "user_agent": self.user_agent,
        }
