"""Structured logging configuration using structlog.

Every record is rendered as a single JSON line on stdout with the shape::

    {"timestamp": ..., "level": ..., "service": ..., "message": ..., "fields": {...}}

Context passed to a log call is nested under ``fields``; the key is omitted
when there is no context.
"""

import json
import math
import sys
from collections.abc import Mapping
from typing import IO, Any, cast

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from beacon.observability.models import LogEvent

LEVELS: frozenset[str] = frozenset({"DEBUG", "INFO", "WARN", "ERROR"})

# Rendered level -> structlog method name
_METHOD_NAMES: dict[str, str] = {
    "DEBUG": "debug",
    "INFO": "info",
    "WARN": "warning",
    "ERROR": "error",
}

_LEVEL_NUMBERS: dict[str, int] = {
    "DEBUG": 10,
    "INFO": 20,
    "WARN": 30,
    "ERROR": 40,
    "CRITICAL": 50,
}


def normalize_level(level: str) -> str:
    """Return the rendered form of a level name.

    Level names are case-insensitive and ``WARNING`` renders as ``WARN``.

    Raises:
        ValueError: If the level is not DEBUG, INFO, WARN or ERROR
    """
    name = level.strip().upper()
    if name == "WARNING":
        name = "WARN"
    if name == "CRITICAL":
        name = "ERROR"
    if name not in LEVELS:
        raise ValueError(f"Unsupported log level: {level!r}")
    return name


def level_number(level: str) -> int:
    """Convert a level name to the numeric threshold used for filtering."""
    name = level.strip().upper()
    if name == "WARNING":
        name = "WARN"
    return _LEVEL_NUMBERS.get(name, 20)


def _coerce(value: Any, _path: frozenset[int] = frozenset()) -> Any:
    """Make a value JSON-safe, stringifying anything that isn't."""
    if isinstance(value, float) and not math.isfinite(value):
        # NaN and Infinity have no JSON literal
        return str(value)
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if id(value) in _path:
        return "<circular>"
    if isinstance(value, Mapping):
        path = _path | {id(value)}
        return {str(k): _coerce(v, path) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        path = _path | {id(value)}
        return [_coerce(v, path) for v in value]
    return str(value)


def dumps(obj: Any, **kwargs: Any) -> str:
    """Serialize a record, falling back to stringified values on failure."""
    kwargs.setdefault("default", str)
    kwargs["allow_nan"] = False
    try:
        return json.dumps(obj, **kwargs)
    except (TypeError, ValueError):
        # Non-string keys, circular references or non-finite floats
        return json.dumps(_coerce(obj), **kwargs)


class EventShaper:
    """Processor that reshapes a structlog event dict into a LogEvent record.

    The event text becomes ``message``, the level is upper-cased and every
    remaining key is nested under ``fields``.
    """

    def __init__(self, service: str) -> None:
        self.service = service

    def __call__(
        self,
        _logger: WrappedLogger,
        method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        """Reshape the event dictionary."""
        message = event_dict.pop("event", "")
        raw_level = event_dict.pop("level", method_name)
        explicit = event_dict.pop("fields", None)

        fields: dict[str, Any] = dict(event_dict)
        if isinstance(explicit, Mapping):
            fields.update({str(key): value for key, value in explicit.items()})
        elif explicit is not None:
            fields["fields"] = explicit

        event = LogEvent(
            level=normalize_level(str(raw_level)),  # type: ignore[arg-type]
            service=self.service,
            message=str(message),
            fields=fields,
        )
        return event.to_record()


def build_processors(
    service: str,
    format: str = "json",
    merge_context: bool = True,
) -> list[Processor]:
    """Build the processor chain shared by every logger in the process.

    With ``merge_context`` the structlog contextvars bound for the current
    request (e.g. trace_id) are added to the record's fields.
    """
    processors: list[Processor] = []
    if merge_context:
        processors.append(structlog.contextvars.merge_contextvars)
    processors.append(structlog.processors.add_log_level)
    processors.append(structlog.processors.format_exc_info)

    if format == "json":
        # LogEvent stamps its own UTC timestamp
        processors.append(EventShaper(service))
        processors.append(structlog.processors.JSONRenderer(serializer=dumps, default=str))
    else:
        processors.append(structlog.processors.TimeStamper(fmt="iso", utc=True))
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    return processors


def setup_logging(
    service: str,
    level: str = "INFO",
    format: str = "json",
    stream: IO[str] | None = None,
) -> None:
    """Configure structlog for module-level loggers.

    Args:
        service: Value of the ``service`` key in every record
        level: Minimum log level (DEBUG, INFO, WARN, ERROR)
        format: "json" for production, "console" for development
        stream: Sink for rendered lines (defaults to stdout)
    """
    structlog.configure(
        processors=build_processors(service, format),
        wrapper_class=structlog.make_filtering_bound_logger(level_number(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(stream or sys.stdout),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger instance for the given module name."""
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))


class StructuredLogger:
    """Owned JSON logger used on the request path.

    Unlike module loggers this does not depend on global structlog
    configuration, so each application (and each test) holds its own
    instance and sink. Records carry only the fields passed to the call.
    """

    def __init__(
        self,
        service: str,
        stream: IO[str] | None = None,
        level: str = "INFO",
    ) -> None:
        self.service = service
        self.level = normalize_level(level)
        self._logger = structlog.wrap_logger(
            structlog.PrintLogger(stream or sys.stdout),
            processors=build_processors(service, merge_context=False),
            wrapper_class=structlog.make_filtering_bound_logger(level_number(level)),
            context_class=dict,
        )

    def emit(
        self,
        level: str,
        message: str,
        fields: Mapping[str, Any] | None = None,
    ) -> None:
        """Write one record. Never raises."""
        try:
            method = getattr(self._logger, _METHOD_NAMES[normalize_level(level)])
            method(message, fields=dict(fields) if fields else None)
        except Exception:  # noqa: BLE001
            # The sink is the only place to report this; drop the record.
            return

    def debug(self, message: str, fields: Mapping[str, Any] | None = None) -> None:
        self.emit("DEBUG", message, fields)

    def info(self, message: str, fields: Mapping[str, Any] | None = None) -> None:
        self.emit("INFO", message, fields)

    def warn(self, message: str, fields: Mapping[str, Any] | None = None) -> None:
        self.emit("WARN", message, fields)

    def error(self, message: str, fields: Mapping[str, Any] | None = None) -> None:
        self.emit("ERROR", message, fields)
