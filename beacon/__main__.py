"""Run one service process.

    python -m beacon --service typescript
    beacon --service elixir --port 4001

Unset options fall back to configuration (config/*.toml and BEACON_* env vars).
"""

import argparse
import sys

import uvicorn

from beacon.api.app import create_app
from beacon.config import get_settings
from beacon.services import SERVICES, UnknownServiceError


def build_parser() -> argparse.ArgumentParser:
    """Command line options."""
    parser = argparse.ArgumentParser(
        prog="beacon",
        description="Run an HTTP service with request logging, metrics and tracing",
    )
    parser.add_argument(
        "--service",
        choices=sorted(SERVICES),
        help="Service profile to run (default: from configuration)",
    )
    parser.add_argument("--host", help="Bind address (default: from configuration)")
    parser.add_argument("--port", type=int, help="Bind port (default: profile port)")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings(args.service)
    except UnknownServiceError as exc:
        print(exc, file=sys.stderr)
        return 2

    api_updates = {key: value for key, value in (("host", args.host), ("port", args.port)) if value}
    if api_updates:
        settings = settings.model_copy(
            update={"api": settings.api.model_copy(update=api_updates)}
        )

    app = create_app(settings)
    uvicorn.run(
        app,
        host=settings.api.host,
        port=settings.port,
        access_log=settings.api.access_log,
        log_level="warning",
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
