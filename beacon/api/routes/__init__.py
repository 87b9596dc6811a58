"""API route registration."""

from fastapi import FastAPI

from beacon.config.models.observability import MetricsConfig
from beacon.observability.logging import get_logger

logger = get_logger(__name__)


def register_routes(app: FastAPI, metrics: MetricsConfig) -> None:
    """Register all routes with the FastAPI application.

    Args:
        app: FastAPI application instance
        metrics: Metrics settings deciding whether and where the
            exposition endpoint is mounted
    """
    from beacon.api.routes.health import router as health_router
    from beacon.api.routes.metrics import build_metrics_router
    from beacon.api.routes.root import router as root_router

    app.include_router(root_router, tags=["Service"])
    app.include_router(health_router, tags=["Health"])

    if metrics.enabled:
        app.include_router(build_metrics_router(metrics.path), tags=["Metrics"])

    logger.debug("routes_registered", metrics_enabled=metrics.enabled)
