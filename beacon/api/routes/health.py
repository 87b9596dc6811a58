"""Health check endpoint."""

from fastapi import APIRouter
from opentelemetry.trace import SpanKind

from beacon.api.dependencies import ProfileDep, RequestFieldsDep, StructuredLoggerDep
from beacon.api.models.health import HealthResponse
from beacon.observability.tracing import create_span

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(
    profile: ProfileDep,
    logger: StructuredLoggerDep,
    fields: RequestFieldsDep,
) -> HealthResponse:
    """Check service health status.

    The service has no downstream dependencies, so answering at all means
    it is healthy. The check runs in its own ``health_check`` span.
    """
    with create_span(
        "health_check",
        kind=SpanKind.INTERNAL,
        attributes={"service.short_name": profile.short_name},
    ):
        logger.info("Health check requested", fields)

        response = HealthResponse(status="healthy", service=profile.short_name)

        logger.info("Health check completed", {**fields, "status": response.status})

    return response
