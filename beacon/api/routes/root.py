"""Root endpoint."""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from beacon.api.dependencies import ProfileDep, RequestFieldsDep, StructuredLoggerDep

router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
async def root(
    profile: ProfileDep,
    logger: StructuredLoggerDep,
    fields: RequestFieldsDep,
) -> PlainTextResponse:
    """Report that the service is up, as plain text."""
    logger.info("Root endpoint accessed", fields)
    return PlainTextResponse(profile.banner)
