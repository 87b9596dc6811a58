"""Prometheus exposition endpoint."""

from fastapi import APIRouter, Response

from beacon.api.dependencies import RecorderDep


def build_metrics_router(path: str = "/metrics") -> APIRouter:
    """Create the router serving the recorder's registry at ``path``."""
    router = APIRouter()

    @router.get(path, response_class=Response)
    async def get_metrics(recorder: RecorderDep) -> Response:
        """Get Prometheus metrics in the text exposition format."""
        return Response(
            content=recorder.exposition(),
            media_type=recorder.content_type,
        )

    return router
