"""Health check route."""

from __future__ import annotations

from collections.abc import Sequence

import msgspec
from litestar import Controller, Response, get
from litestar.status_codes import HTTP_200_OK, HTTP_503_SERVICE_UNAVAILABLE

from cloudfile.storage import StorageAdapter


class HealthResponse(msgspec.Struct, kw_only=True):
    """Storage health status."""

    status: str
    container: str


class HealthController(Controller):
    """Service health endpoints."""

    path = "/api/v1/health"
    tags: Sequence[str] | None = ["Health"]

    @get("/")
    async def health(self, storage: StorageAdapter) -> Response[HealthResponse]:
        """Report whether the storage container is reachable."""
        healthy = await storage.health_check()
        return Response(
            content=HealthResponse(
                status="ok" if healthy else "unavailable",
                container=storage.container_name,
            ),
            status_code=HTTP_200_OK if healthy else HTTP_503_SERVICE_UNAVAILABLE,
        )
