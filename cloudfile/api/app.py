"""Litestar application factory and configuration."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from litestar import Litestar, Request, Response
from litestar.datastructures import UploadFile
from litestar.logging import LoggingConfig
from litestar.openapi import OpenAPIConfig
from litestar.openapi.spec import Contact, Server
from litestar.status_codes import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_502_BAD_GATEWAY,
    HTTP_503_SERVICE_UNAVAILABLE,
)

from cloudfile.api.dependencies import dependencies, init_services, shutdown_services
from cloudfile.api.routes import HealthController, StorageController
from cloudfile.api.routes.storage import ErrorResponse
from cloudfile.core.config import Settings, get_settings
from cloudfile.storage import (
    BackendReadError,
    BackendWriteError,
    ConfigurationError,
    NotFoundError,
    StorageError,
    StorageValidationError,
)

logger = logging.getLogger(__name__)

_ERROR_STATUS: list[tuple[type[StorageError], int, str]] = [
    (NotFoundError, HTTP_404_NOT_FOUND, "File not found"),
    (StorageValidationError, HTTP_400_BAD_REQUEST, "Invalid identifier"),
    (ConfigurationError, HTTP_503_SERVICE_UNAVAILABLE, "Storage misconfigured"),
    (BackendReadError, HTTP_502_BAD_GATEWAY, "Storage read failed"),
    (BackendWriteError, HTTP_502_BAD_GATEWAY, "Storage write failed"),
]


def storage_error_handler(request: Request, exc: StorageError) -> Response[ErrorResponse]:
    """Turn storage errors that escape a handler into JSON error responses."""
    for error_type, status_code, message in _ERROR_STATUS:
        if isinstance(exc, error_type):
            break
    else:
        status_code, message = HTTP_500_INTERNAL_SERVER_ERROR, "Storage error"

    logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return Response(
        content=ErrorResponse(error=message, detail=str(exc)),
        status_code=status_code,
    )


@asynccontextmanager
async def lifespan(app: Litestar) -> AsyncGenerator[None, None]:  # noqa: ARG001
    """Set up the storage adapter and release it on shutdown."""
    settings = get_settings()
    logger.info(f"Starting cloudfile API, container: {settings.storage_directory}")

    storage = await init_services(settings)
    if storage is not None and not await storage.health_check():
        logger.warning(f"Container {storage.container_name} is not reachable yet")

    try:
        yield
    finally:
        logger.info("Shutting down cloudfile API")
        await shutdown_services()


def _logging_config(settings: Settings) -> LoggingConfig:
    level = "DEBUG" if settings.debug else "INFO"
    return LoggingConfig(
        root={"level": level, "handlers": ["console"]},
        formatters={
            "standard": {"format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"},
        },
        handlers={
            "console": {"class": "logging.StreamHandler", "formatter": "standard"},
        },
        loggers={
            "cloudfile": {"level": level, "propagate": True},
            # boto is noisy at INFO
            "botocore": {"level": "WARNING", "propagate": False},
            "aiobotocore": {"level": "WARNING", "propagate": False},
        },
    )


def create_app(settings: Settings | None = None) -> Litestar:
    """Create the Litestar application.

    Args:
        settings: Settings to build from. Defaults to the cached
            environment settings.
    """
    settings = settings or get_settings()

    openapi_config = OpenAPIConfig(
        title="cloudfile API",
        version="0.1.0",
        description="Upload handling over configurable cloud storage backends",
        contact=Contact(name="API Support"),
        servers=[
            Server(
                url=f"http://{settings.api_host}:{settings.api_port}",
                description="Local development server",
            ),
        ],
        path="/docs",
    )

    return Litestar(
        route_handlers=[HealthController, StorageController],
        dependencies=dependencies,
        exception_handlers={StorageError: storage_error_handler},
        lifespan=[lifespan],
        logging_config=_logging_config(settings),
        openapi_config=openapi_config,
        debug=settings.debug,
        signature_types=[UploadFile],
    )


app = create_app()
