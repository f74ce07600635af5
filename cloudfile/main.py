"""Command line entry point: serve the cloudfile API with uvicorn."""

import uvicorn

from cloudfile.core.config import get_settings


def main() -> None:
    settings = get_settings()

    uvicorn.run(
        "cloudfile.api.app:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    main()
