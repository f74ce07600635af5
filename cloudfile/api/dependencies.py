"""Dependency injection providers for Litestar."""

from __future__ import annotations

import logging

from litestar.di import Provide
from litestar.exceptions import ServiceUnavailableException

from cloudfile.core.config import Settings, get_settings
from cloudfile.storage import StorageAdapter

logger = logging.getLogger(__name__)

# Global singleton instance (created at app startup)
_storage: StorageAdapter | None = None


async def get_storage() -> StorageAdapter:
    """Provide storage adapter instance.

    Returns:
        Singleton storage adapter.

    Raises:
        ServiceUnavailableException: If storage is not configured.
    """
    if _storage is None:
        raise ServiceUnavailableException("Storage not configured")
    return _storage


def provide_settings() -> Settings:
    """Provide settings instance.

    Returns:
        Application settings.
    """
    return get_settings()


async def init_services(settings: Settings) -> StorageAdapter | None:
    """Initialize service singletons.

    Called during application startup. The backend connection itself is
    opened lazily by the adapter on first use.

    Args:
        settings: Application settings.
    """
    global _storage

    if settings.storage_configured:
        _storage = StorageAdapter(settings.storage_config())
        logger.info(
            f"Storage initialized for {settings.storage_credentials.get('provider')} "
            f"container: {settings.storage_directory}"
        )
    else:
        logger.warning("Storage not configured - file endpoints will be unavailable")

    return _storage


async def shutdown_services() -> None:
    """Cleanup service resources.

    Called during application shutdown.
    """
    global _storage

    if _storage is not None:
        await _storage.close()
        _storage = None


# Dependency providers for Litestar
dependencies = {
    "settings": Provide(provide_settings, sync_to_thread=False),
    "storage": Provide(get_storage),
}
