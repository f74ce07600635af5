"""Backend construction from provider credentials."""

from __future__ import annotations

from typing import Any

from cloudfile.core.enums import Provider

from .base import StorageBackend
from .exceptions import ConfigurationError
from .local import LocalBackend, LocalBackendSettings
from .s3 import S3Backend, S3BackendSettings


def create_backend(
    credentials: dict[str, Any],
    *,
    timeout: float | None = None,
) -> StorageBackend:
    """Create the backend selected by ``credentials["provider"]``.

    Args:
        credentials: Provider credential map.
        timeout: Transport timeout passed to clients that support one.

    Returns:
        Backend ready to ``connect()``.

    Raises:
        ConfigurationError: If the provider is missing or unknown, or
            required credentials are absent.
    """
    try:
        provider = Provider.from_credentials(credentials)
    except ValueError as e:
        raise ConfigurationError(str(e), cause=e) from e

    if provider.is_s3_compatible:
        return S3Backend(S3BackendSettings.from_credentials(credentials, timeout=timeout))
    return LocalBackend(LocalBackendSettings.from_credentials(credentials))
