"""Local filesystem storage backend."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from urllib.parse import quote

import aiofiles
import aiofiles.os

from cloudfile.core.enums import Provider

from .exceptions import (
    BackendReadError,
    BackendWriteError,
    ConfigurationError,
    NotFoundError,
    StorageValidationError,
)
from .schemas import RemoteObject, WriteRequest, infer_content_type

logger = logging.getLogger(__name__)


def _safe_join(base: Path, relative: str) -> Path:
    """Join a key onto a base directory, refusing paths that escape it."""
    root = base.resolve()
    candidate = (root / relative.lstrip("/")).resolve()
    if candidate == root or not candidate.is_relative_to(root):
        raise StorageValidationError(f"Invalid storage key: {relative!r}")
    return candidate


class LocalBackendSettings:
    """Local storage configuration."""

    def __init__(self, *, root: Path, endpoint: str | None = None) -> None:
        self.root = root
        self.endpoint = endpoint

    @classmethod
    def from_credentials(cls, credentials: dict[str, Any]) -> LocalBackendSettings:
        """Build settings from ``local_root`` and optional ``endpoint``."""
        root = credentials.get("local_root")
        if not root:
            raise ConfigurationError("Missing local credentials: local_root")
        return cls(root=Path(root), endpoint=credentials.get("endpoint") or None)


class LocalContainer:
    """A directory under the storage root."""

    def __init__(self, name: str, settings: LocalBackendSettings) -> None:
        self._name = name
        self._settings = settings
        self._path = _safe_join(settings.root, name)

    @property
    def name(self) -> str:
        return self._name

    @property
    def path(self) -> Path:
        return self._path

    async def get(self, key: str) -> RemoteObject:
        path = _safe_join(self._path, key)
        try:
            async with aiofiles.open(path, "rb") as f:
                body = await f.read()
            stat = await aiofiles.os.stat(path)
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as e:
            raise NotFoundError(f"File not found: {key}", cause=e) from e
        except OSError as e:
            logger.error(f"Local read failed for {path}: {e}")
            raise BackendReadError(f"Failed to read file: {e}", cause=e) from e

        last_modified = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)
        logger.debug(f"Read {len(body)} bytes from {path}")
        return RemoteObject(
            key=key,
            body=body,
            content_type=infer_content_type(key),
            content_length=stat.st_size,
            last_modified=last_modified,
            attributes={
                "path": str(path),
                "content_length": stat.st_size,
                "last_modified": last_modified,
            },
        )

    async def create(self, request: WriteRequest) -> RemoteObject:
        path = _safe_join(self._path, request.key)
        try:
            await aiofiles.os.makedirs(path.parent, exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(request.body)
        except OSError as e:
            logger.error(f"Local write failed for {path}: {e}")
            raise BackendWriteError(f"Failed to write file: {e}", cause=e) from e

        logger.info(f"Stored file locally: {path} ({len(request.body)} bytes)")
        return RemoteObject(
            key=request.key,
            body=request.body,
            content_type=request.content_type,
            content_length=len(request.body),
            attributes={"path": str(path)},
        )

    def public_url(self, key: str) -> str | None:
        """URL under the configured endpoint, None without one."""
        if not self._settings.endpoint:
            return None
        return f"{self._settings.endpoint.rstrip('/')}/{quote(self._name)}/{quote(key, safe='/~')}"

    async def signed_url(self, key: str, *, expires_in: int) -> str:
        raise ConfigurationError("Local storage has no authenticated URLs")

    async def destroy(self, key: str) -> bool:
        path = _safe_join(self._path, key)
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error(f"Local delete failed for {path}: {e}")
            raise BackendWriteError(f"Failed to delete file: {e}", cause=e) from e

        logger.info(f"Deleted local file: {path}")
        return True


class LocalConnection:
    """Filesystem "client"; holds no open resources."""

    def __init__(self, settings: LocalBackendSettings) -> None:
        self._settings = settings

    def container(self, name: str) -> LocalContainer:
        return LocalContainer(name, self._settings)

    async def get_container(self, name: str) -> LocalContainer | None:
        container = self.container(name)
        if await aiofiles.os.path.isdir(container.path):
            return container
        return None

    async def create_container(self, name: str, *, public: bool) -> LocalContainer:
        container = self.container(name)
        try:
            await aiofiles.os.makedirs(container.path, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to create directory {container.path}: {e}")
            raise BackendWriteError(f"Failed to create directory: {e}", cause=e) from e

        logger.info(f"Created local directory {container.path}")
        return container

    async def close(self) -> None:
        pass


class LocalBackend:
    """Stores objects as files under ``local_root``."""

    def __init__(self, settings: LocalBackendSettings) -> None:
        self._settings = settings

    @property
    def provider(self) -> Provider:
        return Provider.LOCAL

    @property
    def supports_signed_urls(self) -> bool:
        return False

    @property
    def settings(self) -> LocalBackendSettings:
        return self._settings

    async def connect(self) -> LocalConnection:
        return LocalConnection(self._settings)
