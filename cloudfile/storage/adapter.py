"""Storage adapter facade."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from cloudfile.core.enums import Visibility

from .exceptions import StorageError, StorageValidationError
from .factory import create_backend
from .file import StoredFile
from .schemas import StorageConfig, UploadSource, sanitize_filename

if TYPE_CHECKING:
    from .base import StorageBackend, StorageConnection, StorageContainer

logger = logging.getLogger(__name__)


class StorageAdapter:
    """Stores and retrieves files through one configured backend.

    The backend client and the container handle are created on first use
    and then reused for the lifetime of the adapter. First access to each
    is serialized with a lock so concurrent tasks never build two of them.
    The container handle is never refreshed, so visibility changes made
    outside this process are not picked up.
    """

    def __init__(
        self,
        config: StorageConfig,
        *,
        backend: StorageBackend | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            config: Storage configuration.
            backend: Backend to use instead of one built from the credentials.
        """
        self._config = config
        self._backend = backend
        self._connection: StorageConnection | None = None
        self._directory: StorageContainer | None = None
        self._connection_lock = asyncio.Lock()
        self._directory_lock = asyncio.Lock()

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    @property
    def config(self) -> StorageConfig:
        return self._config

    @property
    def container_name(self) -> str:
        return self._config.directory

    @property
    def credentials(self) -> dict[str, Any]:
        return self._config.credentials

    @property
    def custom_host(self) -> str | None:
        return self._config.host

    @property
    def default_public(self) -> bool:
        return self._config.public

    @property
    def visibility(self) -> Visibility:
        return Visibility.from_flag(self._config.public)

    @property
    def extra_attributes(self) -> dict[str, Any]:
        return self._config.attributes

    @property
    def backend(self) -> StorageBackend:
        """Backend for the configured provider.

        Raises:
            ConfigurationError: If the credentials are unusable.
        """
        if self._backend is None:
            self._backend = create_backend(
                self._config.credentials,
                timeout=self._config.timeout,
            )
        return self._backend

    # -------------------------------------------------------------------------
    # Memoized handles
    # -------------------------------------------------------------------------

    async def connection(self) -> StorageConnection:
        """Backend connection, opened on first call.

        A failed attempt is not cached; the next call tries again.

        Raises:
            ConfigurationError: If the client can't be built.
        """
        if self._connection is not None:
            return self._connection
        async with self._connection_lock:
            if self._connection is None:
                self._connection = await self.backend.connect()
                logger.debug(f"Opened {self.backend.provider.value} connection")
        return self._connection

    async def directory(self) -> StorageContainer:
        """Container named by the config, created if it doesn't exist.

        Raises:
            BackendWriteError: If the container has to be created and creation fails.
        """
        if self._directory is not None:
            return self._directory
        async with self._directory_lock:
            if self._directory is None:
                connection = await self.connection()
                name = self._config.directory
                container = await connection.get_container(name)
                if container is None:
                    logger.info(f"Container {name} not found, creating it ({self.visibility.value})")
                    container = await connection.create_container(
                        name,
                        public=self._config.public,
                    )
                self._directory = container
        return self._directory

    # -------------------------------------------------------------------------
    # Files
    # -------------------------------------------------------------------------

    def store_path(self, identifier: str) -> str:
        """Key under which a file with this identifier is stored."""
        identifier = identifier.lstrip("/")
        if not identifier:
            raise StorageValidationError("Identifier must not be empty")
        store_dir = (self._config.store_dir or "").strip("/")
        if store_dir:
            return f"{store_dir}/{identifier}"
        return identifier

    async def store(
        self,
        source: UploadSource,
        identifier: str | None = None,
    ) -> StoredFile:
        """Store an uploaded file.

        Args:
            source: Incoming file.
            identifier: Name to store under; defaults to the sanitized
                source filename.

        Returns:
            Handle for the stored object.

        Raises:
            StorageValidationError: If no identifier can be derived.
            BackendWriteError: If the write fails.
        """
        if identifier is None:
            identifier = sanitize_filename(source.filename)
            if identifier is None:
                raise StorageValidationError("Cannot derive an identifier from the upload")

        stored = StoredFile(self, self.store_path(identifier))
        await stored.store(source)
        return stored

    def retrieve(self, identifier: str) -> StoredFile:
        """Handle for a previously stored file. Performs no I/O."""
        return StoredFile(self, self.store_path(identifier))

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def health_check(self) -> bool:
        """Check if the backend and container are reachable."""
        try:
            await self.directory()
            return True
        except StorageError as e:
            logger.warning(f"Storage health check failed: {e}")
            return False

    async def close(self) -> None:
        """Close the backend connection and forget memoized handles.

        Waits for an in-flight directory resolution so it can't memoize a
        container bound to the closed connection.
        """
        async with self._directory_lock, self._connection_lock:
            connection, self._connection = self._connection, None
            self._directory = None
            if connection is not None:
                await connection.close()
                logger.info("Storage connection closed")
