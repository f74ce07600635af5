"""Handle for a single stored object."""

from __future__ import annotations

import logging
import warnings
from typing import TYPE_CHECKING, Any

from .schemas import RemoteObject, UploadSource, WriteRequest, infer_content_type

if TYPE_CHECKING:
    from .adapter import StorageAdapter

logger = logging.getLogger(__name__)


class StoredFile:
    """One object in the adapter's container.

    Created per operation by ``StorageAdapter.store`` and
    ``StorageAdapter.retrieve``. Remote metadata is fetched on first access
    and cached on the instance; ``store`` and ``delete`` drop the cache.

    A content type assigned through the ``content_type`` setter is
    authoritative: metadata fetches never overwrite it. A content type taken
    from the uploaded file during ``store`` is only a default and is replaced
    by the backend's value on the next fetch.
    """

    def __init__(self, adapter: StorageAdapter, path: str) -> None:
        self._adapter = adapter
        self._path = path
        self._content_type: str | None = None
        self._content_type_explicit = False
        self._remote: RemoteObject | None = None

    def __repr__(self) -> str:
        return f"StoredFile(path={self._path!r})"

    @property
    def path(self) -> str:
        """Key of the object within the container."""
        return self._path

    @property
    def content_type(self) -> str | None:
        return self._content_type

    @content_type.setter
    def content_type(self, value: str | None) -> None:
        self._content_type = value
        self._content_type_explicit = value is not None

    async def _file(self) -> RemoteObject:
        if self._remote is None:
            container = await self._adapter.directory()
            remote = await container.get(self._path)
            if not self._content_type_explicit and remote.content_type:
                self._content_type = remote.content_type
            self._remote = remote
        return self._remote

    async def attributes(self) -> dict[str, Any]:
        """All backend attributes of the object.

        Raises:
            NotFoundError: If the object doesn't exist.
        """
        return (await self._file()).attributes

    async def headers(self) -> dict[str, Any]:
        """Deprecated alias of ``attributes()``."""
        warnings.warn(
            "StoredFile.headers() is deprecated, use attributes() instead",
            DeprecationWarning,
            stacklevel=2,
        )
        return await self.attributes()

    async def read(self) -> bytes:
        """Full object body.

        Raises:
            NotFoundError: If the object doesn't exist.
        """
        return (await self._file()).body

    async def size(self) -> int:
        """Content length of the object in bytes."""
        return (await self._file()).content_length

    async def store(self, source: UploadSource) -> bool:
        """Write the source's content to this path.

        The body is read fully into memory before the write. Unless set
        through the setter, the content type is taken from this source (or
        guessed from its filename) on every store. Configured extra
        attributes are merged over the built-in write fields.

        Returns:
            True on success.

        Raises:
            BackendWriteError: If the backend rejects the write.
        """
        if not self._content_type_explicit:
            self._content_type = source.content_type or infer_content_type(
                source.filename or self._path
            )

        config = self._adapter.config
        request = WriteRequest.build(
            key=self._path,
            body=await source.read(),
            content_type=self._content_type,
            public=config.public,
            attributes=config.attributes,
        )
        container = await self._adapter.directory()
        await container.create(request)
        self._remote = None
        return True

    async def delete(self) -> bool:
        """Remove the object from the backend.

        Returns:
            True if the object was removed, False if it didn't exist.

        Raises:
            BackendWriteError: If deletion fails.
        """
        container = await self._adapter.directory()
        deleted = await container.destroy(self._path)
        self._remote = None
        return deleted

    async def url(self) -> str | None:
        """Public URL for public storage, authenticated URL otherwise."""
        if not self._adapter.default_public:
            return await self.authenticated_url()
        return await self.public_url()

    async def public_url(self) -> str | None:
        """URL of the object when publicly readable.

        Uses the custom host when configured, otherwise the provider's URL
        pattern. Never fetches the object.
        """
        host = self._adapter.custom_host
        if host:
            return f"{host}/{self._path}"
        connection = await self._adapter.connection()
        return connection.container(self._adapter.container_name).public_url(self._path)

    async def authenticated_url(self, *, expires_in: int | None = None) -> str | None:
        """Temporary signed URL, None when the backend can't sign URLs."""
        if not self._adapter.backend.supports_signed_urls:
            return None
        if expires_in is None:
            expires_in = self._adapter.config.signed_url_expires_in
        connection = await self._adapter.connection()
        container = connection.container(self._adapter.container_name)
        return await container.signed_url(self._path, expires_in=expires_in)
