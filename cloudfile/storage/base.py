"""Storage backend protocol definitions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from cloudfile.core.enums import Provider

    from .schemas import RemoteObject, WriteRequest


@runtime_checkable
class StorageContainer(Protocol):
    """A bucket or directory holding objects.

    Public URLs are computed locally; every other operation talks to the
    backend.
    """

    @property
    def name(self) -> str: ...

    async def get(self, key: str) -> RemoteObject:
        """Fetch an object with its body and metadata.

        Raises:
            NotFoundError: If the key doesn't exist.
            BackendReadError: If the fetch fails.
        """
        ...

    async def create(self, request: WriteRequest) -> RemoteObject:
        """Write an object, replacing any existing one at the same key.

        Raises:
            BackendWriteError: If the write fails.
        """
        ...

    def public_url(self, key: str) -> str | None:
        """Provider URL for a public object, or None if there is no pattern.

        Must not perform any remote call.
        """
        ...

    async def signed_url(self, key: str, *, expires_in: int) -> str:
        """Time-limited authenticated URL for a private object."""
        ...

    async def destroy(self, key: str) -> bool:
        """Delete an object.

        Returns:
            True if an object was removed, False if it didn't exist.

        Raises:
            BackendWriteError: If deletion fails.
        """
        ...


@runtime_checkable
class StorageConnection(Protocol):
    """An authenticated client for one set of credentials."""

    def container(self, name: str) -> StorageContainer:
        """Local reference to a container, without checking it exists."""
        ...

    async def get_container(self, name: str) -> StorageContainer | None:
        """Look up an existing container, None if absent."""
        ...

    async def create_container(self, name: str, *, public: bool) -> StorageContainer:
        """Create a container.

        Raises:
            BackendWriteError: If creation fails.
        """
        ...

    async def close(self) -> None:
        """Release client resources."""
        ...


@runtime_checkable
class StorageBackend(Protocol):
    """Factory for connections to one provider."""

    @property
    def provider(self) -> Provider: ...

    @property
    def supports_signed_urls(self) -> bool:
        """Whether containers can produce authenticated URLs."""
        ...

    async def connect(self) -> StorageConnection:
        """Open a connection.

        Raises:
            ConfigurationError: If the client can't be built from the credentials.
        """
        ...
