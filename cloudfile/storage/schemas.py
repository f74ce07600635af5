"""Storage DTOs using msgspec."""

from __future__ import annotations

import mimetypes
import re
from datetime import datetime
from typing import Any, Protocol, runtime_checkable

import msgspec

DEFAULT_CONTENT_TYPE = "application/octet-stream"
DEFAULT_SIGNED_URL_EXPIRES_IN = 600

# Anything outside this set is replaced in identifiers derived from filenames
_SANITIZE_PATTERN = re.compile(r"[^a-zA-Z0-9.\-+_]")


def infer_content_type(filename: str | None) -> str:
    """Guess a MIME type from a filename, falling back to octet-stream."""
    if not filename:
        return DEFAULT_CONTENT_TYPE
    guessed, _ = mimetypes.guess_type(filename, strict=False)
    return guessed or DEFAULT_CONTENT_TYPE


def sanitize_filename(filename: str | None) -> str | None:
    """Reduce an uploaded filename to a safe single path segment.

    Directory components are dropped and unsafe characters are replaced
    with underscores. Names made only of dots get an underscore prefix.

    Returns:
        The sanitized name, or None when nothing usable is left.
    """
    if not filename:
        return None
    name = filename.replace("\\", "/").rsplit("/", 1)[-1]
    name = _SANITIZE_PATTERN.sub("_", name)
    if not name:
        return None
    if set(name) == {"."}:
        name = f"_{name}"
    return name


class StorageConfig(msgspec.Struct, kw_only=True, frozen=True):
    """Configuration for one storage adapter."""

    credentials: dict[str, Any]  # Provider-specific, includes "provider"
    directory: str  # Container (bucket / directory) name
    host: str | None = None  # Custom host for public URLs
    public: bool = True
    attributes: dict[str, Any] = msgspec.field(default_factory=dict)
    store_dir: str | None = "uploads"
    signed_url_expires_in: int = DEFAULT_SIGNED_URL_EXPIRES_IN
    timeout: float | None = None  # Passed through to the backend transport

    @property
    def provider(self) -> str | None:
        """Raw provider name from the credentials."""
        value = self.credentials.get("provider")
        return str(value) if value is not None else None


class WriteRequest(msgspec.Struct, kw_only=True):
    """A single object write submitted to a container."""

    key: str
    body: bytes
    content_type: str
    public: bool
    attributes: dict[str, Any] = msgspec.field(default_factory=dict)

    @classmethod
    def build(
        cls,
        *,
        key: str,
        body: bytes,
        content_type: str,
        public: bool,
        attributes: dict[str, Any] | None = None,
    ) -> WriteRequest:
        """Build a request with extra attributes merged over the defaults.

        Extra attributes win on collision, so ``{"public": False}`` in the
        configured attributes makes every write private.
        """
        fields: dict[str, Any] = {
            "key": key,
            "body": body,
            "content_type": content_type,
            "public": public,
        }
        fields.update(attributes or {})
        return cls(
            key=fields.pop("key"),
            body=fields.pop("body"),
            content_type=fields.pop("content_type"),
            public=bool(fields.pop("public")),
            attributes=fields,
        )


class RemoteObject(msgspec.Struct, kw_only=True):
    """Object as held by a backend."""

    key: str
    body: bytes
    content_type: str | None = None
    content_length: int = 0
    etag: str | None = None
    last_modified: datetime | None = None
    attributes: dict[str, Any] = msgspec.field(default_factory=dict)


@runtime_checkable
class UploadSource(Protocol):
    """Incoming file handed to the adapter by upload handling code.

    Litestar's ``UploadFile`` satisfies this protocol.
    """

    filename: str | None
    content_type: str | None

    async def read(self) -> bytes: ...


class InMemoryUpload(msgspec.Struct, kw_only=True):
    """Upload source backed by bytes already in memory."""

    data: bytes
    filename: str | None = None
    content_type: str | None = None

    async def read(self) -> bytes:
        return self.data
