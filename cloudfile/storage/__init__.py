"""Storage module.

Provides a configuration-driven storage adapter over S3-compatible and
local filesystem backends.
"""

from .adapter import StorageAdapter
from .base import StorageBackend, StorageConnection, StorageContainer
from .exceptions import (
    BackendReadError,
    BackendWriteError,
    ConfigurationError,
    NotFoundError,
    StorageError,
    StorageValidationError,
)
from .factory import create_backend
from .file import StoredFile
from .local import LocalBackend, LocalBackendSettings
from .s3 import S3Backend, S3BackendSettings
from .schemas import (
    InMemoryUpload,
    RemoteObject,
    StorageConfig,
    UploadSource,
    WriteRequest,
    infer_content_type,
    sanitize_filename,
)

__all__ = [
    # Facade
    "StorageAdapter",
    "StoredFile",
    "create_backend",
    # Protocols
    "StorageBackend",
    "StorageConnection",
    "StorageContainer",
    "UploadSource",
    # Implementations
    "LocalBackend",
    "LocalBackendSettings",
    "S3Backend",
    "S3BackendSettings",
    # Schemas
    "InMemoryUpload",
    "RemoteObject",
    "StorageConfig",
    "WriteRequest",
    "infer_content_type",
    "sanitize_filename",
    # Exceptions
    "BackendReadError",
    "BackendWriteError",
    "ConfigurationError",
    "NotFoundError",
    "StorageError",
    "StorageValidationError",
]
