"""Storage exceptions."""

from __future__ import annotations


class StorageError(Exception):
    """Base exception for storage operations."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class ConfigurationError(StorageError):
    """Raised when credentials are malformed or the provider is unsupported."""


class BackendWriteError(StorageError):
    """Raised when a create or destroy call on the backend fails."""


class BackendReadError(StorageError):
    """Raised when fetching an object fails for a reason other than absence."""


class NotFoundError(StorageError):
    """Raised when the requested object doesn't exist."""


class StorageValidationError(StorageError):
    """Raised when an identifier or key can't be used for storage."""
