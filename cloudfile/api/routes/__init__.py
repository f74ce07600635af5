"""API routes module."""

from .health import HealthController
from .storage import StorageController

__all__ = [
    "HealthController",
    "StorageController",
]
