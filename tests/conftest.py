"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest
from fakes import FakeBackend

from cloudfile.core.config import Settings
from cloudfile.storage import StorageAdapter, StorageConfig


@pytest.fixture
def fake_backend() -> FakeBackend:
    """Provide an empty fake backend."""
    return FakeBackend()


@pytest.fixture
def storage_config() -> StorageConfig:
    """Public config without custom host or key prefix."""
    return StorageConfig(
        credentials={"provider": "AWS", "aws_access_key_id": "key", "aws_secret_access_key": "secret"},
        directory="assets",
        public=True,
        store_dir=None,
    )


@pytest.fixture
def adapter(storage_config: StorageConfig, fake_backend: FakeBackend) -> StorageAdapter:
    """Provide an adapter over the fake backend."""
    return StorageAdapter(storage_config, backend=fake_backend)


@pytest.fixture
def local_config(tmp_path: Path) -> StorageConfig:
    """Config for the local filesystem backend rooted in a temp directory."""
    return StorageConfig(
        credentials={
            "provider": "Local",
            "local_root": str(tmp_path / "storage"),
            "endpoint": "http://files.localhost",
        },
        directory="assets",
        store_dir="uploads",
    )


@pytest.fixture
def settings() -> Settings:
    """Provide test settings."""
    return Settings(
        storage_credentials={"provider": "Local", "local_root": "/tmp/cloudfile"},
        storage_directory="assets",
        max_upload_size_mb=1,
        debug=True,
    )
