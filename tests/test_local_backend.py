"""Tests for the local filesystem backend."""

from __future__ import annotations

from pathlib import Path

import pytest

from cloudfile.storage import (
    ConfigurationError,
    InMemoryUpload,
    LocalBackend,
    LocalBackendSettings,
    NotFoundError,
    StorageAdapter,
    StorageConfig,
    StorageValidationError,
    WriteRequest,
    create_backend,
)


@pytest.fixture
def local_adapter(local_config: StorageConfig) -> StorageAdapter:
    """Adapter over the local backend."""
    return StorageAdapter(local_config)


class TestLocalSettings:
    """Tests for local credential parsing."""

    def test_from_credentials(self, tmp_path: Path) -> None:
        """Test root and endpoint are read."""
        settings = LocalBackendSettings.from_credentials(
            {"provider": "Local", "local_root": str(tmp_path), "endpoint": "http://x"}
        )

        assert settings.root == tmp_path
        assert settings.endpoint == "http://x"

    def test_missing_root(self) -> None:
        """Test local_root is required."""
        with pytest.raises(ConfigurationError, match="local_root"):
            create_backend({"provider": "Local"})

    def test_no_signed_urls(self, tmp_path: Path) -> None:
        """Test the local backend reports no signing capability."""
        backend = create_backend({"provider": "local", "local_root": str(tmp_path)})

        assert isinstance(backend, LocalBackend)
        assert backend.supports_signed_urls is False


class TestLocalStorage:
    """Tests for storing files on disk through the adapter."""

    @pytest.mark.asyncio
    async def test_round_trip(
        self,
        local_adapter: StorageAdapter,
        tmp_path: Path,
    ) -> None:
        """Test a stored file lands on disk and reads back."""
        stored = await local_adapter.store(
            InMemoryUpload(data=b"col1,col2\n", content_type="text/csv"),
            "reports/q1.csv",
        )

        on_disk = tmp_path / "storage" / "assets" / "uploads" / "reports" / "q1.csv"
        assert on_disk.read_bytes() == b"col1,col2\n"

        retrieved = local_adapter.retrieve("reports/q1.csv")
        assert await retrieved.read() == b"col1,col2\n"
        assert await retrieved.size() == 10
        assert retrieved.content_type == "text/csv"

    @pytest.mark.asyncio
    async def test_container_directory_created(
        self,
        local_adapter: StorageAdapter,
        tmp_path: Path,
    ) -> None:
        """Test the container directory is created on first use."""
        container = await local_adapter.directory()

        assert container.name == "assets"
        assert (tmp_path / "storage" / "assets").is_dir()

    @pytest.mark.asyncio
    async def test_attributes(self, local_adapter: StorageAdapter, tmp_path: Path) -> None:
        """Test attributes describe the file on disk."""
        stored = await local_adapter.store(InMemoryUpload(data=b"abc"), "a.bin")

        attributes = await stored.attributes()

        assert attributes["content_length"] == 3
        assert attributes["path"] == str(tmp_path.resolve() / "storage" / "assets" / "uploads" / "a.bin")
        assert attributes["last_modified"] is not None

    @pytest.mark.asyncio
    async def test_public_url_with_endpoint(self, local_adapter: StorageAdapter) -> None:
        """Test public URL is built from the endpoint."""
        url = await local_adapter.retrieve("images/a b.png").url()

        assert url == "http://files.localhost/assets/uploads/images/a%20b.png"

    @pytest.mark.asyncio
    async def test_public_url_without_endpoint(self, tmp_path: Path) -> None:
        """Test there is no public URL without an endpoint."""
        adapter = StorageAdapter(
            StorageConfig(
                credentials={"provider": "Local", "local_root": str(tmp_path)},
                directory="assets",
            )
        )

        assert await adapter.retrieve("a.png").url() is None

    @pytest.mark.asyncio
    async def test_private_url_unavailable(self, tmp_path: Path) -> None:
        """Test private local storage yields no URL."""
        adapter = StorageAdapter(
            StorageConfig(
                credentials={"provider": "Local", "local_root": str(tmp_path)},
                directory="assets",
                public=False,
            )
        )

        assert await adapter.retrieve("a.png").url() is None

    @pytest.mark.asyncio
    async def test_delete(self, local_adapter: StorageAdapter, tmp_path: Path) -> None:
        """Test delete removes the file and later reads fail."""
        stored = await local_adapter.store(InMemoryUpload(data=b"abc"), "a.txt")

        assert await stored.delete() is True
        assert not (tmp_path / "storage" / "assets" / "uploads" / "a.txt").exists()
        with pytest.raises(NotFoundError):
            await stored.read()
        assert await stored.delete() is False

    @pytest.mark.asyncio
    async def test_read_missing(self, local_adapter: StorageAdapter) -> None:
        """Test reading an unknown key raises NotFoundError."""
        with pytest.raises(NotFoundError):
            await local_adapter.retrieve("nope.txt").read()


class TestLocalKeys:
    """Tests for key validation."""

    @pytest.mark.asyncio
    async def test_key_escaping_container_rejected(self, tmp_path: Path) -> None:
        """Test keys can't point outside the container."""
        backend = LocalBackend(LocalBackendSettings(root=tmp_path))
        connection = await backend.connect()
        container = await connection.create_container("assets", public=True)

        with pytest.raises(StorageValidationError):
            await container.create(
                WriteRequest(
                    key="../../escape.txt",
                    body=b"x",
                    content_type="text/plain",
                    public=True,
                )
            )
        assert not (tmp_path.parent / "escape.txt").exists()

    @pytest.mark.asyncio
    async def test_missing_container(self, tmp_path: Path) -> None:
        """Test lookup of a container that doesn't exist."""
        backend = LocalBackend(LocalBackendSettings(root=tmp_path))
        connection = await backend.connect()

        assert await connection.get_container("absent") is None

    @pytest.mark.asyncio
    async def test_relative_root(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test a root given relative to the working directory."""
        monkeypatch.chdir(tmp_path)
        adapter = StorageAdapter(
            StorageConfig(
                credentials={"provider": "Local", "local_root": "."},
                directory="assets",
                store_dir=None,
            )
        )

        stored = await adapter.store(InMemoryUpload(data=b"abc", content_type="text/plain"), "a.txt")

        assert (tmp_path / "assets" / "a.txt").read_bytes() == b"abc"
        assert await adapter.retrieve(stored.path).read() == b"abc"

    @pytest.mark.asyncio
    async def test_container_name_escaping_root_rejected(self, tmp_path: Path) -> None:
        """Test container names can't point outside the root."""
        backend = LocalBackend(LocalBackendSettings(root=tmp_path / "root"))
        connection = await backend.connect()

        with pytest.raises(StorageValidationError):
            connection.container("../outside")

    @pytest.mark.asyncio
    async def test_signed_url_raises_storage_error(self, tmp_path: Path) -> None:
        """Test signing through the container reports a configuration error."""
        backend = LocalBackend(LocalBackendSettings(root=tmp_path))
        connection = await backend.connect()
        container = await connection.create_container("assets", public=False)

        with pytest.raises(ConfigurationError, match="no authenticated URLs"):
            await container.signed_url("a.txt", expires_in=60)
