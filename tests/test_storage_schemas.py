"""Tests for storage schemas and helpers."""

import pytest

from cloudfile.core.enums import Provider, Visibility
from cloudfile.storage import (
    InMemoryUpload,
    StorageConfig,
    UploadSource,
    WriteRequest,
    infer_content_type,
    sanitize_filename,
)


class TestSanitizeFilename:
    """Tests for filename sanitizing."""

    @pytest.mark.parametrize(
        ("filename", "expected"),
        [
            ("photo.png", "photo.png"),
            ("my photo.png", "my_photo.png"),
            ("C:\\Users\\me\\report 2024.pdf", "report_2024.pdf"),
            ("../../etc/passwd", "passwd"),
            ("résumé.txt", "r_sum_.txt"),
            ("a+b-c_d.tar.gz", "a+b-c_d.tar.gz"),
            ("..", "_.."),
        ],
    )
    def test_sanitize(self, filename: str, expected: str) -> None:
        """Test unsafe characters and directories are removed."""
        assert sanitize_filename(filename) == expected

    def test_empty(self) -> None:
        """Test nothing usable gives None."""
        assert sanitize_filename(None) is None
        assert sanitize_filename("") is None
        assert sanitize_filename("uploads/") is None


class TestInferContentType:
    """Tests for content type inference."""

    def test_known_extensions(self) -> None:
        """Test common extensions are recognized."""
        assert infer_content_type("a.png") == "image/png"
        assert infer_content_type("dir/b.JPG") == "image/jpeg"
        assert infer_content_type("c.json") == "application/json"

    def test_fallback(self) -> None:
        """Test unknown or missing names fall back to octet-stream."""
        assert infer_content_type("noext") == "application/octet-stream"
        assert infer_content_type(None) == "application/octet-stream"


class TestWriteRequest:
    """Tests for write request building."""

    def test_build_without_attributes(self) -> None:
        """Test the four built-in fields."""
        request = WriteRequest.build(
            key="a.png", body=b"x", content_type="image/png", public=True
        )

        assert request.key == "a.png"
        assert request.body == b"x"
        assert request.content_type == "image/png"
        assert request.public is True
        assert request.attributes == {}

    def test_attributes_win(self) -> None:
        """Test extra attributes override built-in fields."""
        request = WriteRequest.build(
            key="a.png",
            body=b"x",
            content_type="image/png",
            public=True,
            attributes={"content_type": "image/webp", "public": False, "acl": "x"},
        )

        assert request.content_type == "image/webp"
        assert request.public is False
        assert request.attributes == {"acl": "x"}


class TestStorageConfig:
    """Tests for the storage config struct."""

    def test_defaults(self) -> None:
        """Test default values."""
        config = StorageConfig(credentials={"provider": "AWS"}, directory="assets")

        assert config.host is None
        assert config.public is True
        assert config.attributes == {}
        assert config.store_dir == "uploads"
        assert config.signed_url_expires_in == 600
        assert config.timeout is None
        assert config.provider == "AWS"

    def test_frozen(self) -> None:
        """Test config can't be mutated."""
        config = StorageConfig(credentials={}, directory="assets")

        with pytest.raises(AttributeError):
            config.directory = "other"  # type: ignore[misc]


class TestUploadSource:
    """Tests for in-memory uploads."""

    @pytest.mark.asyncio
    async def test_in_memory_upload(self) -> None:
        """Test in-memory uploads satisfy the upload protocol."""
        upload = InMemoryUpload(data=b"abc", filename="a.txt", content_type="text/plain")

        assert isinstance(upload, UploadSource)
        assert await upload.read() == b"abc"


class TestEnums:
    """Tests for provider and visibility enums."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("AWS", Provider.AWS),
            ("aws", Provider.AWS),
            ("Google", Provider.GOOGLE),
            ("R2", Provider.R2),
            (" Local ", Provider.LOCAL),
        ],
    )
    def test_provider_from_credentials(self, raw: str, expected: Provider) -> None:
        """Test provider names are case insensitive."""
        assert Provider.from_credentials({"provider": raw}) == expected

    def test_unknown_provider(self) -> None:
        """Test unknown provider raises ValueError."""
        with pytest.raises(ValueError, match="Unsupported storage provider"):
            Provider.from_credentials({"provider": "Rackspace"})

    def test_s3_compatible(self) -> None:
        """Test which providers use the S3 API."""
        assert Provider.AWS.is_s3_compatible
        assert Provider.R2.is_s3_compatible
        assert not Provider.LOCAL.is_s3_compatible

    def test_visibility(self) -> None:
        """Test visibility from the public flag."""
        assert Visibility.from_flag(True) == Visibility.PUBLIC
        assert Visibility.from_flag(False) == Visibility.PRIVATE
