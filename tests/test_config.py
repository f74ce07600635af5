"""Tests for application settings."""

from __future__ import annotations

import pytest

from cloudfile.core.config import Settings, get_settings, reset_settings


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> None:
    reset_settings()


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self) -> None:
        """Test defaults leave storage unconfigured."""
        settings = Settings()

        assert settings.storage_configured is False
        assert settings.storage_public is True
        assert settings.storage_dir == "uploads"
        assert settings.max_upload_size_bytes == 20 * 1024 * 1024

    def test_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test JSON credential and attribute maps are read from the environment."""
        monkeypatch.setenv(
            "STORAGE_CREDENTIALS",
            '{"provider": "AWS", "aws_access_key_id": "key", "aws_secret_access_key": "secret"}',
        )
        monkeypatch.setenv("STORAGE_DIRECTORY", "assets")
        monkeypatch.setenv("STORAGE_PUBLIC", "false")
        monkeypatch.setenv("STORAGE_HOST", "https://cdn.example.com")
        monkeypatch.setenv("STORAGE_ATTRIBUTES", '{"cache_control": "max-age=315576000"}')

        settings = Settings()

        assert settings.storage_configured is True
        assert settings.storage_credentials["provider"] == "AWS"
        assert settings.storage_public is False
        assert settings.storage_attributes == {"cache_control": "max-age=315576000"}

    def test_storage_config(self) -> None:
        """Test the adapter config mirrors the settings."""
        settings = Settings(
            storage_credentials={"provider": "Local", "local_root": "/srv/files"},
            storage_directory="assets",
            storage_host="https://cdn.example.com",
            storage_public=False,
            storage_attributes={"cache_control": "no-cache"},
            storage_dir=None,
            storage_signed_url_expires_in=120,
            storage_timeout=2.5,
        )

        config = settings.storage_config()

        assert config.credentials == {"provider": "Local", "local_root": "/srv/files"}
        assert config.directory == "assets"
        assert config.host == "https://cdn.example.com"
        assert config.public is False
        assert config.attributes == {"cache_control": "no-cache"}
        assert config.store_dir is None
        assert config.signed_url_expires_in == 120
        assert config.timeout == 2.5

    def test_get_settings_cached(self) -> None:
        """Test settings are cached until reset."""
        first = get_settings()

        assert get_settings() is first
        reset_settings()
        assert get_settings() is not first
