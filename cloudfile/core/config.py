"""Application configuration using pydantic-settings."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

from cloudfile.storage.schemas import StorageConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # API settings
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=8000, description="API server port")
    debug: bool = Field(default=False, description="Enable debug mode")

    # Storage backend settings
    storage_credentials: dict[str, Any] = Field(
        default_factory=dict,
        description="Provider credentials as a JSON object (must include 'provider')",
    )
    storage_directory: str = Field(
        default="cloudfile-uploads",
        description="Container (bucket or directory) name",
    )
    storage_host: str | None = Field(
        default=None,
        description="Custom host to serve public files from (e.g. a CDN)",
    )
    storage_public: bool = Field(
        default=True,
        description="Store files publicly readable",
    )
    storage_attributes: dict[str, Any] = Field(
        default_factory=dict,
        description="Extra attributes merged into every write (e.g. cache headers)",
    )
    storage_dir: str | None = Field(
        default="uploads",
        description="Key prefix for stored files",
    )
    storage_signed_url_expires_in: int = Field(
        default=600,
        ge=1,
        le=604800,
        description="Authenticated URL lifetime in seconds",
    )
    storage_timeout: float | None = Field(
        default=None,
        gt=0,
        description="Backend connect/read timeout in seconds",
    )

    # Upload limits
    max_upload_size_mb: int = Field(
        default=20,
        ge=1,
        le=5120,
        description="Maximum upload file size in MB",
    )

    @computed_field
    @property
    def max_upload_size_bytes(self) -> int:
        """Maximum upload size in bytes."""
        return self.max_upload_size_mb * 1024 * 1024

    @property
    def storage_configured(self) -> bool:
        """Check if a storage provider is configured."""
        return bool(self.storage_credentials.get("provider"))

    def storage_config(self) -> StorageConfig:
        """Build the storage adapter configuration."""
        return StorageConfig(
            credentials=dict(self.storage_credentials),
            directory=self.storage_directory,
            host=self.storage_host,
            public=self.storage_public,
            attributes=dict(self.storage_attributes),
            store_dir=self.storage_dir,
            signed_url_expires_in=self.storage_signed_url_expires_in,
            timeout=self.storage_timeout,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def reset_settings() -> None:
    """Reset cached settings (useful for testing)."""
    get_settings.cache_clear()
