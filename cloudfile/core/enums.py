from enum import Enum


class Provider(str, Enum):
    """Supported storage providers."""

    AWS = "aws"
    GOOGLE = "google"
    R2 = "r2"
    LOCAL = "local"

    @classmethod
    def from_credentials(cls, credentials: dict) -> "Provider":
        """Get provider from the ``provider`` credential (case insensitive)."""
        raw = credentials.get("provider")
        if not raw:
            raise ValueError("Credentials are missing the 'provider' key")
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            raise ValueError(f"Unsupported storage provider: {raw}") from None

    @property
    def is_s3_compatible(self) -> bool:
        """Whether the provider speaks the S3 API."""
        return self in (Provider.AWS, Provider.GOOGLE, Provider.R2)


class Visibility(str, Enum):
    """Default visibility of stored objects."""

    PUBLIC = "public"
    PRIVATE = "private"

    @classmethod
    def from_flag(cls, public: bool) -> "Visibility":
        return cls.PUBLIC if public else cls.PRIVATE
