"""S3-compatible storage backend (AWS S3, Google Cloud Storage interop, Cloudflare R2)."""

from __future__ import annotations

import logging
import re
from contextlib import AsyncExitStack
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import aioboto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from cloudfile.core.enums import Provider

from .exceptions import BackendReadError, BackendWriteError, ConfigurationError, NotFoundError
from .schemas import RemoteObject, WriteRequest

if TYPE_CHECKING:
    from types_aiobotocore_s3 import S3Client

logger = logging.getLogger(__name__)

# Constants
AWS_DEFAULT_REGION = "us-east-1"
GOOGLE_ENDPOINT_URL = "https://storage.googleapis.com"
NOT_FOUND_CODES = ("NoSuchKey", "NoSuchBucket", "NotFound", "404")
METADATA_PREFIX = "x-amz-meta-"

# Buckets that can be addressed as a subdomain over https (no dots)
_DNS_BUCKET_PATTERN = re.compile(r"^[a-z0-9][a-z0-9-]{1,61}[a-z0-9]$")


def _error_message(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Message") or str(error)


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


def _param_name(name: str) -> str:
    """Convert ``cache_control`` / ``Cache-Control`` to ``CacheControl``."""
    parts = re.split(r"[-_]", name)
    return "".join(part[:1].upper() + part[1:] for part in parts if part)


def put_object_params(attributes: dict[str, Any]) -> dict[str, Any]:
    """Map extra write attributes onto ``put_object`` keyword arguments."""
    params: dict[str, Any] = {}
    metadata: dict[str, str] = {}
    for name, value in attributes.items():
        if name.lower().startswith(METADATA_PREFIX):
            metadata[name[len(METADATA_PREFIX) :]] = str(value)
        elif name.lower() == "metadata":
            metadata.update({str(k): str(v) for k, v in dict(value).items()})
        else:
            params[_param_name(name)] = value
    if metadata:
        params["Metadata"] = metadata
    return params


class S3BackendSettings:
    """Connection settings for an S3-compatible provider."""

    def __init__(
        self,
        *,
        provider: Provider,
        access_key_id: str,
        secret_access_key: str,
        region: str = AWS_DEFAULT_REGION,
        endpoint_url: str | None = None,
        path_style: bool = False,
        public_url_base: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.provider = provider
        self.access_key_id = access_key_id
        self.secret_access_key = secret_access_key
        self.region = region
        self.endpoint_url = endpoint_url
        self.path_style = path_style
        self.public_url_base = public_url_base
        self.timeout = timeout

    @classmethod
    def from_credentials(
        cls,
        credentials: dict[str, Any],
        *,
        timeout: float | None = None,
    ) -> S3BackendSettings:
        """Build settings from a provider credential map.

        Raises:
            ConfigurationError: If the provider isn't S3-compatible or keys are missing.
        """
        try:
            provider = Provider.from_credentials(credentials)
        except ValueError as e:
            raise ConfigurationError(str(e), cause=e) from e

        if provider == Provider.AWS:
            _require(credentials, provider, "aws_access_key_id", "aws_secret_access_key")
            return cls(
                provider=provider,
                access_key_id=credentials["aws_access_key_id"],
                secret_access_key=credentials["aws_secret_access_key"],
                region=credentials.get("region") or AWS_DEFAULT_REGION,
                endpoint_url=credentials.get("endpoint") or None,
                path_style=bool(credentials.get("path_style", False)),
                timeout=timeout,
            )
        if provider == Provider.GOOGLE:
            _require(
                credentials,
                provider,
                "google_storage_access_key_id",
                "google_storage_secret_access_key",
            )
            return cls(
                provider=provider,
                access_key_id=credentials["google_storage_access_key_id"],
                secret_access_key=credentials["google_storage_secret_access_key"],
                region=credentials.get("region") or "auto",
                endpoint_url=GOOGLE_ENDPOINT_URL,
                path_style=True,
                timeout=timeout,
            )
        if provider == Provider.R2:
            _require(
                credentials,
                provider,
                "r2_account_id",
                "r2_access_key_id",
                "r2_secret_access_key",
            )
            return cls(
                provider=provider,
                access_key_id=credentials["r2_access_key_id"],
                secret_access_key=credentials["r2_secret_access_key"],
                region="auto",
                endpoint_url=f"https://{credentials['r2_account_id']}.r2.cloudflarestorage.com",
                public_url_base=credentials.get("r2_public_url_base") or None,
                timeout=timeout,
            )
        raise ConfigurationError(f"Provider '{provider.value}' is not S3-compatible")

    @property
    def supports_acl(self) -> bool:
        """R2 has no object ACLs."""
        return self.provider != Provider.R2

    def client_config(self) -> Config:
        """Botocore client configuration."""
        options: dict[str, Any] = {
            "signature_version": "s3v4",
        }
        if self.path_style:
            options["s3"] = {"addressing_style": "path"}
        if self.timeout is not None:
            options["connect_timeout"] = self.timeout
            options["read_timeout"] = self.timeout
        return Config(**options)


def _require(credentials: dict[str, Any], provider: Provider, *keys: str) -> None:
    missing = [key for key in keys if not credentials.get(key)]
    if missing:
        raise ConfigurationError(
            f"Missing {provider.value} credentials: {', '.join(missing)}"
        )


def _aws_host(region: str) -> str:
    if region == AWS_DEFAULT_REGION:
        return "s3.amazonaws.com"
    return f"s3.{region}.amazonaws.com"


class S3Container:
    """A bucket reached through an open S3 client."""

    def __init__(self, name: str, client: S3Client, settings: S3BackendSettings) -> None:
        self._name = name
        self._client = client
        self._settings = settings

    @property
    def name(self) -> str:
        return self._name

    async def get(self, key: str) -> RemoteObject:
        """Fetch object body and metadata."""
        try:
            response = await self._client.get_object(Bucket=self._name, Key=key)
            body = await response["Body"].read()
        except ClientError as e:
            if _error_code(e) in NOT_FOUND_CODES:
                raise NotFoundError(f"File not found: {key}", cause=e) from e
            logger.error(f"S3 fetch failed for {self._name}/{key}: {e}")
            raise BackendReadError(
                f"Failed to fetch file: {_error_message(e)}",
                cause=e,
            ) from e
        except BotoCoreError as e:
            logger.error(f"S3 fetch failed for {self._name}/{key}: {e}")
            raise BackendReadError(f"Fetch failed: {e}", cause=e) from e

        logger.debug(f"Fetched {len(body)} bytes from {self._name}/{key}")
        etag = response.get("ETag")
        return RemoteObject(
            key=key,
            body=body,
            content_type=response.get("ContentType"),
            content_length=response.get("ContentLength", len(body)),
            etag=etag.strip('"') if etag else None,
            last_modified=response.get("LastModified"),
            attributes={
                name: value
                for name, value in response.items()
                if name not in ("Body", "ResponseMetadata")
            },
        )

    async def create(self, request: WriteRequest) -> RemoteObject:
        """Write an object with put_object."""
        params: dict[str, Any] = {
            "Bucket": self._name,
            "Key": request.key,
            "Body": request.body,
            "ContentType": request.content_type,
        }
        if self._settings.supports_acl:
            params["ACL"] = "public-read" if request.public else "private"
        params.update(put_object_params(request.attributes))

        try:
            response = await self._client.put_object(**params)
        except ClientError as e:
            logger.error(f"S3 upload failed for {self._name}/{request.key}: {e}")
            raise BackendWriteError(
                f"Failed to upload file: {_error_message(e)}",
                cause=e,
            ) from e
        except Exception as e:
            logger.error(f"Unexpected error uploading to S3: {e}")
            raise BackendWriteError(f"Upload failed: {e}", cause=e) from e

        logger.info(
            f"Uploaded file to {self._settings.provider.value}: "
            f"{self._name}/{request.key} ({len(request.body)} bytes)"
        )
        etag = response.get("ETag")
        return RemoteObject(
            key=request.key,
            body=request.body,
            content_type=request.content_type,
            content_length=len(request.body),
            etag=etag.strip('"') if etag else None,
            attributes=dict(request.attributes),
        )

    def public_url(self, key: str) -> str | None:
        """Compute the public URL from the provider's URL pattern."""
        settings = self._settings
        path = quote(key, safe="/~")

        if settings.provider == Provider.R2:
            if not settings.public_url_base:
                return None
            return f"{settings.public_url_base.rstrip('/')}/{path}"
        if settings.provider == Provider.GOOGLE:
            return f"{GOOGLE_ENDPOINT_URL}/{self._name}/{path}"
        if settings.endpoint_url:
            return f"{settings.endpoint_url.rstrip('/')}/{self._name}/{path}"

        host = _aws_host(settings.region)
        if settings.path_style or not _DNS_BUCKET_PATTERN.match(self._name):
            return f"https://{host}/{self._name}/{path}"
        return f"https://{self._name}.{host}/{path}"

    async def signed_url(self, key: str, *, expires_in: int) -> str:
        """Generate a presigned GET URL (computed by the client, no fetch)."""
        return await self._client.generate_presigned_url(
            "get_object",
            Params={"Bucket": self._name, "Key": key},
            ExpiresIn=expires_in,
        )

    async def destroy(self, key: str) -> bool:
        """Delete an object."""
        try:
            # Check if exists first
            try:
                await self._client.head_object(Bucket=self._name, Key=key)
            except ClientError as e:
                if _error_code(e) in NOT_FOUND_CODES:
                    return False
                raise

            await self._client.delete_object(Bucket=self._name, Key=key)
            logger.info(f"Deleted file from {self._settings.provider.value}: {self._name}/{key}")
            return True

        except ClientError as e:
            logger.error(f"S3 delete failed for {self._name}/{key}: {e}")
            raise BackendWriteError(
                f"Failed to delete file: {_error_message(e)}",
                cause=e,
            ) from e
        except BotoCoreError as e:
            logger.error(f"S3 delete failed for {self._name}/{key}: {e}")
            raise BackendWriteError(f"Delete failed: {e}", cause=e) from e


class S3Connection:
    """Open S3 client plus the context keeping it alive."""

    def __init__(
        self,
        client: S3Client,
        settings: S3BackendSettings,
        exit_stack: AsyncExitStack,
    ) -> None:
        self._client = client
        self._settings = settings
        self._exit_stack = exit_stack

    def container(self, name: str) -> S3Container:
        return S3Container(name, self._client, self._settings)

    async def get_container(self, name: str) -> S3Container | None:
        """Look up a bucket with head_bucket."""
        try:
            await self._client.head_bucket(Bucket=name)
        except ClientError as e:
            if _error_code(e) in NOT_FOUND_CODES:
                return None
            logger.error(f"S3 bucket lookup failed for {name}: {e}")
            raise BackendReadError(
                f"Failed to look up bucket: {_error_message(e)}",
                cause=e,
            ) from e
        return self.container(name)

    async def create_container(self, name: str, *, public: bool) -> S3Container:
        """Create a bucket."""
        params: dict[str, Any] = {"Bucket": name}
        if self._settings.supports_acl:
            params["ACL"] = "public-read" if public else "private"
        if (
            self._settings.provider == Provider.AWS
            and not self._settings.endpoint_url
            and self._settings.region != AWS_DEFAULT_REGION
        ):
            params["CreateBucketConfiguration"] = {
                "LocationConstraint": self._settings.region,
            }

        try:
            await self._client.create_bucket(**params)
        except ClientError as e:
            logger.error(f"S3 bucket creation failed for {name}: {e}")
            raise BackendWriteError(
                f"Failed to create bucket: {_error_message(e)}",
                cause=e,
            ) from e

        logger.info(f"Created bucket {name} (public={public})")
        return self.container(name)

    async def close(self) -> None:
        await self._exit_stack.aclose()


class S3Backend:
    """S3-compatible backend using aioboto3.

    One client is opened per ``connect()`` call and kept open until the
    connection is closed.
    """

    def __init__(self, settings: S3BackendSettings) -> None:
        """Initialize the backend.

        Args:
            settings: Provider connection settings.
        """
        self._settings = settings
        self._session = aioboto3.Session()

    @property
    def provider(self) -> Provider:
        return self._settings.provider

    @property
    def supports_signed_urls(self) -> bool:
        return True

    @property
    def settings(self) -> S3BackendSettings:
        return self._settings

    async def connect(self) -> S3Connection:
        """Open an S3 client for the configured provider."""
        exit_stack = AsyncExitStack()
        try:
            client = await exit_stack.enter_async_context(
                self._session.client(  # type: ignore[reportGeneralTypeIssues]
                    "s3",
                    endpoint_url=self._settings.endpoint_url,
                    region_name=self._settings.region,
                    aws_access_key_id=self._settings.access_key_id,
                    aws_secret_access_key=self._settings.secret_access_key,
                    config=self._settings.client_config(),
                )
            )
        except (BotoCoreError, ValueError) as e:
            await exit_stack.aclose()
            raise ConfigurationError(
                f"Failed to create {self._settings.provider.value} client: {e}",
                cause=e,
            ) from e

        logger.info(f"Connected to {self._settings.provider.value} storage")
        return S3Connection(client, self._settings, exit_stack)
