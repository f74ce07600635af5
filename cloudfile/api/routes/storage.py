"""File storage API routes.

Upload handling on top of the storage adapter: store, inspect, download
and delete files.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Annotated, Any

import msgspec
from litestar import Controller, Response, delete, get, post
from litestar.datastructures import UploadFile
from litestar.enums import MediaType, RequestEncodingType
from litestar.params import Body
from litestar.status_codes import (
    HTTP_200_OK,
    HTTP_201_CREATED,
    HTTP_204_NO_CONTENT,
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_502_BAD_GATEWAY,
)

from cloudfile.core.config import Settings
from cloudfile.storage import (
    BackendWriteError,
    InMemoryUpload,
    NotFoundError,
    StorageAdapter,
    StorageValidationError,
)
from cloudfile.storage.schemas import DEFAULT_CONTENT_TYPE

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Request / response schemas
# -----------------------------------------------------------------------------


@dataclass
class UploadForm:
    """Multipart upload form."""

    file: UploadFile
    identifier: str | None = None


class FileResponse(msgspec.Struct, kw_only=True):
    """Response describing a stored file."""

    path: str
    content_type: str | None
    size_bytes: int
    url: str | None


class FileDetailResponse(FileResponse, kw_only=True):
    """Stored file with backend attributes."""

    visibility: str
    attributes: dict[str, Any]


class ErrorResponse(msgspec.Struct, kw_only=True):
    """Error response."""

    error: str
    detail: str | None = None


# -----------------------------------------------------------------------------
# Controller
# -----------------------------------------------------------------------------


class StorageController(Controller):
    """File storage endpoints."""

    path = "/api/v1/files"
    tags: Sequence[str] | None = ["Files"]

    @post("/")
    async def upload_file(
        self,
        storage: StorageAdapter,
        settings: Settings,
        data: Annotated[UploadForm, Body(media_type=RequestEncodingType.MULTI_PART)],
    ) -> Response[FileResponse | ErrorResponse]:
        """Store an uploaded file.

        The file is stored under ``identifier`` when given, otherwise under
        its sanitized filename.
        """
        content = await data.file.read()

        if len(content) == 0:
            return Response(
                content=ErrorResponse(error="Empty file"),
                status_code=HTTP_400_BAD_REQUEST,
            )

        if len(content) > settings.max_upload_size_bytes:
            return Response(
                content=ErrorResponse(
                    error="File too large",
                    detail=f"Maximum size: {settings.max_upload_size_mb}MB",
                ),
                status_code=HTTP_400_BAD_REQUEST,
            )

        source = InMemoryUpload(
            data=content,
            filename=data.file.filename,
            content_type=data.file.content_type or None,
        )

        try:
            stored = await storage.store(source, data.identifier or None)
        except StorageValidationError as e:
            logger.warning(f"Upload rejected: {e}")
            return Response(
                content=ErrorResponse(error="Invalid identifier", detail=str(e)),
                status_code=HTTP_400_BAD_REQUEST,
            )
        except BackendWriteError as e:
            logger.error(f"Upload failed: {e}")
            return Response(
                content=ErrorResponse(error="Upload failed", detail=str(e)),
                status_code=HTTP_502_BAD_GATEWAY,
            )

        return Response(
            content=FileResponse(
                path=stored.path,
                content_type=stored.content_type,
                size_bytes=len(content),
                url=await stored.url(),
            ),
            status_code=HTTP_201_CREATED,
        )

    @get("/meta/{identifier:path}")
    async def get_file(
        self,
        storage: StorageAdapter,
        identifier: str,
    ) -> Response[FileDetailResponse | ErrorResponse]:
        """Get metadata and URL of a stored file."""
        stored = storage.retrieve(identifier)
        try:
            attributes = await stored.attributes()
        except NotFoundError:
            return Response(
                content=ErrorResponse(error="File not found"),
                status_code=HTTP_404_NOT_FOUND,
            )

        return Response(
            content=FileDetailResponse(
                path=stored.path,
                content_type=stored.content_type,
                size_bytes=await stored.size(),
                url=await stored.url(),
                visibility=storage.visibility.value,
                attributes=attributes,
            ),
            status_code=HTTP_200_OK,
        )

    @get("/content/{identifier:path}")
    async def download_file(
        self,
        storage: StorageAdapter,
        identifier: str,
    ) -> Response[bytes | ErrorResponse]:
        """Download a stored file directly.

        For large files, prefer the URL from ``GET /meta/{identifier}``.
        """
        stored = storage.retrieve(identifier)
        try:
            data = await stored.read()
        except NotFoundError:
            return Response(
                content=ErrorResponse(error="File not found"),
                status_code=HTTP_404_NOT_FOUND,
            )

        return Response(
            content=data,
            status_code=HTTP_200_OK,
            media_type=stored.content_type or DEFAULT_CONTENT_TYPE,
        )

    @delete("/content/{identifier:path}", status_code=HTTP_200_OK)
    async def delete_file(
        self,
        storage: StorageAdapter,
        identifier: str,
    ) -> Response[None | ErrorResponse]:
        """Delete a stored file.

        This action cannot be undone.
        """
        deleted = await storage.retrieve(identifier).delete()

        if not deleted:
            return Response(
                content=ErrorResponse(error="File not found"),
                status_code=HTTP_404_NOT_FOUND,
            )

        return Response(content=None, status_code=HTTP_204_NO_CONTENT, media_type=MediaType.TEXT)
