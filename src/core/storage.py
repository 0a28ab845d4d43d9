"""
Supabase Storage Operations.

Downloads uploaded documents into memory. A single attempt is made per
invocation; any failure is reported as StorageError.
"""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import httpx
import structlog
from storage3.utils import StorageException

from src.core.config import DEFAULT_MIME_TYPE, DEFAULT_STORAGE_BUCKET
from src.core.exceptions import StorageError
from src.core.logging import EventType

if TYPE_CHECKING:
    from supabase import Client

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RetrievedFile:
    """A document downloaded from storage.

    Attributes:
        data: Raw file content
        mime_type: Content type sent to Gemini with the file
    """

    data: bytes = field(repr=False)
    mime_type: str

    @property
    def size(self) -> int:
        return len(self.data)


def guess_mime_type(path: str, default: str = DEFAULT_MIME_TYPE) -> str:
    """
    Determine the content type of a storage object from its path.

    Args:
        path: Object path inside the bucket
        default: Returned when the extension is unknown

    Returns:
        MIME type string

    Examples:
        >>> guess_mime_type("docs/w2.png")
        'image/png'
        >>> guess_mime_type("docs/scan")
        'application/pdf'
    """
    mime_type, _ = mimetypes.guess_type(path)
    return mime_type or default


class SupabaseStorage:
    """Download client for the uploaded documents bucket."""

    def __init__(
        self,
        client: Client,
        bucket: str = DEFAULT_STORAGE_BUCKET,
        default_mime_type: str = DEFAULT_MIME_TYPE,
    ) -> None:
        """
        Initialize storage client.

        Args:
            client: Supabase client
            bucket: Bucket holding uploaded documents
            default_mime_type: Content type used when the path has no known extension
        """
        self._client = client
        self.bucket = bucket
        self.default_mime_type = default_mime_type

    def download(self, path: str) -> RetrievedFile:
        """
        Download an object fully into memory.

        Args:
            path: Object path inside the bucket

        Returns:
            RetrievedFile with content and MIME type

        Raises:
            StorageError: If the object is missing, empty, or the request fails
        """
        logger.info(EventType.DOWNLOAD_STARTED.value, bucket=self.bucket, path=path)

        try:
            content = self._client.storage.from_(self.bucket).download(path)
        except (StorageException, httpx.HTTPError) as e:
            logger.error(
                EventType.DOWNLOAD_FAILED.value,
                bucket=self.bucket,
                path=path,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise StorageError(path, str(e)) from e

        if not content:
            logger.error(
                EventType.DOWNLOAD_FAILED.value, bucket=self.bucket, path=path, error="empty"
            )
            raise StorageError(path, "empty response")

        document = RetrievedFile(
            data=content,
            mime_type=guess_mime_type(path, self.default_mime_type),
        )

        logger.info(
            EventType.DOWNLOAD_COMPLETED.value,
            path=path,
            size=document.size,
            mime_type=document.mime_type,
        )
        return document
