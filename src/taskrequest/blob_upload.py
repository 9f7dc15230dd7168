"""Image upload to platform blob storage."""

import asyncio
import logging
from email.utils import formatdate
from pathlib import Path

from core.errors.exceptions import UploadFailure
from taskrequest.api_client import ArxsApiClient
from taskrequest.attachments import IMAGE_CONTENT_TYPE

logger = logging.getLogger(__name__)

DEFAULT_BLOB_API_VERSION = "2021-08-06"


def require_file(path: Path) -> Path:
    """Return ``path`` if it is an existing regular file, else raise UploadFailure."""
    path = Path(path)
    if not path.is_file():
        raise UploadFailure(
            f"Image file not found: {path}",
            context={"file_name": str(path)},
        )
    return path


class BlobUploader:
    """
    Uploads a local file through a pre-authorized blob PUT URL.

    Two calls: ``GetBlobPutAuthorization`` on the platform API (bearer auth)
    for the URL, then a ``BlockBlob`` PUT straight to storage with the file
    bytes as body. The returned URL is what the task request's stored-file
    record points at.
    """

    def __init__(
        self,
        client: ArxsApiClient,
        blob_api_version: str = DEFAULT_BLOB_API_VERSION,
    ):
        self.client = client
        self.blob_api_version = blob_api_version

    def build_put_headers(self, content_length: int, content_type: str) -> dict[str, str]:
        return {
            "x-ms-date": formatdate(usegmt=True),
            "x-ms-version": self.blob_api_version,
            "x-ms-blob-type": "BlockBlob",
            "Content-Length": str(content_length),
            "Content-Type": content_type,
        }

    async def upload(self, path: Path, content_type: str = IMAGE_CONTENT_TYPE) -> str:
        """
        Upload ``path`` and return its blob URL.

        Raises:
            UploadFailure: File missing locally (checked before any network
                call), authorization or PUT rejected, timeout
        """
        path = require_file(path)
        data = await asyncio.to_thread(path.read_bytes)
        blob_url = await self.client.get_blob_put_authorization(path.name, content_type)

        await self.client.put_blob(
            blob_url,
            data,
            self.build_put_headers(len(data), content_type),
        )
        logger.info(
            "Image uploaded",
            extra={
                "file_name": path.name,
                "content_type": content_type,
                "bytes_uploaded": len(data),
                "blob_url": blob_url,
            },
        )
        return blob_url
