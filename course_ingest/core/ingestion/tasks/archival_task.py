"""
Archival of the original PDF to S3.

Streams the temp file to the materials bucket under the key assigned by the
upload handler. The blocking boto3 call runs in a worker thread.

Dependencies: boto3 (via S3MaterialClient), asyncio
System role: Second stage of material ingestion pipeline
"""

import asyncio
import logging

from botocore.exceptions import BotoCoreError, ClientError

from course_ingest.boundary.aws.s3_client import S3MaterialClient
from course_ingest.core.exceptions import ArchivalFailed

logger = logging.getLogger(__name__)


class ArchivalTask:
    """Store the original upload durably in object storage."""

    def __init__(self, s3_client: S3MaterialClient) -> None:
        """
        Initialize archival task.

        Args:
            s3_client: Materials bucket client
        """
        self._s3_client = s3_client

    async def archive(
        self,
        file_path: str,
        key: str,
        content_type: str = "application/pdf",
    ) -> None:
        """
        Upload a local file to S3 at key. No retry.

        Args:
            file_path: Local file to upload
            key: Pre-assigned object key (unique per material)
            content_type: MIME type stored with the object

        Raises:
            ArchivalFailed: File unreadable or storage write failed
        """
        if not key:
            raise ArchivalFailed("Storage key is required", key=key)

        try:
            await asyncio.to_thread(self._upload_file, file_path, key, content_type)
        except (ClientError, BotoCoreError, OSError) as e:
            raise ArchivalFailed(f"Failed to archive to S3: {e}", key=key) from e

        logger.info(
            f"{__name__}:archive - Uploaded original to s3://{self._s3_client.bucket}/{key}",
            extra={"key": key},
        )

    def _upload_file(self, file_path: str, key: str, content_type: str) -> None:
        with open(file_path, "rb") as body:
            self._s3_client.put_object(key=key, body=body, content_type=content_type)
