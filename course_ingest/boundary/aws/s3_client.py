"""
S3 client for the course materials bucket.

Durable storage of the original uploaded PDFs. Presigned URL issuance is
handled elsewhere in the platform.

Dependencies: boto3
System role: Object storage adapter for archival
"""

import logging
from typing import BinaryIO

import boto3

logger = logging.getLogger(__name__)


class S3MaterialClient:
    """S3 client for course material bucket operations."""

    def __init__(self, bucket: str, region: str = "us-east-1", s3_client=None) -> None:
        """
        Initialize S3 client for the materials bucket.

        Args:
            bucket: S3 bucket name for material storage
            region: AWS region for S3 bucket
            s3_client: Pre-built boto3 S3 client (built from region if None)

        Raises:
            ValueError: When bucket is empty
        """
        if not bucket:
            raise ValueError("bucket cannot be empty")

        self._bucket = bucket
        self._region = region
        self._s3_client = s3_client or boto3.client("s3", region_name=region)

    @property
    def bucket(self) -> str:
        return self._bucket

    def put_object(
        self,
        key: str,
        body: bytes | BinaryIO,
        content_type: str,
    ) -> None:
        """
        Store bytes (or a readable binary stream) at key.

        Blocking; call through asyncio.to_thread from async code.

        Args:
            key: S3 object key
            body: Object bytes or file object
            content_type: MIME type stored with the object

        Raises:
            ClientError / BotoCoreError: Propagated from boto3
        """
        self._s3_client.put_object(
            Bucket=self._bucket,
            Key=key,
            Body=body,
            ContentType=content_type,
        )
        logger.debug(f"{__name__}:put_object - Stored s3://{self._bucket}/{key}")

