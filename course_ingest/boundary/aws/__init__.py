"""AWS boundary adapters."""

from course_ingest.boundary.aws.s3_client import S3MaterialClient

__all__ = ["S3MaterialClient"]
