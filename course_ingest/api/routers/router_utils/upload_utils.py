"""
Upload utilities.

Validation, temp-file spooling and object key generation for material uploads.

Dependencies: fastapi (UploadFile)
System role: Upload request validation
"""

import os
import re
import secrets
import tempfile

from fastapi import UploadFile

from course_ingest.core.exceptions import UploadTooLargeError, ValidationError

# Allowed file extensions for material upload
ALLOWED_EXTENSIONS = {"pdf"}
ALLOWED_CONTENT_TYPES = {"application/pdf"}

_READ_CHUNK_BYTES = 1024 * 1024
_SAFE_SEGMENT = re.compile(r"^[A-Za-z0-9_\-]+$")


def validate_pdf_upload(filename: str | None, content_type: str | None) -> str:
    """
    Validate that an upload is a PDF.

    Args:
        filename: Original filename from the client
        content_type: MIME type declared by the client

    Returns:
        str: Lowercased file extension

    Raises:
        ValidationError: Missing/oversized filename, path traversal, or not a PDF
    """
    if not filename or len(filename) > 255:
        raise ValidationError("Invalid filename length", field="file")

    # Block path traversal attacks
    if ".." in filename or "/" in filename or "\\" in filename:
        raise ValidationError("Invalid filename: path traversal detected", field="file")

    if "." not in filename:
        raise ValidationError("File must have an extension", field="file")

    ext = filename.rsplit(".", 1)[-1].lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise ValidationError(
            f"File type '.{ext}' not allowed. Only PDF files are allowed.",
            field="file",
        )

    if content_type not in ALLOWED_CONTENT_TYPES:
        raise ValidationError(
            f"Content type '{content_type}' not allowed. Only PDF files are allowed.",
            field="file",
        )
    return ext


def validate_path_segment(value: str, field: str) -> str:
    """
    Validate an identifier that becomes part of an object key.

    Raises:
        ValidationError: Empty or containing anything but letters, digits, '-' and '_'
    """
    if not value or len(value) > 64 or not _SAFE_SEGMENT.match(value):
        raise ValidationError(f"Invalid {field}", field=field)
    return value


def generate_material_key(key_prefix: str, organization_id: str, extension: str) -> str:
    """
    Generate a unique object key for an uploaded material.

    Format: {key_prefix}/{organization_id}/{32 hex chars}.{extension}

    Args:
        key_prefix: Top-level prefix (e.g. "course_material")
        organization_id: Owning organization
        extension: File extension without the dot

    Returns:
        str: Object key
    """
    return f"{key_prefix}/{organization_id}/{secrets.token_hex(16)}.{extension}"


async def save_upload_to_temp(
    file: UploadFile,
    max_bytes: int,
    upload_dir: str | None = None,
) -> tuple[str, int]:
    """
    Spool an upload to a temp file, enforcing a byte cap while reading.

    Args:
        file: Incoming multipart file
        max_bytes: Largest accepted size
        upload_dir: Target directory (system temp dir if None/empty)

    Returns:
        tuple[str, int]: Temp file path and its size in bytes

    Raises:
        UploadTooLargeError: Upload exceeded max_bytes (temp file removed)
    """
    fd, temp_path = tempfile.mkstemp(prefix="course_material_", suffix=".pdf", dir=upload_dir or None)
    size = 0
    try:
        with os.fdopen(fd, "wb") as out:
            while True:
                block = await file.read(_READ_CHUNK_BYTES)
                if not block:
                    break
                size += len(block)
                if size > max_bytes:
                    raise UploadTooLargeError(max_bytes)
                out.write(block)
    except BaseException:
        os.remove(temp_path)
        raise
    return temp_path, size
