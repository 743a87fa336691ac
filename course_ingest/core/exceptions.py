"""
Exception hierarchy for the course material ingestion service.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class CourseIngestException(Exception):
    """Base exception for all course ingestion errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(CourseIngestException):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class MaterialNotFoundError(CourseIngestException):
    """Raised when a course material cannot be found."""

    def __init__(self, material_id: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["material_id"] = material_id
        super().__init__(f"Material not found: {material_id}", details)


class MaterialProcessingError(CourseIngestException):
    """Base exception for material ingestion pipeline errors."""

    stage = "unknown"

    def __init__(
        self,
        message: str,
        material_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize material processing error.

        Args:
            message: Error message
            material_id: ID of the material that failed
            details: Additional context
        """
        details = details or {}
        if material_id:
            details["material_id"] = material_id
        super().__init__(message, details)


class ExtractionFailed(MaterialProcessingError):
    """Raised when the text extraction subprocess fails or the file is unreadable."""

    stage = "extract"

    def __init__(
        self,
        message: str,
        exit_code: int | None = None,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize extraction error.

        Args:
            message: Error message
            exit_code: Subprocess exit code (None when it never ran)
            file_path: File that was being extracted
            details: Additional context
        """
        details = details or {}
        details["exit_code"] = exit_code
        if file_path:
            details["file_path"] = file_path
        self.exit_code = exit_code
        super().__init__(message, details=details)


class EmptyDocument(MaterialProcessingError):
    """Raised when extraction succeeded but produced no chunks."""

    stage = "chunk"


class EmbeddingFailed(MaterialProcessingError):
    """Raised when any embedding batch request fails or returns malformed data."""

    stage = "embed"

    def __init__(
        self,
        message: str,
        batch_index: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if batch_index is not None:
            details["batch_index"] = batch_index
        self.batch_index = batch_index
        super().__init__(message, details=details)


class ArchivalFailed(MaterialProcessingError):
    """Raised when the object storage write fails."""

    stage = "archive"

    def __init__(
        self,
        message: str,
        key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if key:
            details["key"] = key
        self.key = key
        super().__init__(message, details=details)


class PersistenceFailed(MaterialProcessingError):
    """Raised when the chunk insert / status transaction fails and is rolled back."""

    stage = "persist"


class PipelineTimeout(MaterialProcessingError):
    """Raised when a material's pipeline exceeds its deadline."""

    stage = "timeout"

    def __init__(
        self,
        timeout_seconds: float,
        material_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["timeout_seconds"] = timeout_seconds
        self.timeout_seconds = timeout_seconds
        super().__init__(
            f"Pipeline exceeded deadline of {timeout_seconds}s",
            material_id=material_id,
            details=details,
        )


class MaterialNotReadyError(CourseIngestException):
    """Raised when chunks are requested for a material that is not READY."""

    def __init__(self, material_id: str, status: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["material_id"] = material_id
        details["status"] = status
        self.status = status
        super().__init__(f"Material {material_id} is not ready (status: {status})", details)


class UploadTooLargeError(ValidationError):
    """Raised when an upload exceeds the configured byte cap."""

    def __init__(self, max_bytes: int, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["max_bytes"] = max_bytes
        self.max_bytes = max_bytes
        super().__init__(
            f"File too large. Maximum size: {max_bytes // (1024 * 1024)}MB",
            field="file",
            details=details,
        )
