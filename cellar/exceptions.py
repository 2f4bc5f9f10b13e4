"""
Error taxonomy for the cellar API.

Every failure the API reports on purpose is a ``CellarError`` subclass carrying
its HTTP status, a machine-readable code and, where it helps, a suggestion on
how to fix the request. ``cellar.errors`` turns these into JSON responses.
"""

from typing import Any

BYTES_PER_MB = 1024 * 1024


def format_megabytes(size_bytes: int) -> str:
    return f"{size_bytes / BYTES_PER_MB:.1f}MB"


class CellarError(Exception):
    """
    Base exception for the cellar API.

    ``operational`` separates expected, user-facing failures from
    infrastructure faults; the latter are logged with a traceback.
    """

    def __init__(
        self,
        message: str,
        code: str = "CELLAR_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
        operational: bool = True,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}
        self.operational = operational

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Record exceptions
# =============================================================================

class WineNotFoundError(CellarError):
    def __init__(self, wine_id: str):
        super().__init__(
            message=f"Wine with ID '{wine_id}' not found",
            code="NOT_FOUND",
            status_code=404,
            details={"wine_id": wine_id},
        )


class ImageNotFoundError(CellarError):
    def __init__(self, owner_id: str):
        super().__init__(
            message=f"No image stored for '{owner_id}'",
            code="IMAGE_NOT_FOUND",
            status_code=404,
            suggestion="Upload an image first using POST /api/wines/{id}/image",
            details={"owner_id": owner_id},
        )


# =============================================================================
# Upload exceptions
# =============================================================================

class ImageUploadError(CellarError):
    """Raised when an upload request is unusable before any checks run."""

    def __init__(
        self,
        message: str,
        code: str = "IMAGE_UPLOAD_ERROR",
        status_code: int = 400,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
        operational: bool = True,
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=status_code,
            suggestion=suggestion,
            details=details,
            operational=operational,
        )


class ImageValidationError(ImageUploadError):
    """Base for every rejection raised by the validation primitives."""


class FileTooLargeError(ImageValidationError):
    def __init__(self, size_bytes: int, max_bytes: int):
        super().__init__(
            message=f"File size {format_megabytes(size_bytes)} exceeds maximum {format_megabytes(max_bytes)}",
            code="FILE_TOO_LARGE",
            status_code=413,
            suggestion=f"Upload an image smaller than {format_megabytes(max_bytes)}",
            details={"size_bytes": size_bytes, "max_bytes": max_bytes},
        )
        self.size_bytes = size_bytes
        self.max_bytes = max_bytes


class UnsupportedFileTypeError(ImageValidationError):
    def __init__(self, mime_type: str, allowed: list[str]):
        super().__init__(
            message=f"File type {mime_type or 'unknown'} is not supported",
            code="INVALID_FILE_TYPE",
            suggestion=f"Upload one of: {', '.join(allowed)}",
            details={"mime_type": mime_type, "allowed_types": allowed},
        )
        self.mime_type = mime_type


class EmptyFileError(ImageValidationError):
    def __init__(self):
        super().__init__(
            message="Invalid image: empty file",
            code="EMPTY_FILE",
            suggestion="Check that the file was selected and is not zero bytes",
        )


class UndetectableImageTypeError(ImageValidationError):
    def __init__(self):
        super().__init__(
            message="Invalid image: unable to detect file type",
            code="INVALID_IMAGE",
            suggestion="Upload a real JPEG, PNG or WebP image",
        )


class UnsupportedImageContentError(ImageValidationError):
    def __init__(self, detected_type: str):
        super().__init__(
            message=f"Invalid image: file appears to be {detected_type}, which is not a supported image format",
            code="INVALID_IMAGE",
            suggestion="Upload a real JPEG, PNG or WebP image",
            details={"detected_type": detected_type},
        )
        self.detected_type = detected_type


class ImageProcessingError(ImageUploadError):
    """Decode or encode failure inside the transcoder.

    The response stays generic; ``cause`` keeps the underlying error for logs.
    """

    def __init__(self, cause: Exception | str):
        super().__init__(
            message="Image upload failed: the image could not be processed",
            code="IMAGE_PROCESSING_FAILED",
            status_code=422,
            suggestion="Re-export the image from an image editor and try again",
        )
        self.cause = cause


# =============================================================================
# Infrastructure exceptions
# =============================================================================

class StorageError(CellarError):
    def __init__(self, operation: str, cause: Exception | str):
        super().__init__(
            message="Image upload failed" if operation == "write" else "Image storage operation failed",
            code="STORAGE_ERROR",
            status_code=500,
            suggestion="Try again later or contact the administrator if the issue persists",
            operational=False,
        )
        self.operation = operation
        self.cause = cause
