from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from cellar.exceptions import ImageValidationError

CANONICAL_EXTENSION = "jpg"


class ImageMimeType(str, Enum):
    JPEG = "image/jpeg"
    PNG = "image/png"
    WEBP = "image/webp"


CANONICAL_MIME_TYPE = ImageMimeType.JPEG


class ImageUploadConfig(BaseModel):
    """Limits and locations the upload pipeline is built with."""

    model_config = ConfigDict(frozen=True)

    upload_dir: Path
    max_file_size: int = Field(default=5 * 1024 * 1024, ge=1)
    max_image_width: int = Field(default=1200, ge=1)
    image_quality: int = Field(default=85, ge=1, le=100)
    allowed_mime_types: frozenset[ImageMimeType] = frozenset(ImageMimeType)


class UploadRequest(BaseModel):
    owner_id: str = Field(min_length=1)
    data: bytes
    declared_mime_type: str


class StoredImage(BaseModel):
    owner_id: str
    filename: str
    size_bytes: int
    mime_type: str = CANONICAL_MIME_TYPE.value


class UploadResult(BaseModel):
    filename: str
    size_bytes: int
    mime_type: str


@dataclass(frozen=True)
class ValidationOutcome:
    """Result of a full validation pass over one upload.

    ``detected_type`` is the MIME type read from the payload's leading bytes,
    when a known signature was found (even if that type was then rejected).
    """

    accepted: bool
    detected_type: str | None = None
    error: ImageValidationError | None = None

    @classmethod
    def accept(cls, detected_type: str) -> "ValidationOutcome":
        return cls(accepted=True, detected_type=detected_type)

    @classmethod
    def reject(cls, error: ImageValidationError, detected_type: str | None = None) -> "ValidationOutcome":
        return cls(accepted=False, detected_type=detected_type, error=error)

    @property
    def reason(self) -> str | None:
        return self.error.message if self.error else None
