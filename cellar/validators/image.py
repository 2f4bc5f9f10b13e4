from collections.abc import Iterable

from loguru import logger

from cellar.exceptions import (
    EmptyFileError,
    FileTooLargeError,
    ImageValidationError,
    UndetectableImageTypeError,
    UnsupportedFileTypeError,
    UnsupportedImageContentError,
)
from cellar.models.upload import ImageMimeType, ImageUploadConfig, UploadRequest, ValidationOutcome

# (mime type, (offset, magic) pairs). Every pair must match; first hit wins.
SIGNATURES: list[tuple[str, tuple[tuple[int, bytes], ...]]] = [
    ("image/png", ((0, b"\x89PNG\r\n\x1a\n"),)),
    ("image/jpeg", ((0, b"\xff\xd8\xff"),)),
    ("image/webp", ((0, b"RIFF"), (8, b"WEBP"))),
    ("image/gif", ((0, b"GIF87a"),)),
    ("image/gif", ((0, b"GIF89a"),)),
    ("image/tiff", ((0, b"II*\x00"),)),
    ("image/tiff", ((0, b"MM\x00*"),)),
    ("image/heic", ((4, b"ftypheic"),)),
    ("image/avif", ((4, b"ftypavif"),)),
    ("image/x-icon", ((0, b"\x00\x00\x01\x00"),)),
    ("image/bmp", ((0, b"BM"),)),
    ("audio/wav", ((0, b"RIFF"), (8, b"WAVE"))),
    ("video/x-msvideo", ((0, b"RIFF"), (8, b"AVI "))),
    ("video/mp4", ((4, b"ftyp"),)),
    ("application/pdf", ((0, b"%PDF-"),)),
    ("application/zip", ((0, b"PK\x03\x04"),)),
    ("application/gzip", ((0, b"\x1f\x8b"),)),
    ("application/x-7z-compressed", ((0, b"7z\xbc\xaf\x27\x1c"),)),
    ("application/x-elf", ((0, b"\x7fELF"),)),
    ("application/x-msdownload", ((0, b"MZ"),)),
]


def _allowed_values(allowed: Iterable[ImageMimeType]) -> list[str]:
    return sorted(mime.value for mime in allowed)


def detect_mime_type(data: bytes) -> str | None:
    """Return the MIME type implied by the payload's leading bytes, if known."""
    for mime_type, parts in SIGNATURES:
        if all(data[offset:offset + len(magic)] == magic for offset, magic in parts):
            return mime_type
    return None


def check_size(data: bytes, max_size: int) -> None:
    if len(data) > max_size:
        raise FileTooLargeError(len(data), max_size)


def check_declared_type(mime_type: str, allowed: Iterable[ImageMimeType]) -> None:
    allowed_values = _allowed_values(allowed)
    if mime_type not in allowed_values:
        raise UnsupportedFileTypeError(mime_type, allowed_values)


def check_signature(data: bytes, allowed: Iterable[ImageMimeType]) -> str:
    """Verify the real encoded type, ignoring whatever the client claimed.

    Returns the detected MIME type. A mismatch between two allowed types
    (declared PNG, actually JPEG) passes; the transcoder normalizes both.
    """
    if not data:
        raise EmptyFileError()
    detected = detect_mime_type(data)
    if detected is None:
        raise UndetectableImageTypeError()
    if detected not in _allowed_values(allowed):
        raise UnsupportedImageContentError(detected)
    return detected


def validate_upload(request: UploadRequest, config: ImageUploadConfig) -> ValidationOutcome:
    # Cheap checks first: an oversized file with a bad type reports the size.
    try:
        check_size(request.data, config.max_file_size)
        check_declared_type(request.declared_mime_type, config.allowed_mime_types)
        detected = check_signature(request.data, config.allowed_mime_types)
    except ImageValidationError as exc:
        detected = detect_mime_type(request.data) if request.data else None
        logger.debug(
            "Upload validation rejected owner_id={} code={} detected_type={}",
            request.owner_id,
            exc.code,
            detected,
        )
        return ValidationOutcome.reject(exc, detected_type=detected)
    return ValidationOutcome.accept(detected)
