"""Shared builders for test payloads."""

import io

from PIL import Image

MAX_FILE_SIZE = 5 * 1024 * 1024
MAX_IMAGE_WIDTH = 1200

# First bytes of a Windows executable.
EXE_BYTES = b"MZ" + b"\x00" * 100


def make_image_bytes(
    fmt: str = "JPEG",
    size: tuple[int, int] = (32, 24),
    mode: str = "RGB",
    color=(180, 20, 40),
    exif: Image.Exif | None = None,
    icc_profile: bytes | None = None,
) -> bytes:
    """Encode a solid-colour test image with Pillow."""
    image = Image.new(mode, size, color)
    output = io.BytesIO()
    kwargs = {}
    if exif is not None:
        kwargs["exif"] = exif.tobytes()
    if icc_profile is not None:
        kwargs["icc_profile"] = icc_profile
    image.save(output, format=fmt, **kwargs)
    return output.getvalue()
