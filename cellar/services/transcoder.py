import io

from loguru import logger
from PIL import Image, ImageCms, UnidentifiedImageError

from cellar.exceptions import ImageProcessingError

ORIENTATION_TAG = 0x0112
SRGB_PROFILE = ImageCms.createProfile("sRGB")

_DECODE_ERRORS = (
    UnidentifiedImageError,
    Image.DecompressionBombError,
    OSError,
    SyntaxError,
    ValueError,
)


def _target_size(width: int, height: int, max_width: int) -> tuple[int, int] | None:
    if width <= max_width:
        return None
    scaled_height = max(1, round(height * max_width / width))
    return max_width, scaled_height


def _to_jpeg_mode(image: Image.Image) -> Image.Image:
    if image.mode in ("RGB", "L"):
        return image
    if image.mode == "P":
        image = image.convert("RGBA")
    if image.mode in ("RGBA", "LA"):
        background = Image.new("RGB", image.size, (255, 255, 255))
        background.paste(image, mask=image.getchannel("A"))
        return background
    return image.convert("RGB")


def _to_srgb(image: Image.Image, icc_profile: bytes) -> Image.Image:
    if image.mode not in ("RGB", "L", "CMYK"):
        image = _to_jpeg_mode(image)
    try:
        source_profile = ImageCms.ImageCmsProfile(io.BytesIO(icc_profile))
        return ImageCms.profileToProfile(image, source_profile, SRGB_PROFILE, outputMode="RGB")
    except (ImageCms.PyCMSError, OSError) as exc:
        # Unreadable or mismatched profile: keep the pixels, drop the profile.
        logger.warning("Transcode ignored ICC profile mode={} error={}", image.mode, str(exc))
        return _to_jpeg_mode(image)


def transcode(data: bytes, max_width: int, quality: int) -> bytes:
    """
    Normalize an uploaded image to the canonical stored JPEG.

    - Downsamples to ``max_width`` when wider, keeping the aspect ratio.
      Narrower images are never enlarged.
    - Re-encodes as progressive JPEG at ``quality``.
    - Converts embedded colour profiles (wide-gamut RGB, CMYK) to sRGB.
    - Drops all embedded metadata except the EXIF orientation tag, so the
      browser still rotates the label correctly.

    Raises:
        ImageProcessingError: the bytes could not be decoded or encoded.
    """
    try:
        with Image.open(io.BytesIO(data)) as source:
            source.load()
            width, height = source.size
            orientation = source.getexif().get(ORIENTATION_TAG)
            logger.debug(
                "Transcode decoded format={} mode={} width={} height={} orientation={}",
                source.format,
                source.mode,
                width,
                height,
                orientation,
            )

            icc_profile = source.info.get("icc_profile")
            image = _to_srgb(source, icc_profile) if icc_profile else _to_jpeg_mode(source)
            target = _target_size(width, height, max_width)
            if target is not None:
                image = image.resize(target, Image.Resampling.LANCZOS)
                logger.debug("Transcode resized from={}x{} to={}x{}", width, height, *target)

            # Pillow carries comments and XMP over from info; start clean.
            image.info = {}
            save_kwargs = {"format": "JPEG", "quality": quality, "progressive": True, "optimize": True, "exif": b""}
            if orientation is not None:
                exif = Image.Exif()
                exif[ORIENTATION_TAG] = orientation
                save_kwargs["exif"] = exif.tobytes()

            output = io.BytesIO()
            image.save(output, **save_kwargs)
    except _DECODE_ERRORS as exc:
        logger.warning("Transcode failed error_type={} error={}", type(exc).__name__, str(exc))
        raise ImageProcessingError(exc) from exc

    result = output.getvalue()
    logger.debug("Transcode finished input_bytes={} output_bytes={}", len(data), len(result))
    return result
