import re
from pathlib import Path

from loguru import logger

from cellar.exceptions import ImageNotFoundError, StorageError
from cellar.models.upload import CANONICAL_EXTENSION, CANONICAL_MIME_TYPE, StoredImage

OWNER_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


class LocalImageStorage:
    """Label images on the local filesystem, one ``{owner_id}.jpg`` per owner.

    Writes overwrite in place and nothing serializes them: two concurrent
    uploads for the same owner leave whichever finished last.
    """

    def __init__(self, upload_dir: Path, extension: str = CANONICAL_EXTENSION):
        self.upload_dir = Path(upload_dir)
        self.extension = extension

    def initialize(self) -> Path:
        """Create the upload directory once, before the app serves requests."""
        try:
            self.upload_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.error("Storage initialization failed upload_dir={} error={}", str(self.upload_dir), str(exc))
            raise StorageError("initialize", exc) from exc
        logger.info("Storage ready upload_dir={}", str(self.upload_dir.resolve()))
        return self.upload_dir

    def filename(self, owner_id: str) -> str:
        if not OWNER_ID_PATTERN.match(owner_id):
            raise ValueError(f"Invalid owner id for storage: {owner_id!r}")
        return f"{owner_id}.{self.extension}"

    def path(self, owner_id: str) -> Path:
        return self.upload_dir / self.filename(owner_id)

    def write(self, owner_id: str, data: bytes) -> StoredImage:
        destination = self.path(owner_id)
        try:
            destination.write_bytes(data)
        except OSError as exc:
            logger.error(
                "Storage write failed owner_id={} path={} error={}",
                owner_id,
                str(destination),
                str(exc),
            )
            raise StorageError("write", exc) from exc
        logger.debug("Image saved owner_id={} path={} size_bytes={}", owner_id, str(destination), len(data))
        return StoredImage(
            owner_id=owner_id,
            filename=destination.name,
            size_bytes=len(data),
            mime_type=CANONICAL_MIME_TYPE.value,
        )

    def read(self, owner_id: str) -> bytes:
        path = self.path(owner_id)
        try:
            return path.read_bytes()
        except FileNotFoundError as exc:
            logger.warning("Image not found owner_id={} path={}", owner_id, str(path))
            raise ImageNotFoundError(owner_id) from exc
        except OSError as exc:
            logger.error("Storage read failed owner_id={} path={} error={}", owner_id, str(path), str(exc))
            raise StorageError("read", exc) from exc

    def delete(self, owner_id: str) -> bool:
        """Remove the owner's image. A missing file is a successful no-op.

        Returns True when a file was actually removed.
        """
        path = self.path(owner_id)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.debug("Image already absent owner_id={} path={}", owner_id, str(path))
            return False
        except OSError as exc:
            logger.error("Storage delete failed owner_id={} path={} error={}", owner_id, str(path), str(exc))
            raise StorageError("delete", exc) from exc
        logger.debug("Image deleted owner_id={} path={}", owner_id, str(path))
        return True

    def exists(self, owner_id: str) -> bool:
        # Advisory only: a failed probe reads as "no image".
        try:
            return self.path(owner_id).is_file()
        except (OSError, ValueError) as exc:
            logger.debug("Image existence probe failed owner_id={} error={}", owner_id, str(exc))
            return False
