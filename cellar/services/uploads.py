import time
from pathlib import Path

from loguru import logger

from cellar.exceptions import ImageProcessingError, StorageError
from cellar.models.upload import ImageUploadConfig, UploadRequest, UploadResult
from cellar.services.storage import LocalImageStorage
from cellar.services.transcoder import transcode
from cellar.validators.image import validate_upload


class ImageUploadService:
    """Runs one label upload through validate -> transcode -> store.

    Holds only its configuration and storage adapter, so calls for different
    owners never share state. Nothing is retried here.
    """

    def __init__(self, config: ImageUploadConfig, storage: LocalImageStorage | None = None):
        self.config = config
        self.storage = storage or LocalImageStorage(config.upload_dir)

    def initialize(self) -> Path:
        return self.storage.initialize()

    def upload(self, request: UploadRequest) -> UploadResult:
        start = time.perf_counter()
        logger.info(
            "Upload received owner_id={} declared_type={} size_bytes={}",
            request.owner_id,
            request.declared_mime_type,
            len(request.data),
        )

        outcome = validate_upload(request, self.config)
        if not outcome.accepted:
            logger.warning(
                "Upload rejected owner_id={} code={} reason={} detected_type={}",
                request.owner_id,
                outcome.error.code,
                outcome.reason,
                outcome.detected_type,
            )
            raise outcome.error
        logger.debug("Upload validated owner_id={} detected_type={}", request.owner_id, outcome.detected_type)

        try:
            normalized = transcode(request.data, self.config.max_image_width, self.config.image_quality)
        except ImageProcessingError as exc:
            logger.error("Upload transcode failed owner_id={} cause={}", request.owner_id, str(exc.cause))
            raise

        try:
            stored = self.storage.write(request.owner_id, normalized)
        except StorageError as exc:
            logger.error("Upload store failed owner_id={} cause={}", request.owner_id, str(exc.cause))
            raise

        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "Upload stored owner_id={} filename={} size_bytes={} duration_ms={:.2f}",
            request.owner_id,
            stored.filename,
            stored.size_bytes,
            duration_ms,
        )
        return UploadResult(filename=stored.filename, size_bytes=stored.size_bytes, mime_type=stored.mime_type)

    def delete(self, owner_id: str) -> bool:
        return self.storage.delete(owner_id)

    def exists(self, owner_id: str) -> bool:
        return self.storage.exists(owner_id)
