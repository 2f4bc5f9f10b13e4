from loguru import logger
from sqlalchemy import select
from sqlalchemy.orm import Session

from cellar.exceptions import ImageNotFoundError, WineNotFoundError
from cellar.models.records import WineRecord
from cellar.models.upload import UploadRequest, UploadResult
from cellar.models.wine import WineCreate, WineUpdate
from cellar.services.uploads import ImageUploadService


def list_wines(session: Session) -> list[WineRecord]:
    wines = list(session.scalars(select(WineRecord).order_by(WineRecord.created_at.desc())))
    logger.debug("Wines listed count={}", len(wines))
    return wines


def get_wine(session: Session, wine_id: str) -> WineRecord:
    wine = session.get(WineRecord, wine_id)
    if wine is None:
        logger.warning("Wine not found wine_id={}", wine_id)
        raise WineNotFoundError(wine_id)
    return wine


def create_wine(session: Session, payload: WineCreate) -> WineRecord:
    wine = WineRecord(**payload.to_record_fields())
    session.add(wine)
    session.commit()
    session.refresh(wine)
    logger.info("Wine created wine_id={} name={} vintage={}", wine.id, wine.name, wine.vintage)
    return wine


def update_wine(session: Session, wine_id: str, payload: WineUpdate) -> WineRecord:
    wine = get_wine(session, wine_id)
    changes = payload.to_record_fields()
    for field, value in changes.items():
        setattr(wine, field, value)
    session.commit()
    session.refresh(wine)
    logger.info("Wine updated wine_id={} fields={}", wine_id, sorted(changes))
    return wine


def delete_wine(session: Session, wine_id: str, uploads: ImageUploadService) -> None:
    """Delete the label image if one was stored, then the record.

    A storage failure leaves the record in place so the delete can be retried.
    """
    wine = get_wine(session, wine_id)
    had_image = wine.image_url is not None
    if had_image:
        uploads.delete(wine_id)
    session.delete(wine)
    session.commit()
    logger.info("Wine deleted wine_id={} had_image={}", wine_id, had_image)


def attach_image(session: Session, wine_id: str, data: bytes, content_type: str, uploads: ImageUploadService) -> tuple[WineRecord, UploadResult]:
    wine = get_wine(session, wine_id)
    result = uploads.upload(UploadRequest(owner_id=wine.id, data=data, declared_mime_type=content_type))
    wine.image_url = result.filename
    session.commit()
    session.refresh(wine)
    return wine, result


def detach_image(session: Session, wine_id: str, uploads: ImageUploadService) -> None:
    wine = get_wine(session, wine_id)
    if wine.image_url is None:
        raise ImageNotFoundError(wine_id)
    removed = uploads.delete(wine_id)
    wine.image_url = None
    session.commit()
    logger.info("Wine image removed wine_id={} file_removed={}", wine_id, removed)
