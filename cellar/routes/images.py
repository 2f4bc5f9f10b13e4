from fastapi import APIRouter, File, Response, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse
from loguru import logger

from cellar.dependencies import SessionDep, UploadServiceDep
from cellar.exceptions import ImageNotFoundError, ImageUploadError
from cellar.models.upload import CANONICAL_MIME_TYPE
from cellar.models.wine import WineRead
from cellar.services import wines as wine_service

router = APIRouter(prefix="/api/wines", tags=["images"])


@router.get("/{wine_id}/image", response_class=FileResponse)
def get_wine_image(wine_id: str, session: SessionDep, uploads: UploadServiceDep) -> FileResponse:
    wine = wine_service.get_wine(session, wine_id)
    if wine.image_url is None or not uploads.exists(wine.id):
        logger.warning("Wine image missing wine_id={} image_url={}", wine_id, wine.image_url)
        raise ImageNotFoundError(wine_id)
    return FileResponse(uploads.storage.path(wine.id), media_type=CANONICAL_MIME_TYPE.value)


@router.post("/{wine_id}/image", response_model=WineRead)
async def upload_wine_image(
    wine_id: str,
    session: SessionDep,
    uploads: UploadServiceDep,
    image: UploadFile | None = File(default=None),
) -> WineRead:
    if image is None:
        raise ImageUploadError("No image file provided", suggestion="Send the label as multipart field 'image'")

    data = await image.read()
    logger.info(
        "Image upload request wine_id={} filename={} content_type={} size_bytes={}",
        wine_id,
        image.filename,
        image.content_type,
        len(data),
    )
    wine, result = await run_in_threadpool(
        wine_service.attach_image,
        session,
        wine_id,
        data,
        image.content_type or "",
        uploads,
    )
    logger.info("Image upload stored wine_id={} filename={} size_bytes={}", wine_id, result.filename, result.size_bytes)
    return WineRead.model_validate(wine)


@router.delete("/{wine_id}/image", status_code=status.HTTP_204_NO_CONTENT)
def delete_wine_image(wine_id: str, session: SessionDep, uploads: UploadServiceDep) -> Response:
    wine_service.detach_image(session, wine_id, uploads)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
