from fastapi import APIRouter, Response, status
from loguru import logger

from cellar.dependencies import SessionDep, UploadServiceDep
from cellar.models.wine import WineCreate, WineRead, WineUpdate
from cellar.services import wines as wine_service

router = APIRouter(prefix="/api/wines", tags=["wines"])


@router.get("", response_model=list[WineRead])
def list_wines(session: SessionDep) -> list[WineRead]:
    wines = wine_service.list_wines(session)
    logger.info("Wines fetched count={}", len(wines))
    return [WineRead.model_validate(wine) for wine in wines]


@router.get("/{wine_id}", response_model=WineRead)
def get_wine(wine_id: str, session: SessionDep) -> WineRead:
    return WineRead.model_validate(wine_service.get_wine(session, wine_id))


@router.post("", response_model=WineRead, status_code=status.HTTP_201_CREATED)
def create_wine(payload: WineCreate, session: SessionDep) -> WineRead:
    logger.info("Creating wine name={} vintage={}", payload.name, payload.vintage)
    return WineRead.model_validate(wine_service.create_wine(session, payload))


@router.put("/{wine_id}", response_model=WineRead)
def update_wine(wine_id: str, payload: WineUpdate, session: SessionDep) -> WineRead:
    return WineRead.model_validate(wine_service.update_wine(session, wine_id, payload))


@router.delete("/{wine_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_wine(wine_id: str, session: SessionDep, uploads: UploadServiceDep) -> Response:
    wine_service.delete_wine(session, wine_id, uploads)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
