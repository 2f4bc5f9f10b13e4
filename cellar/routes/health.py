import time
from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from cellar.config import settings
from cellar.db import ping
from cellar.dependencies import SessionDep

router = APIRouter(prefix="/api", tags=["health"])

_started = time.monotonic()


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    uptime_seconds: float
    environment: str
    database: str


@router.get("/health", response_model=HealthResponse, responses={503: {"model": HealthResponse}})
def health(session: SessionDep):
    health = HealthResponse(
        status="ok",
        timestamp=datetime.now(timezone.utc).isoformat(),
        uptime_seconds=round(time.monotonic() - _started, 3),
        environment=settings.environment,
        database="unknown",
    )
    try:
        ping(session)
        health.database = "connected"
    except SQLAlchemyError as exc:
        logger.error("Health check failed database disconnected error={}", str(exc))
        health.database = "disconnected"
        health.status = "degraded"
        return JSONResponse(status_code=503, content=health.model_dump())
    return health
