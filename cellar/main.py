from pathlib import Path
import sys
import time
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from fastapi.staticfiles import StaticFiles
from loguru import logger
import uvicorn

from cellar.config import Settings, settings
from cellar.db import init_db
from cellar.errors import register_exception_handlers
from cellar.routes.health import router as health_router
from cellar.routes.images import router as images_router
from cellar.routes.wines import router as wines_router
from cellar.services.uploads import ImageUploadService

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | req={extra[request_id]} | {name}:{function}:{line} | {message}"


def _configure_logging(app_settings: Settings) -> None:
    logger.configure(patcher=lambda record: record["extra"].setdefault("request_id", "-"))
    logger.remove()
    logger.add(sys.stderr, level=app_settings.log_level.upper(), format=LOG_FORMAT)
    if app_settings.log_dir:
        log_dir = Path(app_settings.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        logger.add(log_dir / "error.log", level="ERROR", format=LOG_FORMAT, rotation="5 MB", retention=5)
        logger.add(
            log_dir / "combined.log",
            level=app_settings.log_level.upper(),
            format=LOG_FORMAT,
            rotation="5 MB",
            retention=5,
        )


@asynccontextmanager
async def lifespan(app: FastAPI):
    app_settings = settings
    _configure_logging(app_settings)
    app.state.settings = app_settings
    logger.info(
        "Starting app app_name={} environment={} debug={} log_level={}",
        app_settings.app_name,
        app_settings.environment,
        app_settings.debug,
        app_settings.log_level,
    )
    init_db()
    uploads = ImageUploadService(app_settings.upload_config())
    uploads.initialize()
    app.state.uploads = uploads
    yield
    logger.info("Shutting down app app_name={}", app_settings.app_name)


app = FastAPI(title=settings.app_name, debug=settings.debug, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(health_router)
app.include_router(wines_router)
app.include_router(images_router)


@app.middleware("http")
async def add_request_context(request: Request, call_next) -> Response:
    request_id = request.headers.get("x-request-id", str(uuid4()))
    request.state.request_id = request_id
    start = time.perf_counter()
    with logger.contextualize(request_id=request_id):
        logger.info("Request start method={} path={}", request.method, request.url.path)
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("Request failed method={} path={}", request.method, request.url.path)
            raise
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "Request finish method={} path={} status={} duration_ms={:.2f}",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )
    response.headers["X-Request-ID"] = request_id
    return response

frontend_dist = Path("web/dist")
if frontend_dist.exists():
    app.mount("/", StaticFiles(directory=str(frontend_dist), html=True), name="web")


def run() -> None:
    """Serve the app with uvicorn (``cellar-api`` console script)."""
    uvicorn.run("cellar.main:app", host=settings.host, port=settings.port, reload=settings.debug)


if __name__ == "__main__":
    run()
