"""
Exception handlers translating failures into JSON error responses.

Response body: ``{"detail", "code", "suggestion"?, "details"?, "fields"?, "request_id"}``.
"""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from cellar.config import settings
from cellar.exceptions import CellarError


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "-")


def _respond(request: Request, status_code: int, content: dict[str, Any]) -> JSONResponse:
    content["request_id"] = _request_id(request)
    return JSONResponse(status_code=status_code, content=content)


async def cellar_error_handler(request: Request, exc: CellarError) -> JSONResponse:
    cause = getattr(exc, "cause", None)
    if exc.operational:
        logger.warning(
            "Application error method={} path={} status={} code={} message={} cause={}",
            request.method,
            request.url.path,
            exc.status_code,
            exc.code,
            exc.message,
            cause,
        )
    else:
        logger.opt(exception=exc).error(
            "Infrastructure error method={} path={} status={} code={} cause={}",
            request.method,
            request.url.path,
            exc.status_code,
            exc.code,
            cause,
        )
    return _respond(request, exc.status_code, exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields: dict[str, list[str]] = {}
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(location) or "body"
        fields.setdefault(field, []).append(error.get("msg", "Invalid value"))
    logger.warning("Validation error method={} path={} fields={}", request.method, request.url.path, fields)
    return _respond(
        request,
        400,
        {"detail": "Validation failed", "code": "VALIDATION_ERROR", "fields": fields},
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.opt(exception=exc).error("Database integrity error method={} path={}", request.method, request.url.path)
    return _respond(
        request,
        409,
        {"detail": "A record with this value already exists", "code": "DUPLICATE_ENTRY"},
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.opt(exception=exc).error("Database error method={} path={}", request.method, request.url.path)
    return _respond(request, 500, {"detail": "Database operation failed", "code": "DATABASE_ERROR"})


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404 and exc.detail == "Not Found":
        logger.warning("Route not found method={} path={}", request.method, request.url.path)
        return _respond(
            request,
            404,
            {"detail": f"Cannot {request.method} {request.url.path}", "code": "ROUTE_NOT_FOUND"},
        )
    return _respond(request, exc.status_code, {"detail": exc.detail, "code": "HTTP_ERROR"})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error("Unhandled error method={} path={}", request.method, request.url.path)
    detail = str(exc) if settings.debug else "An unexpected error occurred"
    return _respond(request, 500, {"detail": detail, "code": "INTERNAL_SERVER_ERROR"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CellarError, cellar_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
