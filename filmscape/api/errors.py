"""
Exception handlers translating failures into JSON error responses.

Every error body has the shape ``{"error": ..., "message": ...}``;
validation errors add ``details`` with one entry per offending field, and
unhandled errors add ``stack`` in development.
"""

import logging
import traceback
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from filmscape.api import config
from filmscape.database.exceptions import DuplicateEntryError

logger = logging.getLogger(__name__)


def error_body(status_code: int, message: str, **extra) -> dict:
    try:
        title = HTTPStatus(status_code).phrase
    except ValueError:
        title = "Error"
    return {"error": title, "message": message, **extra}


def _field_name(loc) -> str:
    # Drop the 'body' / 'query' / 'path' prefix FastAPI puts first
    parts = [str(p) for p in loc[1:]] if len(loc) > 1 else [str(p) for p in loc]
    return ".".join(parts)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    details = [
        {"field": _field_name(err.get("loc", ())), "message": err.get("msg", "Invalid value")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"error": "Validation Error", "message": "Invalid input data", "details": details},
    )


async def duplicate_entry_handler(request: Request, exc: DuplicateEntryError):
    return JSONResponse(status_code=409, content=error_body(409, exc.message))


async def integrity_error_handler(request: Request, exc: IntegrityError):
    reason = str(exc.orig).lower()
    if "unique" in reason:
        return JSONResponse(status_code=409, content=error_body(409, "Resource already exists"))
    if "foreign key" in reason:
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid Reference", "message": "Referenced record does not exist"},
        )
    logger.warning("Constraint violation on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(status_code=400, content=error_body(400, "Constraint violation"))


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    body = error_body(500, "Internal Server Error")
    if config.is_development():
        body["message"] = str(exc) or body["message"]
        body["stack"] = traceback.format_exception(type(exc), exc, exc.__traceback__)
    return JSONResponse(status_code=500, content=body)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all handlers and the request-size guard to ``app``."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(DuplicateEntryError, duplicate_entry_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.middleware("http")
    async def limit_body_size(request: Request, call_next):
        limit = config.get_max_body_bytes()
        length = request.headers.get("content-length")
        if length and length.isdigit():
            too_large = int(length) > limit
        else:
            # Chunked or unsized body: count the bytes actually received
            too_large = len(await request.body()) > limit
        if too_large:
            logger.info("Rejected %s %s: body larger than %s bytes", request.method, request.url.path, limit)
            return JSONResponse(
                status_code=413,
                content=error_body(413, "Request body exceeds the maximum allowed size"),
            )
        return await call_next(request)
