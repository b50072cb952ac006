"""
Error Handling for Book Tracker

Centralized error handling:
- {"message", "code"} error bodies for every failure
- Logging of errors
- Exception translation (validation -> 400, storage -> 500)
"""

import traceback
from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from ...errors import BookTrackerError, ConflictError
from .logging import get_request_id


INTERNAL_ERROR_MESSAGE = "An unexpected error occurred."


def create_error_response(
    message: str,
    code: str,
    status_code: int,
    headers: dict = None,
    **extra: Any,
) -> JSONResponse:
    """Create standardized error response."""
    content = {"message": message, "code": code}
    content.update(extra)
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(content),
        headers=headers,
    )


def _format_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request."
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    if location:
        return f"Invalid request: {location}: {first.get('msg', 'invalid value')}"
    return f"Invalid request: {first.get('msg', 'invalid value')}"


_STATUS_CODES = {
    400: "INVALID_INPUT",
    401: "UNAUTHENTICATED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
}


def http_error_response(exc: StarletteHTTPException) -> JSONResponse:
    """Framework HTTP error (unknown route, wrong method) in the API error shape."""
    return create_error_response(
        message=str(exc.detail),
        code=_STATUS_CODES.get(exc.status_code, "HTTP_ERROR"),
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


def setup_exception_handlers(app):
    """Register exception handlers with FastAPI app."""

    @app.exception_handler(BookTrackerError)
    async def booktracker_exception_handler(request: Request, exc: BookTrackerError):
        logger.info(f"{request.method} {request.url.path}: {exc.code} - {exc.message}")
        extra = exc.extra_content() if isinstance(exc, ConflictError) else {}
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return create_error_response(
            message=exc.message,
            code=exc.code,
            status_code=exc.status_code,
            headers=headers,
            **extra,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        message = _format_validation_error(exc)
        logger.info(f"{request.method} {request.url.path}: {message}")
        return create_error_response(
            message=message,
            code="INVALID_INPUT",
            status_code=400,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return http_error_response(exc)

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(request: Request, exc: SQLAlchemyError):
        logger.error(
            f"Database error on {request.method} {request.url.path} "
            f"[{get_request_id()}]: {type(exc).__name__}: {exc}\n{traceback.format_exc()}"
        )
        return create_error_response(
            message=INTERNAL_ERROR_MESSAGE,
            code="INTERNAL_ERROR",
            status_code=500,
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(
            f"Unhandled exception on {request.method} {request.url.path} "
            f"[{get_request_id()}]: {type(exc).__name__}: {exc}\n{traceback.format_exc()}"
        )
        return create_error_response(
            message=INTERNAL_ERROR_MESSAGE,
            code="INTERNAL_ERROR",
            status_code=500,
        )
