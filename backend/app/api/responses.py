"""Envelope helpers and the exception handlers that produce failure envelopes."""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.errors import AppError, InternalError
from app.schemas.common import ErrorEnvelope

logger = logging.getLogger(__name__)


def ok(data: Any) -> dict[str, Any]:
    """Wrap ``data`` in the success envelope; the route's response_model serializes it."""
    return {"success": True, "data": data}


def error_response(message: str, status_code: int) -> JSONResponse:
    body = ErrorEnvelope(error=message, status=status_code)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def _describe_validation_error(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()) if item != "body")
        message = error.get("msg", "Invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Invalid request"


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return error_response(exc.message, exc.status_code)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(_describe_validation_error(exc), status.HTTP_400_BAD_REQUEST)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(str(exc.detail), exc.status_code)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the unexpected exception and answer with a generic InternalError envelope."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    error = InternalError()
    return error_response(error.message, error.status_code)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_error_handler)
