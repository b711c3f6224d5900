"""Centralized exception handlers for the FastAPI app.

Register with register_exception_handlers(app). Maps domain and framework
exceptions to HTTP responses shaped {"error", "message", "details"}.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from lawdesk.core.config import get_settings
from lawdesk.domain.exceptions import LawDeskException

logger = logging.getLogger(__name__)

# Map domain error_code to HTTP status
_ERROR_CODE_STATUS: dict[str, int] = {
    "AUTHENTICATION_ERROR": 401,
    "PERMISSION_DENIED": 403,
    "VALIDATION_ERROR": 400,
    "UNSUPPORTED_CONTENT_TYPE": 400,
    "RESOURCE_NOT_FOUND": 404,
    "UPLOAD_INTENT_NOT_FOUND": 404,
    "UPLOAD_INTENT_MISMATCH": 409,
    "UPLOAD_INTENT_CLOSED": 409,
    "UPLOAD_INTENT_CONFLICT": 409,
    "DOCUMENT_VERSION_CONFLICT": 409,
    "STORAGE_OBJECT_NOT_VISIBLE": 409,
    "UPLOAD_KEY_MISMATCH": 422,
    "UPLOAD_SIZE_MISMATCH": 422,
    "STORAGE_UNAVAILABLE": 503,
    "STORAGE_NOT_FOUND": 404,
    "STORAGE_PERMISSION_ERROR": 403,
}


def status_for_error_code(error_code: str) -> int:
    """HTTP status for a domain error_code (400 when unmapped)."""
    return _ERROR_CODE_STATUS.get(error_code, 400)


def _lawdesk_exception_handler(request: Request, exc: LawDeskException) -> JSONResponse:
    """Return JSON from LawDeskException.to_dict() with appropriate status code."""
    return JSONResponse(
        status_code=status_for_error_code(exc.error_code),
        content=exc.to_dict(),
    )


def _rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 RATE_LIMITED (distinct from validation and authorization errors)."""
    logger.warning("Rate limit exceeded: path=%s limit=%s", request.url.path, exc.detail)
    return JSONResponse(
        status_code=429,
        content={
            "error": "RATE_LIMITED",
            "message": "Too many requests; try again later",
            "details": {"limit": str(exc.detail), "retryable": True},
        },
    )


def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return 422 with validation error details."""
    return JSONResponse(
        status_code=422,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": {"errors": jsonable_encoder(exc.errors()), "retryable": False},
        },
    )


def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Return JSON for Starlette HTTP exceptions (status + detail)."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "HTTP_ERROR", "message": exc.detail, "details": {}},
        headers=getattr(exc, "headers", None),
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500; include detail only when debug is True."""
    logger.exception("Unhandled exception: %s", exc)
    settings = get_settings()
    detail: Any = str(exc) if settings.debug else "Internal server error"
    return JSONResponse(
        status_code=500,
        content={"error": "INTERNAL_ERROR", "message": detail, "details": {}},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app.

    Call once after creating the app. Handlers: LawDeskException (and
    subclasses), RateLimitExceeded, RequestValidationError,
    StarletteHTTPException, generic Exception.
    """
    app.add_exception_handler(LawDeskException, _lawdesk_exception_handler)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
