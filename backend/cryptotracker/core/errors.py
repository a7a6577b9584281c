"""
Error taxonomy and the JSON error handlers installed on the application.

Every error response body has the shape ``{"error": "<fixed phrase>"}``.
"""
import logging
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class CryptoTrackerError(Exception):
    """Base class for errors raised by the services."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_phrase = "internal error"


class ValidationError(CryptoTrackerError):
    """A required field is missing or a parameter is out of range."""
    status_code = status.HTTP_400_BAD_REQUEST
    error_phrase = None  # messages are already fixed phrases


class AuthError(CryptoTrackerError):
    """Bad credentials or missing authorization."""
    status_code = status.HTTP_401_UNAUTHORIZED
    error_phrase = "unauthorized"


class InvalidToken(AuthError):
    """Session token is malformed, forged or expired."""
    error_phrase = "invalid token"


class ConflictError(CryptoTrackerError):
    """Username already taken."""
    status_code = status.HTTP_400_BAD_REQUEST
    error_phrase = "user exists"


class UpstreamError(CryptoTrackerError):
    """Third-party market API or network failure."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_phrase = "upstream error"


def error_body(message: str) -> dict:
    return {"error": message}


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def service_error_handler(request: Request, exc: CryptoTrackerError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc}")
    else:
        logger.info(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.error_phrase or str(exc)),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info(f"Rejected request to {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("invalid request"),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("internal error"),
    )


def install_error_handlers(app: FastAPI):
    """Register the JSON error handlers on the application."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(CryptoTrackerError, service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
