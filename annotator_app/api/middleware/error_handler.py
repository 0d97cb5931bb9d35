"""
API Middleware - Global Error Handler

Maps domain exceptions and framework errors to JSON responses with proper
HTTP status codes.
"""
import logging
from datetime import datetime, timezone

from fastapi import Request, Response, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from starlette.exceptions import HTTPException as StarletteHTTPException

from annotator_app.shared.exceptions import DomainException

logger = logging.getLogger(__name__)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


async def domain_exception_handler(request: Request, exc: DomainException) -> Response:
    """
    Handler for domain exceptions.

    The status code comes from the exception class: 400 for validation
    errors, 404 for missing resources, 401 for bad credentials, 500 otherwise.
    """
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__}: {exc.message}",
                     extra={"url": str(request.url), "method": request.method})
    else:
        logger.warning(f"{type(exc).__name__}: {exc.message}",
                       extra={"url": str(request.url), "method": request.method})

    error_response = {
        "success": False,
        "error": exc.message,
        "status_code": exc.status_code,
        "timestamp": _timestamp()
    }
    error_response.update(exc.to_dict())

    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(error_response)
    )


async def global_exception_handler(request: Request, exc: Exception) -> Response:
    """
    Global exception handler for all unhandled exceptions.

    Args:
        request: FastAPI request object
        exc: Exception that was raised

    Returns:
        JSON error response with status 500
    """
    logger.error(f"Unhandled exception: {type(exc).__name__}: {str(exc)}",
                 extra={"url": str(request.url), "method": request.method})

    error_response = {
        "success": False,
        "error": "Internal server error",
        "error_type": type(exc).__name__,
        "timestamp": _timestamp()
    }

    return JSONResponse(
        status_code=500,
        content=error_response
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
    """Handler for FastAPI and Starlette HTTP exceptions"""
    logger.warning(f"HTTP exception: {exc.status_code} - {exc.detail}",
                   extra={"url": str(request.url), "method": request.method})

    error_response = {
        "success": False,
        "error": exc.detail or "HTTP error",
        "status_code": exc.status_code,
        "timestamp": _timestamp()
    }

    return JSONResponse(
        status_code=exc.status_code,
        content=error_response
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> Response:
    """
    Handler for request body validation errors.

    Malformed request bodies are client input errors, reported as 400 like
    domain validation failures.
    """
    logger.warning(f"Validation error: {exc.errors()}",
                   extra={"url": str(request.url), "method": request.method})

    error_response = {
        "success": False,
        "error": "Request validation failed",
        "error_type": "ValidationError",
        "validation_errors": jsonable_encoder(exc.errors()),
        "timestamp": _timestamp()
    }

    return JSONResponse(
        status_code=400,
        content=error_response
    )


def setup_exception_handlers(app):
    """
    Set up all exception handlers for the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(DomainException, domain_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    logger.info("Global exception handlers configured")
