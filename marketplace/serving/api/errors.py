"""
API Errors

Every failure leaves the API as ``{"error": str, "details"?: list}``.
Handlers raise the APIError subclasses below; anything else becomes a 500
whose cause is only logged.
"""

from typing import Any, List, Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from marketplace.validation import FieldError

logger = structlog.get_logger(__name__)


class APIError(Exception):
    """Base class for errors mapped onto the JSON error envelope"""
    status_code = 500

    def __init__(self, message: str, details: Optional[List[Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class BadRequestError(APIError):
    status_code = 400


class ValidationFailedError(BadRequestError):
    """Request body rejected by its schema"""

    def __init__(self, errors: List[FieldError], message: str = "Invalid data"):
        super().__init__(message, details=[error.to_dict() for error in errors])


class NotFoundError(APIError):
    status_code = 404


class ConflictError(APIError):
    status_code = 409


class UpstreamError(APIError):
    """External catalog call failed"""
    status_code = 500


def error_response(status_code: int, message: str, details: Optional[List[Any]] = None) -> JSONResponse:
    body = {"error": message}
    if details is not None:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body)


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    logger.info(
        "Request failed",
        path=request.url.path,
        status_code=exc.status_code,
        error=exc.message,
    )
    return error_response(exc.status_code, exc.message, exc.details)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed path, query or body values."""
    details = [
        {"path": [str(part) for part in error.get("loc", ())], "message": error.get("msg", ""), "code": error.get("type", "")}
        for error in exc.errors()
    ]
    return error_response(400, "Invalid request parameters", details)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error",
        path=request.url.path,
        method=request.method,
        error_type=type(exc).__name__,
        exc_info=exc,
    )
    return error_response(500, "Server error")


def register_error_handlers(app: FastAPI) -> None:
    """Install the envelope-producing exception handlers on ``app``."""
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
