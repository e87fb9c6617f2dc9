"""
API Middleware

- Request logging: every log line emitted while serving a request carries its
  request id, method and path
- Security headers
"""

import time
import uuid
from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Liveness and readiness endpoints polled by orchestrators, logged at debug only
QUIET_PATHS = frozenset({"/health/live", "/health/ready"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Bind request context for logging and report each response"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        path = request.url.path

        with structlog.contextvars.bound_contextvars(
            request_id=request_id,
            method=request.method,
            path=path,
        ):
            try:
                response = await call_next(request)
            except Exception:
                logger.error(
                    "Request failed",
                    duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
                    client=request.client.host if request.client else None,
                    exc_info=True,
                )
                raise
            duration_ms = (time.perf_counter() - start_time) * 1000

            if path in QUIET_PATHS:
                log = logger.debug
            elif response.status_code >= 500:
                log = logger.error
            elif response.status_code >= 400:
                log = logger.warning
            else:
                log = logger.info

            log(
                "Request completed",
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
                client=request.client.host if request.client else None,
            )

        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        # Resource data changes on every write
        response.headers.setdefault("Cache-Control", "no-store")

        return response
