"""HTTP middleware: request logging with correlation IDs and security headers."""

import logging
import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from musicstats.infrastructure.observability.logging import (
    get_correlation_id,
    set_correlation_id,
)

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "Content-Security-Policy": "default-src 'self'",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging HTTP requests and responses."""

    # Hey future me, the correlation id is set BEFORE call_next so every log line of the request
    # carries it, and it's echoed back in X-Correlation-ID so callers can quote it. Query strings
    # contain OAuth codes on the callback route, so we log the path only.
    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        set_correlation_id(request.headers.get("X-Correlation-ID"))

        method = request.method
        path = request.url.path
        client_ip = request.client.host if request.client else "unknown"

        logger.info(
            "→ %s %s",
            method,
            path,
            extra={"method": method, "path": path, "client_ip": client_ip},
        )

        start_time = time.time()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(
                "Request failed: %s %s",
                method,
                path,
                extra={
                    "method": method,
                    "path": path,
                    "duration_ms": int((time.time() - start_time) * 1000),
                    "error_type": type(e).__name__,
                },
            )
            raise

        duration_ms = int((time.time() - start_time) * 1000)
        logger.info(
            "%s %s %s → %d (%dms)",
            "✓" if response.status_code < 400 else "✗",
            method,
            path,
            response.status_code,
            duration_ms,
            extra={
                "method": method,
                "path": path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        response.headers["X-Correlation-ID"] = get_correlation_id()
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds CSP, nosniff, frame-deny and HSTS headers to every response."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response
