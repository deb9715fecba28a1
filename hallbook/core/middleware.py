"""HTTP middleware: request tracing and response hardening."""

import logging
import time
import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from hallbook.config import settings

logger = logging.getLogger(__name__)

# Requests that change booking or hall state are always logged
WRITE_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}
HSTS_HEADER = "max-age=31536000; includeSubDomains"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tag every request with an id and log writes and slow reads."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        started = time.perf_counter()
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request.state.request_id = request_id

        response = await call_next(request)
        elapsed = time.perf_counter() - started

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{elapsed:.3f}s"

        summary = (
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"in {elapsed:.3f}s (request_id={request_id})"
        )
        if elapsed > settings.slow_request_seconds:
            logger.warning(f"Slow request: {summary}")
        elif request.method in WRITE_METHODS:
            logger.info(summary)

        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        response = await call_next(request)
        response.headers.update(SECURITY_HEADERS)
        if not settings.debug:
            response.headers["Strict-Transport-Security"] = HSTS_HEADER
        return response
