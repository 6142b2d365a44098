"""
ParcelBD Backend — Request Logging Middleware
==============================================

What:  One access-log line per HTTP request, plus an X-Response-Time header.
How:   Wraps the downstream app, measures wall time, and logs
       `METHOD path -> status (ms) rid=... ip=...` on the "parcelbd.access"
       logger at a level derived from the status class.
When:  Runs inside RequestIDMiddleware, so the request ID is already set.

Request bodies are never logged (they carry names and email addresses).
Successful /health probes are not logged; failing ones are.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from parcelbd.middleware.request_id import request_id_var

logger = logging.getLogger("parcelbd.access")

QUIET_PATHS = frozenset({"/health"})


def level_for_status(status_code: int) -> int:
    """5xx → ERROR, 4xx → WARNING, everything else INFO."""
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Access log for the parcel and payment API."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        response.headers["X-Response-Time"] = f"{elapsed_ms:.1f}ms"

        path = request.url.path
        if path in QUIET_PATHS and response.status_code < 400:
            return response

        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")
        logger.log(
            level_for_status(response.status_code),
            "%s %s -> %d (%.1fms) rid=%s ip=%s",
            request.method,
            path,
            response.status_code,
            elapsed_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "http_method": request.method,
                "http_path": path,
                "http_status": response.status_code,
                "elapsed_ms": round(elapsed_ms, 2),
            },
        )
        return response
