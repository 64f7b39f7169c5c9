"""
PixTag Backend — Request Logging Middleware
============================================

What:  One access log line per HTTP request, on the "pixtag.access" logger.
How:   Times the request and logs method, path, status, duration, request ID
       and client address once the response is ready.

Example:
    2025-01-15T12:00:00 [INFO] pixtag.access: POST /api/images 201 12.4ms [a1b2c3d4] from 127.0.0.1

Request bodies (uploaded bytes, label names) are never logged.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from pixtag.middleware.request_id import request_id_var

logger = logging.getLogger("pixtag.access")

# Probe and static-file traffic would drown the interesting lines
QUIET_PATH_PREFIXES = ("/health", "/api/files/")


def level_for_status(status: int) -> int:
    """5xx → ERROR, 4xx → WARNING, everything else → INFO."""
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs each HTTP request with its outcome and duration.

    Successful requests to quiet paths (health probes, image files) are
    skipped; failures on those paths are still logged.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()

        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        path = request.url.path

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        if status < 400 and path.startswith(QUIET_PATH_PREFIXES):
            return response

        rid = request_id_var.get("")
        logger.log(
            level_for_status(status),
            "%s %s %d %.1fms [%s] from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
