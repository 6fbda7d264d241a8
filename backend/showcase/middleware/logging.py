"""
Response Showcase — Request Logging Middleware
================================================

What:  One structured log line per HTTP request: method, path, status,
       duration, request ID and client IP.
Why:   The contract routes answer most mistakes with a 400 envelope; the
       access line is what ties that envelope back to a request in the logs.
How:   Measures from middleware entry to response return; chooses the log
       level from the status class so 4xx/5xx stand out.
Who:   Applied to every request via Starlette middleware.
When:  After RequestIDMiddleware (reads the request ID it stored).

Structured fields (passed as `extra`, available to any JSON formatter):
    request_id, method, path, status, duration_ms, client_ip

What we log vs what we DON'T log:
    ✅ Log: method, path, status, duration, IP, request ID
    ❌ Don't log: request bodies or uploaded file contents (may hold personal
       data; uploads may be megabytes)
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from showcase.middleware.request_id import request_id_var

logger = logging.getLogger("showcase.access")

# Health checks arrive every few seconds from monitors and orchestrators and
# would drown out real traffic
QUIET_PATHS = {"/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs structured information about each HTTP request and response.

    Performance tracking:
        Duration covers everything behind the middleware: body decoding,
        schema validation, the handler and response shaping.

    Why not uvicorn's access log:
        It has no request ID, no duration and cannot skip QUIET_PATHS, so
        setup_logging() raises uvicorn.access to WARNING and this line
        replaces it.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # Why time.perf_counter: monotonic and sub-microsecond; time.time()
        # can jump with clock adjustments
        start_time = time.perf_counter()

        # Why the guard: request.client is None under ASGI test transports
        client_ip = getattr(request.client, "host", "unknown") if request.client else "unknown"
        method = request.method
        path = request.url.path

        if path in QUIET_PATHS:
            return await call_next(request)

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        rid = request_id_var.get("")

        # Level by status class, so alerting can key on severity:
        # 5xx → ERROR (our bug, e.g. a handler breaking its contract)
        # 4xx → WARNING (client sent something the contract rejects)
        # 2xx/3xx → INFO
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
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
