"""
Response Showcase — Request ID Middleware
===========================================

What:  Assigns a correlation ID to each incoming request and echoes it back.
Why:   Lets a client quote the ID from an error body or header and lets us
       find every log line belonging to that request.
How:   Reuses a client-sent X-Request-ID or generates a short UUID, stores it
       in a ContextVar and in request.state, and sets the response header.
Who:   Applied to every request via Starlette middleware.
When:  First middleware in the chain, so every later log line can read the ID.

Where the ID shows up:
    - X-Request-ID response header (exposed to browsers through CORS)
    - request_id in 404 / 413 / 500 error bodies
    - the [rid] prefix of handler, validation and access log lines
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# ── Context Variable ──────────────────────────────────────────────────────
# What: Coroutine-local storage for the current request ID
# Why ContextVar: concurrent requests share one thread on the event loop;
# each task gets its own copy of the context, so IDs never leak between them.
# Alternative: threading.local, which is per thread and so shared by every
# request the loop is serving.
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Behavior:
        1. Use the client's X-Request-ID header when present
        2. Otherwise generate the first 8 characters of a UUID4
        3. Store in ContextVar (loggers, exception handlers) and request.state
        4. Add to the response headers

    Why accept client-provided IDs:
        A frontend can tag a user action before sending it and then find the
        server's log lines for that exact action.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # Why short UUID: 8 hex chars are enough to correlate one demo
        # server's logs and stay readable; an empty header counts as absent
        rid = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())[:8]

        # Why both: ContextVar for middleware, loggers and exception handlers;
        # request.state for code that only has the Request
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)

        # Why: the client can quote it in a bug report
        response.headers[REQUEST_ID_HEADER] = rid
        return response
