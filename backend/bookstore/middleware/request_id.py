"""
Bookstore Backend — Request ID Middleware
===========================================

What:  Gives every request a correlation ID, echoed as X-Request-ID.
How:   A client-supplied X-Request-ID is kept only if it is a short token of
       letters, digits, dots, dashes and underscores; anything else (empty,
       over-long, spaces, control characters) is replaced by a fresh 8-char
       ID. The accepted ID lands in a ContextVar read by the access log and
       the exception handlers, which put it in every ErrorResponse.
When:  Outermost middleware, so even rejected requests carry an ID.
"""

import logging
import re
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

_REQUEST_ID_PATTERN = re.compile(r"[A-Za-z0-9._-]{1,64}")

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


def accept_request_id(candidate: Optional[str]) -> str:
    """Client's ID if it is safe to log and echo, otherwise a new one."""
    if candidate and _REQUEST_ID_PATTERN.fullmatch(candidate):
        return candidate
    rid = new_request_id()
    if candidate:
        logger.debug("Replaced malformed %s header with %s", REQUEST_ID_HEADER, rid)
    return rid


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assigns the request's correlation ID and returns it to the client."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = accept_request_id(request.headers.get(REQUEST_ID_HEADER))
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
