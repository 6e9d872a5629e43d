"""Per-request correlation id for unfurl API calls.

A caller may pass its own ``X-Request-ID``; anything that isn't a short token
of safe characters is replaced with a fresh id so it can't forge log lines.
The id lives in a ContextVar, so the logging filter and the unfurl endpoint
(which returns it in the response body) see it without it being threaded
through the pipeline.
"""

import contextvars
import re
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 128

_SAFE_ID_RE = re.compile(r"^[A-Za-z0-9._:-]+$")

request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "request_id", default=""
)


def accept_request_id(value: str | None) -> str:
    """Return the caller's id if it is safe to log, else a new uuid4 hex."""
    if value and len(value) <= MAX_REQUEST_ID_LENGTH and _SAFE_ID_RE.match(value):
        return value
    return uuid.uuid4().hex


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        rid = accept_request_id(request.headers.get(REQUEST_ID_HEADER))
        token = request_id_var.set(rid)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        response.headers[REQUEST_ID_HEADER] = rid
        return response


def get_request_id() -> str | None:
    """Current request id, or None outside an API request (library and CLI use)."""
    return request_id_var.get() or None
