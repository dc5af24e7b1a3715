"""Request logging middleware.

Every request gets a request id: the caller's X-Request-ID when it is a
short token of [A-Za-z0-9_-], otherwise a fresh "req_<12 hex>". The id is
put on request.state (ApiResponse.request_id reads it) and echoed back in
the X-Request-ID response header.

Log format:
    INFO [POST] /api/v1/markets/MKT-1/trades → 200 (23ms) req_a1b2c3d4e5f6
5xx responses log at WARNING, health checks at DEBUG, and an exception
escaping the app is logged with its traceback before it propagates.
"""

import logging
import re
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("pm.request")

REQUEST_ID_HEADER = "X-Request-ID"
_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")
_QUIET_PATHS = frozenset({"/health"})


def resolve_request_id(incoming: str | None) -> str:
    if incoming and _REQUEST_ID_RE.match(incoming):
        return incoming
    return f"req_{uuid.uuid4().hex[:12]}"


def _level_for(path: str, status_code: int) -> int:
    if status_code >= 500:
        return logging.WARNING
    if path in _QUIET_PATHS:
        return logging.DEBUG
    return logging.INFO


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        path = request.url.path

        start = time.perf_counter()
        try:
            response: Response = await call_next(request)
        except Exception:
            logger.exception(
                "[%s] %s raised after %.0fms %s",
                request.method, path, (time.perf_counter() - start) * 1000, request_id,
            )
            raise
        elapsed_ms = (time.perf_counter() - start) * 1000

        response.headers[REQUEST_ID_HEADER] = request_id
        logger.log(
            _level_for(path, response.status_code),
            "[%s] %s → %d (%.0fms) %s",
            request.method, path, response.status_code, elapsed_ms, request_id,
        )
        return response
