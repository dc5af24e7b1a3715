"""Unified API response wrapper.

All API endpoints return this format:
{
    "code": 0,           // 0=success, non-0=stable error code (see errors.py)
    "message": "success",
    "data": { ... },     // null on error
    "timestamp": "...",
    "request_id": "..."
}

Decimal amounts are serialized as strings by the schema layer
(model_dump(mode="json")) so no precision is lost on the wire.
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field
from starlette.requests import Request


def _new_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


class ApiResponse(BaseModel):
    code: int = 0
    message: str = "success"
    data: Any = None
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    request_id: str = Field(default_factory=_new_request_id)


def request_id_of(request: Request | None) -> str:
    """Read request_id injected by RequestLogMiddleware, fallback to a fresh one."""
    if request is None:
        return _new_request_id()
    return getattr(request.state, "request_id", None) or _new_request_id()


def success_response(data: Any = None, request: Request | None = None) -> ApiResponse:
    return ApiResponse(code=0, message="success", data=data, request_id=request_id_of(request))


def error_response(code: int, message: str, request: Request | None = None) -> ApiResponse:
    return ApiResponse(code=code, message=message, data=None, request_id=request_id_of(request))
