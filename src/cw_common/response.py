"""ApiResponse envelope shared by every route.

{
    "code": 0,              // 0 on success, AppError.code otherwise
    "message": "success",
    "data": { ... },        // payload on success; AppError.details (or null) on failure
    "timestamp": "...",
    "request_id": "req_..." // same id RequestLogMiddleware logged for this request
}

Amounts inside `data` are always decimal strings.
"""

import uuid
from typing import Any

from pydantic import BaseModel, Field
from starlette.requests import Request

from src.cw_common.datetime_utils import utc_now


def _new_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


class ApiResponse(BaseModel):
    code: int = 0
    message: str = "success"
    data: Any = None
    timestamp: str = Field(default_factory=lambda: utc_now().isoformat())
    request_id: str = Field(default_factory=_new_request_id)


def _request_id(request: Request | None) -> str:
    if request is None:
        return _new_request_id()
    return getattr(request.state, "request_id", None) or _new_request_id()


def success_response(data: Any = None, request: Request | None = None) -> ApiResponse:
    return ApiResponse(data=data, request_id=_request_id(request))


def error_response(
    code: int,
    message: str,
    details: dict[str, Any] | None = None,
    request: Request | None = None,
) -> ApiResponse:
    return ApiResponse(code=code, message=message, data=details, request_id=_request_id(request))
