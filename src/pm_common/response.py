"""Unified API response wrapper.

All API endpoints return this format:
{
    "code": 0,           // 0=success, non-0=AppError code
    "message": "success",
    "data": { ... },     // null on error
    "retryable": null,   // set on errors: may the same call succeed later?
    "integrity": null,   // set on errors: cryptographic integrity failure
    "timestamp": "...",
    "request_id": "..."
}
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from src.pm_common.errors import AppError


class ApiResponse(BaseModel):
    code: int = 0
    message: str = "success"
    data: Any = None
    retryable: bool | None = None
    integrity: bool | None = None
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    request_id: str = Field(default_factory=lambda: f"req_{uuid.uuid4().hex[:12]}")

    @property
    def ok(self) -> bool:
        return self.code == 0


def success_response(data: Any = None) -> ApiResponse:
    return ApiResponse(code=0, message="success", data=data)


def error_response(code: int, message: str, retryable: bool = False,
                   integrity: bool = False) -> ApiResponse:
    return ApiResponse(
        code=code, message=message, data=None, retryable=retryable, integrity=integrity
    )


def app_error_response(exc: AppError) -> ApiResponse:
    return error_response(exc.code, exc.message, exc.retryable, exc.integrity)
