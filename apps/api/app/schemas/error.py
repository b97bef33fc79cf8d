"""API error response schemas."""

from typing import Any
from typing import Literal

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    code: str
    message: str
    details: dict[str, Any] | None = None


class NotFoundError(BaseModel):
    code: Literal["RESOURCE_NOT_FOUND"]
    message: str


class PermissionDeniedError(BaseModel):
    code: Literal["PERMISSION_DENIED"]
    message: str


class UnavailableError(BaseModel):
    code: Literal["JOB_CREATE_FAILED", "PAYMENT_GATEWAY_UNAVAILABLE", "STORE_UNAVAILABLE"]
    message: str
