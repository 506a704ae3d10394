# Common API response schemas.
# Created: 2026-10-12

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class APIResponse(BaseModel):
    """Base response wrapper."""

    model_config = {"from_attributes": True}


class ErrorResponse(APIResponse):
    """Standard error envelope."""

    status: int
    error: str
    message: str


class DataResponse(APIResponse, Generic[T]):
    """Single value wrapped as ``{"data": ...}``."""

    data: T
