"""Uniform response envelope.

Success responses look like ``{"success": true, "data": ...}`` or
``{"success": true, "message": "..."}``; failures are produced by the
exception handlers as ``{"success": false, "type": ..., "message": ...}``.
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """Success envelope carrying a payload."""

    success: bool = True
    data: T


class MessageEnvelope(BaseModel):
    """Success envelope carrying only a human-readable message."""

    success: bool = True
    message: str


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class ErrorEnvelope(BaseModel):
    """Failure envelope. All API errors use this shape."""

    success: bool = False
    type: str
    message: str


def ok(data: T) -> Envelope[T]:
    return Envelope(data=data)


def message(text: str) -> MessageEnvelope:
    return MessageEnvelope(message=text)


def error_content(error_type: str, text: str) -> dict[str, Any]:
    """JSON body for a failure response."""
    return ErrorEnvelope(type=error_type, message=text).model_dump()
