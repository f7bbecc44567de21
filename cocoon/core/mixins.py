"""Reusable document model mixins."""

from datetime import UTC, datetime

from pydantic import BaseModel, Field


def utc_now() -> datetime:
    """Return current UTC time truncated to milliseconds (BSON precision)."""
    now = datetime.now(UTC)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


class TimestampMixin(BaseModel):
    """Adds createdAt/updatedAt fields.

    Field names follow the stored documents; use the Python attribute names
    (created_at, updated_at) in code.

    Usage:
        class Subscription(TimestampMixin, Document):
            email: str
    """

    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")
    updated_at: datetime = Field(default_factory=utc_now, alias="updatedAt")
