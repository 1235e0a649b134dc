from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel as PydanticBaseModel
from pydantic import ConfigDict, Field


class AppBaseModel(PydanticBaseModel):
    """Base model for all domain models."""

    model_config = ConfigDict(
        from_attributes=True,
        extra="forbid",
        populate_by_name=True,
    )


class ValueModel(AppBaseModel):
    """Base model for immutable analysis values."""

    model_config = ConfigDict(frozen=True)


class TimestampedModel(AppBaseModel):
    """Base model with timestamp fields."""

    created_at: datetime | None = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime | None = None


def ensure_aware(value: datetime | None) -> datetime | None:
    """Interpret naive datetimes as UTC so that all comparisons are well defined."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)
