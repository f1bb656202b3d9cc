"""
Typed Cache - Cache Entry Options

Per-entry expiration and priority settings handed to a ByteCache backend.
The typed layer never interprets these; only backends do.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CacheItemPriority(str, Enum):
    """Eviction priority hint for a cache entry."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    NEVER_REMOVE = "never_remove"


class CacheEntryOptions(BaseModel):
    """
    Expiration policy for a single cache entry.

    Mutable on purpose: get_or_create hands a fresh instance to the value
    factory, which may adjust expiration before the entry is written.
    Assignments are validated.
    """

    absolute_expiration: datetime | None = Field(
        default=None, description="Point in time after which the entry expires"
    )
    absolute_expiration_relative_to_now: timedelta | None = Field(
        default=None, description="Lifetime of the entry measured from the time it is written"
    )
    sliding_expiration: timedelta | None = Field(
        default=None, description="Entry expires if not accessed for this long (never past the absolute deadline)"
    )
    priority: CacheItemPriority = Field(default=CacheItemPriority.NORMAL, description="Eviction priority hint")

    model_config = ConfigDict(validate_assignment=True)

    @field_validator("absolute_expiration")
    @classmethod
    def validate_absolute_expiration(cls, v: datetime | None) -> datetime | None:
        """Naive datetimes are taken to be UTC."""
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v

    @field_validator("absolute_expiration_relative_to_now", "sliding_expiration")
    @classmethod
    def validate_positive_window(cls, v: timedelta | None) -> timedelta | None:
        if v is not None and v <= timedelta(0):
            raise ValueError("expiration window must be positive")
        return v

    def set_absolute_expiration(self, when: datetime | timedelta) -> CacheEntryOptions:
        """Set an absolute deadline, either as a point in time or relative to now."""
        if isinstance(when, timedelta):
            self.absolute_expiration_relative_to_now = when
        else:
            self.absolute_expiration = when
        return self

    def set_sliding_expiration(self, window: timedelta) -> CacheEntryOptions:
        self.sliding_expiration = window
        return self

    def resolve_absolute_expiration(self, now: datetime | None = None) -> datetime | None:
        """
        Compute the absolute deadline for an entry written at ``now``.

        When both an absolute time and a relative lifetime are set, the
        earlier deadline wins.
        """
        now = now or datetime.now(UTC)
        deadlines = []
        if self.absolute_expiration is not None:
            deadlines.append(self.absolute_expiration)
        if self.absolute_expiration_relative_to_now is not None:
            deadlines.append(now + self.absolute_expiration_relative_to_now)
        return min(deadlines) if deadlines else None
