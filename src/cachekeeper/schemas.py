from __future__ import annotations

from datetime import datetime, timedelta, timezone
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def now_utc() -> datetime:
    return datetime.now(tz=timezone.utc)


def normalize_datetime(value: datetime) -> datetime:
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class DTOBase(BaseModel):
    model_config = ConfigDict(extra="forbid")


class CacheItemPriority(StrEnum):
    NONE = "none"
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    NOT_REMOVABLE = "not_removable"


class SlidingTime(DTOBase):
    """Expires an item that has not been accessed within ``duration``."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    duration: timedelta

    @field_validator("duration")
    @classmethod
    def validate_duration(cls, value: timedelta) -> timedelta:
        if value <= timedelta(0):
            raise ValueError("sliding duration must be > 0")
        return value

    def has_expired(self, last_accessed_time: datetime, now: datetime) -> bool:
        return now - last_accessed_time >= self.duration


class AbsoluteTime(DTOBase):
    """Expires an item at a fixed point in time, regardless of access."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    expires_at: datetime

    @field_validator("expires_at", mode="after")
    @classmethod
    def validate_expires_at(cls, value: datetime) -> datetime:
        return normalize_datetime(value)

    def has_expired(self, last_accessed_time: datetime, now: datetime) -> bool:
        return now >= self.expires_at


class CacheItem(DTOBase):
    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    key: str
    value: Any = None
    priority: CacheItemPriority = CacheItemPriority.NORMAL
    last_accessed_time: datetime = Field(default_factory=now_utc)
    expirations: tuple[SlidingTime | AbsoluteTime, ...] = ()
    storage_key: int | None = None

    @field_validator("last_accessed_time", mode="after")
    @classmethod
    def validate_last_accessed_time(cls, value: datetime) -> datetime:
        return normalize_datetime(value)

    @property
    def sliding_expiration(self) -> timedelta | None:
        """Duration of the first sliding policy; the only one that is persisted."""
        for expiration in self.expirations:
            if isinstance(expiration, SlidingTime):
                return expiration.duration
        return None

    def has_expired(self, now: datetime | None = None) -> bool:
        current = normalize_datetime(now) if now is not None else now_utc()
        return any(
            expiration.has_expired(self.last_accessed_time, current)
            for expiration in self.expirations
        )

    def touch(self, timestamp: datetime) -> None:
        self.last_accessed_time = timestamp
