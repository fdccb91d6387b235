"""Text layout of the ``.cacheinfo`` half of an entry.

An info file holds exactly three lines::

    <logical key>
    <last accessed time, ISO-8601>
    <sliding expiration as [-][d.]hh:mm:ss[.fffffff], or empty>

Durations are written in that full form. Reading also accepts the short forms
``d``, ``hh:mm`` and ``d.hh:mm`` found in older stores.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta

from cachekeeper.schemas import normalize_datetime

_DURATION_PATTERN = re.compile(
    r"^(?P<sign>-)?"
    r"(?:(?P<whole_days>\d+)|"
    r"(?:(?P<days>\d+)\.)?"
    r"(?P<hours>\d{1,2}):(?P<minutes>\d{1,2})"
    r"(?::(?P<seconds>\d{1,2})(?:\.(?P<fraction>\d{1,7}))?)?)$"
)


def format_timestamp(value: datetime) -> str:
    return normalize_datetime(value).isoformat()


def parse_timestamp(raw: str) -> datetime:
    return normalize_datetime(datetime.fromisoformat(raw.strip()))


def format_duration(value: timedelta) -> str:
    sign = ""
    if value < timedelta(0):
        sign = "-"
        value = -value

    hours, remainder = divmod(value.seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    text = f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    if value.days:
        text = f"{value.days}.{text}"
    if value.microseconds:
        text = f"{text}.{value.microseconds:06d}"
    return f"{sign}{text}"


def parse_duration(raw: str) -> timedelta | None:
    """Parse a duration field; ``None`` when the field is empty or malformed."""
    match = _DURATION_PATTERN.match(raw.strip())
    if match is None:
        return None

    if match["whole_days"] is not None:
        days = int(match["whole_days"])
        hours = minutes = seconds = 0
    else:
        days = int(match["days"] or 0)
        hours = int(match["hours"])
        minutes = int(match["minutes"])
        seconds = int(match["seconds"] or 0)
    if hours > 23 or minutes > 59 or seconds > 59:
        return None

    # 100ns ticks beyond microsecond precision are truncated.
    fraction = (match["fraction"] or "").ljust(6, "0")[:6]
    try:
        duration = timedelta(
            days=days,
            hours=hours,
            minutes=minutes,
            seconds=seconds,
            microseconds=int(fraction),
        )
        return -duration if match["sign"] else duration
    except OverflowError:
        return None


@dataclass(frozen=True)
class InfoRecord:
    key: str
    last_accessed_time: datetime
    sliding_expiration: timedelta | None = None

    def to_text(self) -> str:
        duration = ""
        if self.sliding_expiration is not None:
            duration = format_duration(self.sliding_expiration)
        lines = [self.key, format_timestamp(self.last_accessed_time), duration]
        return "".join(f"{line}\n" for line in lines)

    @classmethod
    def from_text(cls, text: str) -> InfoRecord:
        lines = text.splitlines()
        if len(lines) < 2:
            raise ValueError(f"info record needs at least 2 lines, got {len(lines)}")

        key = lines[0]
        try:
            last_accessed_time = parse_timestamp(lines[1])
        except ValueError as exc:
            raise ValueError(f"invalid last accessed time: {lines[1]!r}") from exc

        sliding_expiration = parse_duration(lines[2]) if len(lines) > 2 else None
        return cls(
            key=key,
            last_accessed_time=last_accessed_time,
            sliding_expiration=sliding_expiration,
        )


def replace_timestamp(text: str, timestamp: datetime) -> str:
    """Rewrite only the last-accessed line of an info record."""
    lines = text.splitlines()
    while len(lines) < 3:
        lines.append("")
    lines[1] = format_timestamp(timestamp)
    return "".join(f"{line}\n" for line in lines)
