"""Offset and wall-clock arithmetic over ``±HH:MM`` UTC offset strings.

Everything here is fed by remote data, so parsing is lenient: malformed
offsets count as zero minutes and malformed local inputs produce ``None``
(not-a-time) rather than raising. Callers must check for ``None`` before
using an instant.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone

_OFFSET_RE = re.compile(r"^([+-])(\d{2}):(\d{2})$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^(\d{2}):(\d{2})(?::(\d{2}))?$")


@dataclass(frozen=True)
class OverlapHealth:
    tier: str
    score: int

    @property
    def label(self) -> str:
        return f"{self.tier} Overlap"


EXCELLENT = OverlapHealth("Excellent", 100)
FAIR = OverlapHealth("Fair", 60)
POOR = OverlapHealth("Poor", 30)


def parse_offset_to_minutes(offset: str | None) -> int:
    """Return the signed minutes of an ``±HH:MM`` offset, or 0 when malformed."""
    if not offset or not isinstance(offset, str):
        return 0
    sign = -1 if offset[0] == "-" else 1
    parts = offset[1:].split(":")
    if len(parts) < 2:
        return 0
    try:
        hours = int(parts[0])
        minutes = int(parts[1] or 0)
    except ValueError:
        return 0
    return sign * (hours * 60 + minutes)


def offset_timezone(offset: str) -> timezone:
    minutes = parse_offset_to_minutes(offset)
    if abs(minutes) >= 24 * 60:
        minutes = 0
    return timezone(timedelta(minutes=minutes))


def parse_local_date(value: str) -> date | None:
    if not isinstance(value, str) or not _DATE_RE.match(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def parse_local_time(value: str) -> time | None:
    """Parse ``HH:MM`` or ``HH:MM:SS``; seconds default to zero."""
    if not isinstance(value, str):
        return None
    match = _TIME_RE.match(value)
    if not match:
        return None
    hour, minute, second = (int(part) if part else 0 for part in match.groups())
    try:
        return time(hour, minute, second)
    except ValueError:
        return None


def local_to_utc(date_str: str, time_str: str, offset: str) -> datetime | None:
    """Return the aware UTC instant of a wall-clock time at ``offset``, or ``None``."""
    local_date = parse_local_date(date_str)
    local_time = parse_local_time(time_str)
    if local_date is None or local_time is None:
        return None
    if not isinstance(offset, str) or not _OFFSET_RE.match(offset):
        return None
    if abs(parse_offset_to_minutes(offset)) >= 24 * 60:
        return None
    local = datetime.combine(local_date, local_time, tzinfo=offset_timezone(offset))
    try:
        return local.astimezone(timezone.utc)
    except OverflowError:
        return None


def format_in_offset(instant: datetime, offset: str) -> datetime:
    """Render ``instant`` as a fixed-offset local datetime."""
    return instant.astimezone(offset_timezone(offset))


def local_weekday(date_str: str, offset: str) -> int | None:
    """Weekday (Monday=0) at ``offset`` of noon UTC on ``date_str``.

    Noon UTC keeps every offset between -12:00 and +11:59 on the requested
    calendar day; +12:00 and beyond roll into the next local day.
    """
    local_date = parse_local_date(date_str)
    if local_date is None:
        return None
    noon_utc = datetime.combine(local_date, time(12, 0), tzinfo=timezone.utc)
    try:
        return format_in_offset(noon_utc, offset).weekday()
    except OverflowError:
        return None


def classify_overlap(offset_a: str, offset_b: str) -> OverlapHealth:
    delta_hours = abs(parse_offset_to_minutes(offset_a) - parse_offset_to_minutes(offset_b)) / 60
    if delta_hours <= 3:
        return EXCELLENT
    if delta_hours <= 6:
        return FAIR
    return POOR


def offset_difference_text(source_offset: str, target_offset: str) -> str:
    """``+5h``, ``-3h 30m``: how far ``target_offset`` is ahead of ``source_offset``."""
    diff = parse_offset_to_minutes(target_offset) - parse_offset_to_minutes(source_offset)
    hours, minutes = divmod(abs(diff), 60)
    text = f"{'+' if diff >= 0 else '-'}{hours}h"
    if minutes:
        text += f" {minutes}m"
    return text


def format_clock(value: datetime, *, pad: bool = True) -> str:
    """12-hour clock text: ``09:05 PM`` when padded, ``9:05 PM`` otherwise."""
    hour = value.hour % 12 or 12
    meridiem = "AM" if value.hour < 12 else "PM"
    hour_text = f"{hour:02d}" if pad else str(hour)
    return f"{hour_text}:{value.minute:02d} {meridiem}"


def format_dst_date(instant: datetime | None) -> str:
    if instant is None:
        return "N/A"
    day = instant.astimezone(timezone.utc)
    return f"{day:%b} {day.day}, {day.year}"


def format_hours(seconds: int | float) -> str:
    return f"{seconds / 3600:g}"
