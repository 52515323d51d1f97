"""Build per-zone display records for a converted instant."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, time, timedelta, timezone
from enum import Enum
from typing import List, Optional
from zoneinfo import ZoneInfo

from chronoshift.config.timezones import format_timezone_for_display, location_name
from chronoshift.ingest.world_time import ZoneSnapshot

from .offsets import (
    OverlapHealth,
    classify_overlap,
    format_clock,
    format_dst_date,
    format_hours,
    offset_difference_text,
    parse_local_date,
)

logger = logging.getLogger("chronoshift.display")

TIME_WARP_OFFSETS = (-3, 0, 3)


class TimeOfDay(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"


@dataclass(frozen=True)
class WorkingHours:
    start: int = 9
    end: int = 17  # exclusive


@dataclass
class TimeWarpEntry:
    time: str
    title: str
    is_current: bool


@dataclass
class DisplayRecord:
    zone_id: str
    location_name: str
    abbreviation: str
    time_string: str
    day_difference: str
    is_dst_active: bool
    dst_tooltip: str
    visibility_text: str
    utc_offset: str
    hour_in_zone: Optional[int]
    is_source: bool = False
    health: Optional[OverlapHealth] = None
    difference_text: Optional[str] = None
    time_of_day: Optional[TimeOfDay] = None
    time_warp: List[TimeWarpEntry] = field(default_factory=list)
    is_placeholder: bool = False


ACCENT_COLORS = {
    TimeOfDay.MORNING: "orange",
    TimeOfDay.AFTERNOON: "sky",
    TimeOfDay.EVENING: "amber",
    TimeOfDay.NIGHT: "slate",
}


def accent_color(time_of_day: TimeOfDay, theme: str = "light") -> str:
    if theme == "dark":
        return "primary-dark"
    return ACCENT_COLORS.get(time_of_day, "primary-light")


def time_of_day_for_hour(hour: int) -> TimeOfDay:
    if 5 <= hour < 12:
        return TimeOfDay.MORNING
    if 12 <= hour < 17:
        return TimeOfDay.AFTERNOON
    if 17 <= hour < 21:
        return TimeOfDay.EVENING
    return TimeOfDay.NIGHT


def visibility_text(local: datetime, zone_id: str, hours: WorkingHours) -> str:
    """Describe when a message sent at ``local`` is likely to be read."""
    if local.weekday() >= 5:
        short_name = location_name(zone_id) if zone_id else "target location"
        return f"Likely seen next working day (weekend in {short_name})"
    if hours.start <= local.hour < hours.end:
        return "Likely seen during working hours"
    if local.hour < hours.start:
        return "Likely seen at the start of their working day"
    return "Likely seen next working day"


def dst_status(snapshot: ZoneSnapshot, requested_date: str) -> tuple[bool, str]:
    """Return ``(is_dst_active, tooltip)`` for the requested calendar date.

    The remote authority reports DST relative to *now*. When it also reports
    the current DST window, the requested date (taken at noon UTC) is checked
    against that window. This is a best-effort approximation: a requested
    date in a different DST season than today is judged against today's
    window, not the one that will actually apply.
    """
    hours = format_hours(snapshot.dst_offset)
    if snapshot.dst_from and snapshot.dst_until:
        tooltip = (
            f"Current API DST Period: {format_dst_date(snapshot.dst_from)} - "
            f"{format_dst_date(snapshot.dst_until)}. Offset: {hours}h."
        )
        requested = parse_local_date(requested_date)
        if requested is None:
            raise ValueError(f"Invalid requested date {requested_date!r}")
        selected = datetime.combine(requested, time(12, 0), tzinfo=timezone.utc)
        return snapshot.dst_from <= selected < snapshot.dst_until, tooltip
    if snapshot.dst:
        return True, f"DST Currently Active. Offset: {hours}h."
    return False, "DST Not Currently Active."


def day_difference_text(local: datetime, requested_date: str) -> str:
    requested = parse_local_date(requested_date)
    if requested is None:
        raise ValueError(f"Invalid requested date {requested_date!r}")
    days = (local.date() - requested).days
    if days == 1:
        return "(Next Day)"
    if days == -1:
        return "(Prev. Day)"
    if days:
        return f"({local:%b} {local.day})"
    return ""


def time_warp(reference_utc: datetime, zone: ZoneInfo) -> list[TimeWarpEntry]:
    entries: list[TimeWarpEntry] = []
    for offset in TIME_WARP_OFFSETS:
        warped = (reference_utc + timedelta(hours=offset)).astimezone(zone)
        if offset == 0:
            title = "Converted Time"
        else:
            title = f"{offset:+d}h"
        entries.append(TimeWarpEntry(time=format_clock(warped, pad=False), title=title, is_current=offset == 0))
    return entries


def build_display_record(
    snapshot: ZoneSnapshot,
    reference_utc: datetime,
    requested_date: str,
    *,
    source: ZoneSnapshot | None = None,
    is_source: bool = False,
    working_hours: WorkingHours = WorkingHours(),
) -> DisplayRecord:
    """Render one zone's row. Formatting failures yield ``Error``/``N/A`` fields."""
    record = DisplayRecord(
        zone_id=snapshot.timezone,
        location_name=location_name(snapshot.timezone),
        abbreviation=snapshot.abbreviation or "N/A",
        time_string="Error",
        day_difference="",
        is_dst_active=False,
        dst_tooltip="DST info error.",
        visibility_text="N/A",
        utc_offset=snapshot.utc_offset,
        hour_in_zone=None,
        is_source=is_source,
    )

    try:
        is_dst, tooltip = dst_status(snapshot, requested_date)
        zone = ZoneInfo(snapshot.timezone)
        local = reference_utc.astimezone(zone)
        record.time_string = format_clock(local)
        record.day_difference = day_difference_text(local, requested_date)
        record.hour_in_zone = local.hour
        record.time_of_day = time_of_day_for_hour(local.hour)
        record.visibility_text = visibility_text(local, snapshot.timezone, working_hours)
        record.time_warp = time_warp(reference_utc, zone)
        record.is_dst_active = is_dst
        record.dst_tooltip = tooltip
    except (KeyError, ValueError, OverflowError, OSError) as exc:
        logger.error("Error formatting time for %s: %s", snapshot.timezone, exc)
        record.time_string = "Error"
        record.day_difference = ""
        record.hour_in_zone = None
        record.time_of_day = None
        record.visibility_text = "N/A"
        record.time_warp = []

    if not is_source and source is not None:
        record.health = classify_overlap(source.utc_offset, snapshot.utc_offset)
        record.difference_text = offset_difference_text(source.utc_offset, snapshot.utc_offset)
    return record


def placeholder_record(zone_id: str) -> DisplayRecord:
    """Row shown for a target zone whose snapshot could not be fetched."""
    return DisplayRecord(
        zone_id=zone_id,
        location_name=f"Error: {format_timezone_for_display(zone_id)}",
        abbreviation="N/A",
        time_string="Could not load",
        day_difference="",
        is_dst_active=False,
        dst_tooltip="",
        visibility_text="N/A",
        utc_offset="N/A",
        hour_in_zone=None,
        is_placeholder=True,
    )
