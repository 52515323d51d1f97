"""Common working-hours window across several zones for one calendar date."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Sequence
from zoneinfo import ZoneInfo

from chronoshift.ingest.world_time import SnapshotFetcher, ZoneSnapshot, gather_snapshots

from .display import WorkingHours
from .offsets import format_clock, format_in_offset, local_to_utc, local_weekday

logger = logging.getLogger("chronoshift.meeting")


@dataclass(frozen=True)
class WorkingInterval:
    timezone: str
    start_utc: datetime
    end_utc: datetime
    utc_offset: str = ""


@dataclass(frozen=True)
class MeetingSlot:
    start: datetime
    end: datetime


@dataclass(frozen=True)
class LocalSlot:
    timezone: str
    local_start: str
    local_end: str


@dataclass
class MeetingPlan:
    common_slot: Optional[MeetingSlot]
    individual_slots: List[LocalSlot] = field(default_factory=list)
    all_timezones_valid: bool = True
    intervals: List[WorkingInterval] = field(default_factory=list)


def intersect_intervals(intervals: Iterable[WorkingInterval]) -> MeetingSlot | None:
    """Intersection of ``[start, end)`` intervals; ``None`` when empty or no input."""
    start: datetime | None = None
    end: datetime | None = None
    for interval in intervals:
        start = interval.start_utc if start is None else max(start, interval.start_utc)
        end = interval.end_utc if end is None else min(end, interval.end_utc)
    if start is None or end is None or end <= start:
        return None
    return MeetingSlot(start=start, end=end)


def working_interval(
    snapshot: ZoneSnapshot,
    date_str: str,
    hours: WorkingHours = WorkingHours(),
) -> WorkingInterval | None:
    """UTC bounds of ``snapshot``'s working hours on ``date_str``, or ``None`` if not formable."""
    midnight = local_to_utc(date_str, "00:00", snapshot.utc_offset)
    if midnight is None:
        return None
    try:
        start = midnight + timedelta(hours=hours.start)
        end = midnight + timedelta(hours=hours.end)
    except OverflowError:
        return None
    if end <= start:
        return None
    return WorkingInterval(snapshot.timezone, start, end, snapshot.utc_offset)


def render_local(instant: datetime, interval: WorkingInterval) -> str:
    try:
        local = instant.astimezone(ZoneInfo(interval.timezone))
    except (KeyError, ValueError, OSError):
        local = format_in_offset(instant, interval.utc_offset)
    return format_clock(local, pad=False)


async def calculate_meeting_slots(
    zone_ids: Sequence[str],
    date_str: str,
    fetch: SnapshotFetcher,
    *,
    working_hours: WorkingHours = WorkingHours(),
    concurrency: int | None = None,
) -> MeetingPlan:
    """Find the common working window of ``zone_ids`` on ``date_str``.

    Zones whose snapshot or offset is missing are skipped and clear
    ``all_timezones_valid``. Zones where ``date_str`` is a Saturday or Sunday
    locally are skipped without affecting that flag.
    """
    identifiers = [zone for zone in dict.fromkeys(zone_ids) if zone]
    snapshots = await gather_snapshots(identifiers, fetch, limit=concurrency)

    intervals: list[WorkingInterval] = []
    all_valid = True
    for zone_id, snapshot in zip(identifiers, snapshots):
        if snapshot is None or not snapshot.utc_offset:
            logger.warning("Skipping %s for meeting planner: no API data or offset.", zone_id)
            all_valid = False
            continue

        weekday = local_weekday(date_str, snapshot.utc_offset)
        if weekday is not None and weekday >= 5:
            logger.info("%s is a weekend on %s. Skipping for meeting planner.", zone_id, date_str)
            continue

        interval = working_interval(snapshot, date_str, working_hours)
        if interval is None:
            logger.warning("Could not form valid UTC interval for %s on %s", zone_id, date_str)
            all_valid = False
            continue
        intervals.append(interval)

    common = intersect_intervals(intervals)
    individual: list[LocalSlot] = []
    if common is not None:
        individual = [
            LocalSlot(
                timezone=interval.timezone,
                local_start=render_local(common.start, interval),
                local_end=render_local(common.end, interval),
            )
            for interval in intervals
        ]
    return MeetingPlan(
        common_slot=common,
        individual_slots=individual,
        all_timezones_valid=all_valid,
        intervals=intervals,
    )
