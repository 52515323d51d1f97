"""Conversion orchestration: one reference time rendered across many zones."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Sequence

from chronoshift.config.settings import Settings, get_settings
from chronoshift.core.display import (
    DisplayRecord,
    TimeOfDay,
    WorkingHours,
    build_display_record,
    placeholder_record,
    time_of_day_for_hour,
)
from chronoshift.core.meeting import MeetingPlan, calculate_meeting_slots
from chronoshift.core.offsets import local_to_utc, parse_local_date, parse_local_time
from chronoshift.ingest.fetcher import FetchError, ResilientFetcher
from chronoshift.ingest.world_time import WorldTimeClient, ZoneSnapshot, gather_snapshots
from chronoshift.utils.time_utils import now_local

logger = logging.getLogger("chronoshift.conversion")


class ConversionError(RuntimeError):
    """User-facing failure of a conversion request."""


class ConversionValidationError(ConversionError, ValueError):
    """The request is incomplete or malformed; nothing was fetched."""


class CatalogUnavailableError(ConversionError):
    """The zone catalog could not be loaded."""


@dataclass
class ConversionRequest:
    from_timezone: str
    target_timezones: Sequence[str]
    date: str
    time: str

    @property
    def targets(self) -> list[str]:
        """Trimmed, non-empty targets with duplicates collapsed, in request order."""
        cleaned = ((zone or "").strip() for zone in self.target_timezones)
        return [zone for zone in dict.fromkeys(cleaned) if zone]

    @property
    def source(self) -> str:
        return (self.from_timezone or "").strip()

    def validate(self) -> None:
        if not self.source or not self.targets:
            raise ConversionValidationError("Please select 'From' and at least one valid 'To' timezone.")
        if parse_local_date(self.date) is None:
            raise ConversionValidationError(f"Invalid date {self.date!r}; expected YYYY-MM-DD.")
        if parse_local_time(self.time) is None:
            raise ConversionValidationError(f"Invalid time {self.time!r}; expected HH:MM or HH:MM:SS.")


@dataclass
class ConversionResult:
    reference_utc: datetime
    records: List[DisplayRecord]
    meeting: MeetingPlan
    time_of_day: TimeOfDay = TimeOfDay.MORNING


class _SnapshotBatch:
    """Per-conversion snapshot lookups: each zone is fetched at most once."""

    def __init__(self, client: WorldTimeClient, limit: int) -> None:
        self._client = client
        self._semaphore = asyncio.Semaphore(limit)
        self._tasks: Dict[str, asyncio.Task] = {}

    async def _fetch(self, zone_id: str) -> ZoneSnapshot | None:
        async with self._semaphore:
            return await self._client.get_snapshot(zone_id)

    async def get(self, zone_id: str) -> ZoneSnapshot | None:
        task = self._tasks.get(zone_id)
        if task is None:
            task = asyncio.ensure_future(self._fetch(zone_id))
            self._tasks[zone_id] = task
        return await task


class ConversionService:
    """Coordinates snapshot lookups, record building and meeting planning."""

    def __init__(self, client: WorldTimeClient, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self.client = client
        self.working_hours = WorkingHours(self.settings.working_hours_start, self.settings.working_hours_end)
        self._catalog: list[str] | None = None
        self._catalog_lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "ConversionService":
        settings = settings or get_settings()
        fetcher = ResilientFetcher(
            retries=settings.fetch_retries,
            initial_timeout=settings.fetch_initial_timeout,
            backoff_base=settings.fetch_backoff_base,
        )
        client = WorldTimeClient(fetcher, base_url=settings.world_time_api_base_url)
        return cls(client, settings)

    async def close(self) -> None:
        await self.client.close()

    @property
    def catalog_loaded(self) -> bool:
        return self._catalog is not None

    async def load_catalog(self) -> list[str]:
        async with self._catalog_lock:
            if self._catalog is None:
                try:
                    self._catalog = await self.client.list_zones()
                except FetchError as exc:
                    logger.error("Failed to fetch timezone list: %s", exc)
                    raise CatalogUnavailableError(
                        f"Failed to load timezone list. Please refresh. ({exc})"
                    ) from exc
            return list(self._catalog)

    async def default_zones(self) -> tuple[str, list[str]]:
        """Default source and targets; the machine's zone wins when the catalog lists it."""
        catalog = await self.load_catalog()
        source = self.settings.default_from_timezone
        if self.settings.local_timezone in catalog:
            source = self.settings.local_timezone
        return source, [self.settings.default_to_timezone]

    def current_inputs(self) -> tuple[str, str]:
        """Today's date and the current time in the local zone, as request strings."""
        now = now_local(self.settings.local_timezone)
        return now.strftime("%Y-%m-%d"), now.strftime("%H:%M")

    async def convert(self, request: ConversionRequest) -> ConversionResult:
        request.validate()
        await self.load_catalog()

        source_id = request.source
        targets = request.targets
        batch = _SnapshotBatch(self.client, self.settings.fetch_concurrency)

        source = await batch.get(source_id)
        if source is None:
            raise ConversionError(f"Could not fetch data for source timezone: {source_id}")

        reference_utc = local_to_utc(request.date, request.time, source.utc_offset)
        if reference_utc is None:
            raise ConversionError("Invalid date/time for the source timezone.")

        planner_zones = [source_id] + [zone for zone in targets if zone != source_id]
        logger.info(
            "Converting %s %s from %s to %d zone(s)", request.date, request.time, source_id, len(targets)
        )
        records, meeting = await asyncio.gather(
            self._build_records(batch, source_id, source, targets, reference_utc, request.date),
            calculate_meeting_slots(
                planner_zones,
                request.date,
                batch.get,
                working_hours=self.working_hours,
            ),
        )

        first_hour = records[0].hour_in_zone
        if first_hour is None:
            first_hour = now_local(self.settings.local_timezone).hour
        return ConversionResult(
            reference_utc=reference_utc,
            records=records,
            meeting=meeting,
            time_of_day=time_of_day_for_hour(first_hour),
        )

    async def _build_records(
        self,
        batch: _SnapshotBatch,
        source_id: str,
        source: ZoneSnapshot,
        targets: list[str],
        reference_utc: datetime,
        requested_date: str,
    ) -> list[DisplayRecord]:
        records = [
            build_display_record(
                source,
                reference_utc,
                requested_date,
                is_source=True,
                working_hours=self.working_hours,
            )
        ]
        displayed = {source_id, source.timezone}
        pending = [zone for zone in targets if zone not in displayed]
        snapshots = await gather_snapshots(pending, batch.get)

        for zone_id, snapshot in zip(pending, snapshots):
            if zone_id in displayed:
                continue
            if snapshot is None:
                records.append(placeholder_record(zone_id))
                displayed.add(zone_id)
                continue
            records.append(
                build_display_record(
                    snapshot,
                    reference_utc,
                    requested_date,
                    source=source,
                    working_hours=self.working_hours,
                )
            )
            displayed.update({zone_id, snapshot.timezone})
        return records
