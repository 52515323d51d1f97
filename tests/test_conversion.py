import asyncio
from datetime import datetime, timezone

import pytest

from chronoshift.config.settings import Settings
from chronoshift.core.display import TimeOfDay
from chronoshift.core.meeting import MeetingSlot
from chronoshift.ingest.world_time import CatalogError, ZoneSnapshot
from chronoshift.tasks.conversion import (
    CatalogUnavailableError,
    ConversionError,
    ConversionRequest,
    ConversionService,
    ConversionValidationError,
)

SNAPSHOTS = {
    "UTC": ZoneSnapshot(timezone="UTC", abbreviation="UTC", utc_offset="+00:00", dst=False),
    "America/New_York": ZoneSnapshot(
        timezone="America/New_York", abbreviation="EDT", utc_offset="-04:00", dst=True, dst_offset=3600
    ),
    "Asia/Tokyo": ZoneSnapshot(timezone="Asia/Tokyo", abbreviation="JST", utc_offset="+09:00", dst=False),
    "Asia/Kolkata": ZoneSnapshot(timezone="Asia/Kolkata", abbreviation="IST", utc_offset="+05:30", dst=False),
    "Europe/Istanbul": ZoneSnapshot(timezone="Europe/Istanbul", abbreviation="+03", utc_offset="+03:00", dst=False),
}


class FakeWorldTimeClient:
    def __init__(self, snapshots, catalog_error=None):
        self.snapshots = snapshots
        self.catalog_error = catalog_error
        self.catalog_calls = 0
        self.snapshot_calls = []
        self.closed = False

    async def list_zones(self):
        self.catalog_calls += 1
        if self.catalog_error is not None:
            raise self.catalog_error
        return sorted(self.snapshots) + ["Mars/Nowhere"]

    async def get_snapshot(self, identifier):
        self.snapshot_calls.append(identifier)
        await asyncio.sleep(0)
        return self.snapshots.get(identifier)

    async def close(self):
        self.closed = True


def _service(client=None):
    settings = Settings(local_timezone="UTC", fetch_concurrency=2)
    return ConversionService(client or FakeWorldTimeClient(SNAPSHOTS), settings)


def _convert(service, request):
    return asyncio.run(service.convert(request))


@pytest.mark.parametrize(
    "request_kwargs",
    [
        {"from_timezone": "", "target_timezones": ["Asia/Tokyo"]},
        {"from_timezone": "UTC", "target_timezones": []},
        {"from_timezone": "UTC", "target_timezones": ["  ", ""]},
        {"from_timezone": "UTC", "target_timezones": ["Asia/Tokyo"], "time": "9am"},
        {"from_timezone": "UTC", "target_timezones": ["Asia/Tokyo"], "date": "2026-02-30"},
    ],
)
def test_invalid_requests_are_rejected_before_any_fetch(request_kwargs):
    client = FakeWorldTimeClient(SNAPSHOTS)
    service = _service(client)
    values = {"date": "2026-10-20", "time": "09:30", **request_kwargs}

    with pytest.raises(ConversionValidationError):
        _convert(service, ConversionRequest(**values))

    assert client.catalog_calls == 0
    assert client.snapshot_calls == []


def test_missing_selection_message():
    request = ConversionRequest(from_timezone="UTC", target_timezones=[], date="2026-10-20", time="09:30")
    with pytest.raises(ConversionValidationError, match="Please select 'From' and at least one valid 'To' timezone."):
        request.validate()


def test_convert_computes_reference_instant_from_source_offset():
    result = _convert(
        _service(),
        ConversionRequest("America/New_York", ["UTC"], "2026-10-20", "09:30"),
    )

    assert result.reference_utc == datetime(2026, 10, 20, 13, 30, tzinfo=timezone.utc)
    assert [record.zone_id for record in result.records] == ["America/New_York", "UTC"]
    assert result.records[0].is_source is True
    assert result.records[0].time_string == "09:30 AM"
    assert result.records[1].time_string == "01:30 PM"
    assert result.records[1].difference_text == "+4h"
    assert result.time_of_day is TimeOfDay.MORNING


def test_source_failure_aborts_conversion():
    service = _service()

    with pytest.raises(ConversionError, match="Could not fetch data for source timezone: Mars/Nowhere") as excinfo:
        _convert(service, ConversionRequest("Mars/Nowhere", ["UTC"], "2026-10-20", "09:30"))

    assert not isinstance(excinfo.value, ConversionValidationError)


def test_failed_target_becomes_placeholder_in_order():
    result = _convert(
        _service(),
        ConversionRequest("UTC", ["Asia/Tokyo", "Mars/Nowhere", "Asia/Kolkata"], "2026-10-20", "09:30"),
    )

    assert [record.zone_id for record in result.records] == ["UTC", "Asia/Tokyo", "Mars/Nowhere", "Asia/Kolkata"]
    assert sum(record.is_source for record in result.records) == 1
    placeholder = result.records[2]
    assert placeholder.is_placeholder is True
    assert placeholder.time_string == "Could not load"
    assert result.records[1].time_string == "06:30 PM"
    assert result.records[3].time_string == "03:00 PM"
    assert result.meeting.all_timezones_valid is False


def test_duplicates_and_source_are_not_repeated():
    client = FakeWorldTimeClient(SNAPSHOTS)
    result = _convert(
        _service(client),
        ConversionRequest("UTC", ["UTC", "Asia/Tokyo", " Asia/Tokyo "], "2026-10-20", "09:30"),
    )

    assert [record.zone_id for record in result.records] == ["UTC", "Asia/Tokyo"]
    assert sorted(client.snapshot_calls) == ["Asia/Tokyo", "UTC"]


def test_meeting_plan_uses_source_and_targets():
    result = _convert(
        _service(),
        ConversionRequest("UTC", ["Europe/Istanbul"], "2026-10-20", "09:30"),
    )

    meeting = result.meeting
    assert meeting.common_slot == MeetingSlot(
        start=datetime(2026, 10, 20, 9, 0, tzinfo=timezone.utc),
        end=datetime(2026, 10, 20, 14, 0, tzinfo=timezone.utc),
    )
    assert [(slot.timezone, slot.local_start, slot.local_end) for slot in meeting.individual_slots] == [
        ("UTC", "9:00 AM", "2:00 PM"),
        ("Europe/Istanbul", "12:00 PM", "5:00 PM"),
    ]
    assert meeting.all_timezones_valid is True


def test_catalog_failure_aborts_and_is_retried_next_time():
    client = FakeWorldTimeClient(SNAPSHOTS, catalog_error=CatalogError("empty", url="https://time.example"))
    service = _service(client)
    request = ConversionRequest("UTC", ["Asia/Tokyo"], "2026-10-20", "09:30")

    with pytest.raises(CatalogUnavailableError, match="Failed to load timezone list"):
        _convert(service, request)
    assert client.snapshot_calls == []
    assert service.catalog_loaded is False

    client.catalog_error = None
    _convert(service, request)
    _convert(service, request)
    assert client.catalog_calls == 2
    assert service.catalog_loaded is True


def test_default_zones_prefer_local_zone_when_listed():
    service = _service()
    source, targets = asyncio.run(service.default_zones())

    assert source == "UTC"
    assert targets == ["Europe/London"]


def test_close_releases_client():
    client = FakeWorldTimeClient(SNAPSHOTS)
    asyncio.run(_service(client).close())
    assert client.closed is True


def test_reference_instant_out_of_range_is_a_conversion_error():
    service = _service()

    with pytest.raises(ConversionError, match="Invalid date/time for the source timezone."):
        _convert(service, ConversionRequest("America/New_York", ["UTC"], "9999-12-31", "23:00"))
