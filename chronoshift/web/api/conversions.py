"""Time conversion and meeting planning routes."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from chronoshift.core.display import DisplayRecord, accent_color
from chronoshift.core.meeting import MeetingPlan
from chronoshift.data.repositories import ProfileStore
from chronoshift.tasks.conversion import (
    ConversionError,
    ConversionRequest,
    ConversionResult,
    ConversionService,
    ConversionValidationError,
)

from . import deps, schemas

router = APIRouter(prefix="/api/conversions", tags=["conversions"])
logger = logging.getLogger("chronoshift.web.conversions")


def _serialize_record(record: DisplayRecord) -> schemas.DisplayRecordOut:
    return schemas.DisplayRecordOut(
        zone_id=record.zone_id,
        location_name=record.location_name,
        abbreviation=record.abbreviation,
        time_string=record.time_string,
        day_difference=record.day_difference,
        is_dst_active=record.is_dst_active,
        dst_tooltip=record.dst_tooltip,
        visibility_text=record.visibility_text,
        utc_offset=record.utc_offset,
        hour_in_zone=record.hour_in_zone,
        is_source=record.is_source,
        is_placeholder=record.is_placeholder,
        health=(
            schemas.OverlapHealthOut(tier=record.health.tier, score=record.health.score, label=record.health.label)
            if record.health
            else None
        ),
        difference_text=record.difference_text,
        time_of_day=record.time_of_day.value if record.time_of_day else None,
        time_warp=[
            schemas.TimeWarpOut(time=entry.time, title=entry.title, is_current=entry.is_current)
            for entry in record.time_warp
        ],
    )


def _serialize_meeting(plan: MeetingPlan) -> schemas.MeetingPlanOut:
    common = plan.common_slot
    return schemas.MeetingPlanOut(
        common_slot=schemas.MeetingSlotOut(start=common.start, end=common.end) if common else None,
        individual_slots=[
            schemas.LocalSlotOut(timezone=slot.timezone, local_start=slot.local_start, local_end=slot.local_end)
            for slot in plan.individual_slots
        ],
        all_timezones_valid=plan.all_timezones_valid,
    )


def _serialize_result(
    request: ConversionRequest, result: ConversionResult, theme: str
) -> schemas.ConversionResponse:
    return schemas.ConversionResponse(
        date=request.date,
        time=request.time,
        reference_utc=result.reference_utc,
        time_of_day=result.time_of_day.value,
        accent_color=accent_color(result.time_of_day, theme),
        records=[_serialize_record(record) for record in result.records],
        meeting=_serialize_meeting(result.meeting),
    )


@router.post("", response_model=schemas.ConversionResponse)
async def create_conversion(
    payload: schemas.ConversionCreate,
    service: ConversionService = Depends(deps.get_conversion_service),
    db: AsyncSession = Depends(deps.get_db),
):
    from_timezone = payload.from_timezone or ""
    targets = list(payload.target_timezones)
    if payload.profile_id is not None:
        profile = await ProfileStore(db).get(payload.profile_id)
        if profile is None:
            raise HTTPException(status_code=404, detail="Profile not found")
        from_timezone = profile.from_timezone
        targets = list(profile.target_timezones)

    today, now = service.current_inputs()
    request = ConversionRequest(
        from_timezone=from_timezone,
        target_timezones=targets,
        date=payload.date or today,
        time=payload.time or now,
    )
    try:
        result = await service.convert(request)
    except ConversionValidationError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    except ConversionError as exc:
        logger.warning("Conversion failed: %s", exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return _serialize_result(request, result, payload.theme)
