"""Metadata endpoints for UI configuration options."""
from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException

from chronoshift.config.timezones import MAP_HOTSPOTS, build_timezone_options
from chronoshift.tasks.conversion import CatalogUnavailableError, ConversionService

from . import deps

router = APIRouter(prefix="/api/meta", tags=["meta"])


@router.get("/options", response_model=dict)
async def get_options(service: ConversionService = Depends(deps.get_conversion_service)) -> dict:
    try:
        catalog = await service.load_catalog()
        default_from, default_targets = await service.default_zones()
    except CatalogUnavailableError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return {
        "timezones": [
            {"value": option.value, "label": option.label}
            for option in build_timezone_options(catalog)
        ],
        "default_from_timezone": default_from,
        "default_target_timezones": default_targets,
        "working_hours": {
            "start": service.working_hours.start,
            "end": service.working_hours.end,
        },
        "hotspots": [asdict(hotspot) for hotspot in MAP_HOTSPOTS],
    }


@router.get("/now", response_model=dict)
def get_now(service: ConversionService = Depends(deps.get_conversion_service)) -> dict:
    date, time = service.current_inputs()
    return {"date": date, "time": time, "timezone": service.settings.local_timezone}
