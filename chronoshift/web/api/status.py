"""Health endpoint."""
from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from chronoshift.data.repositories import ProfileStore
from chronoshift.tasks.conversion import ConversionService

from . import deps

router = APIRouter(tags=["status"])
logger = logging.getLogger("chronoshift.web.status")


@router.get("/health")
async def healthcheck(
    db: AsyncSession = Depends(deps.get_db),
    service: ConversionService = Depends(deps.get_conversion_service),
) -> dict:
    status = "ok"
    details: list[str] = []
    profile_count: int | None = None
    try:
        profile_count = await ProfileStore(db).count()
    except SQLAlchemyError as exc:
        logger.warning("Profile store unavailable: %s", exc)
        status = "degraded"
        details.append("Profile store unavailable")

    return {
        "status": status,
        "status_details": details,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "profiles": profile_count,
        "catalog_loaded": service.catalog_loaded,
    }
