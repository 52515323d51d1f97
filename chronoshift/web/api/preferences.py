"""UI preference routes (theme)."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from chronoshift.data import repositories

from . import deps, schemas

router = APIRouter(prefix="/api/preferences", tags=["preferences"])


@router.get("", response_model=schemas.PreferencesResponse)
async def get_preferences_route(db: AsyncSession = Depends(deps.get_db)):
    values = await repositories.get_preferences(db)
    return schemas.PreferencesResponse(theme=values.get("theme", "light"))


@router.put("", response_model=schemas.PreferencesResponse)
async def update_preferences_route(
    payload: schemas.PreferencesUpdate,
    db: AsyncSession = Depends(deps.get_db),
):
    updates = payload.model_dump(exclude_none=True)
    if updates:
        values = await repositories.upsert_preferences(db, updates)
        await db.commit()
    else:
        values = await repositories.get_preferences(db)
    return schemas.PreferencesResponse(theme=values.get("theme", "light"))
