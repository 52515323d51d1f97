"""Routes for saved zone profiles."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from chronoshift.data.repositories import ProfileNotFoundError, ProfileStore, StaleProfileError

from . import deps, schemas

router = APIRouter(prefix="/api/profiles", tags=["profiles"])


@router.get("", response_model=list[schemas.ProfileResponse])
async def list_profiles(db: AsyncSession = Depends(deps.get_db)):
    return await ProfileStore(db).list()


@router.get("/{profile_id}", response_model=schemas.ProfileResponse)
async def get_profile(profile_id: int, db: AsyncSession = Depends(deps.get_db)):
    profile = await ProfileStore(db).get(profile_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile


@router.post("", response_model=schemas.ProfileResponse, status_code=status.HTTP_201_CREATED)
async def create_profile(payload: schemas.ProfileCreate, db: AsyncSession = Depends(deps.get_db)):
    if not payload.target_timezones:
        raise HTTPException(status_code=422, detail="A profile needs at least one target timezone")
    profile = await ProfileStore(db).save(
        name=payload.name,
        from_timezone=payload.from_timezone,
        target_timezones=payload.target_timezones,
    )
    await db.commit()
    return profile


@router.put("/{profile_id}", response_model=schemas.ProfileResponse)
async def update_profile(
    profile_id: int,
    payload: schemas.ProfileUpdate,
    db: AsyncSession = Depends(deps.get_db),
):
    try:
        profile = await ProfileStore(db).update(
            profile_id,
            name=payload.name,
            from_timezone=payload.from_timezone,
            target_timezones=payload.target_timezones,
            expected_version=payload.expected_version,
        )
    except ProfileNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Profile not found") from exc
    except StaleProfileError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    await db.commit()
    return profile


@router.delete("/{profile_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_profile(profile_id: int, db: AsyncSession = Depends(deps.get_db)):
    deleted = await ProfileStore(db).delete(profile_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Profile not found")
    await db.commit()
    return None
