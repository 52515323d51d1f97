"""Persistence operations for profiles and preferences."""
from __future__ import annotations

from typing import Any, Iterable, Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from . import models

THEMES = ("light", "dark")
DEFAULT_PREFERENCES: dict[str, Any] = {"theme": "light"}


class ProfileNotFoundError(LookupError):
    """No profile exists with the requested id."""


class StaleProfileError(RuntimeError):
    """The profile changed since the caller last read it."""

    def __init__(self, profile_id: int, expected: int, actual: int) -> None:
        super().__init__(f"Profile {profile_id} is at version {actual}, not {expected}")
        self.profile_id = profile_id
        self.expected = expected
        self.actual = actual


def _clean_targets(targets: Iterable[str]) -> list[str]:
    return [zone for zone in dict.fromkeys((zone or "").strip() for zone in targets) if zone]


class ProfileStore:
    """Named ``{from_timezone, target_timezones}`` records, versioned on every update.

    The store never commits; callers own the transaction.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list(self) -> Sequence[models.Profile]:
        result = await self.session.execute(select(models.Profile).order_by(models.Profile.id))
        return list(result.scalars())

    async def count(self) -> int:
        return await self.session.scalar(select(func.count(models.Profile.id))) or 0

    async def get(self, profile_id: int) -> models.Profile | None:
        return await self.session.get(models.Profile, profile_id)

    async def save(self, *, name: str, from_timezone: str, target_timezones: Iterable[str]) -> models.Profile:
        profile = models.Profile(
            name=name.strip(),
            from_timezone=from_timezone.strip(),
            target_timezones=_clean_targets(target_timezones),
            version=1,
        )
        self.session.add(profile)
        await self.session.flush()
        return profile

    async def update(
        self,
        profile_id: int,
        *,
        name: str | None = None,
        from_timezone: str | None = None,
        target_timezones: Iterable[str] | None = None,
        expected_version: int | None = None,
    ) -> models.Profile:
        profile = await self.get(profile_id)
        if profile is None:
            raise ProfileNotFoundError(f"Profile {profile_id} not found")
        if expected_version is not None and expected_version != profile.version:
            raise StaleProfileError(profile_id, expected_version, profile.version)
        if name is not None:
            profile.name = name.strip()
        if from_timezone is not None:
            profile.from_timezone = from_timezone.strip()
        if target_timezones is not None:
            profile.target_timezones = _clean_targets(target_timezones)
        profile.version += 1
        await self.session.flush()
        return profile

    async def delete(self, profile_id: int) -> bool:
        result = await self.session.execute(delete(models.Profile).where(models.Profile.id == profile_id))
        return bool(result.rowcount)


async def get_preferences(session: AsyncSession) -> dict[str, Any]:
    result = await session.execute(select(models.Preference))
    values = dict(DEFAULT_PREFERENCES)
    values.update({row.key: row.value for row in result.scalars()})
    return values


async def upsert_preferences(session: AsyncSession, values: dict[str, Any]) -> dict[str, Any]:
    theme = values.get("theme")
    if theme is not None and theme not in THEMES:
        raise ValueError(f"Theme must be one of {', '.join(THEMES)}")
    for key, value in values.items():
        existing = await session.get(models.Preference, key)
        if existing is None:
            session.add(models.Preference(key=key, value=value))
        else:
            existing.value = value
    await session.flush()
    return await get_preferences(session)
