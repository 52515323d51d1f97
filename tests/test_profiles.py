import asyncio

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from chronoshift.data import models, repositories
from chronoshift.data.repositories import ProfileNotFoundError, ProfileStore, StaleProfileError


async def _session_factory():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(models.Base.metadata.create_all)
    return engine, async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


def test_profile_store_save_and_update():
    async def _run() -> None:
        engine, async_session = await _session_factory()
        async with async_session() as session:
            store = ProfileStore(session)
            profile = await store.save(
                name=" Team sync ",
                from_timezone="America/New_York",
                target_timezones=["Europe/London", "Europe/London", " Asia/Tokyo ", ""],
            )
            await session.commit()

            assert profile.id is not None
            assert profile.name == "Team sync"
            assert profile.target_timezones == ["Europe/London", "Asia/Tokyo"]
            assert profile.version == 1

            updated = await store.update(profile.id, target_timezones=["Asia/Dubai"], expected_version=1)
            await session.commit()
            assert updated.version == 2
            assert updated.target_timezones == ["Asia/Dubai"]
            assert updated.from_timezone == "America/New_York"

            with pytest.raises(StaleProfileError) as excinfo:
                await store.update(profile.id, name="Renamed", expected_version=1)
            assert excinfo.value.actual == 2

            with pytest.raises(ProfileNotFoundError):
                await store.update(9999, name="Missing")

            listed = await store.list()
            assert [item.name for item in listed] == ["Team sync"]
        await engine.dispose()

    asyncio.run(_run())


def test_profile_store_delete():
    async def _run() -> None:
        engine, async_session = await _session_factory()
        async with async_session() as session:
            store = ProfileStore(session)
            first = await store.save(name="First", from_timezone="UTC", target_timezones=["Asia/Tokyo"])
            await store.save(name="Second", from_timezone="UTC", target_timezones=["Europe/Paris"])
            await session.commit()
            assert await store.count() == 2

            assert await store.delete(first.id) is True
            assert await store.delete(first.id) is False
            await session.commit()
            assert await store.count() == 1
        await engine.dispose()

    asyncio.run(_run())


def test_preferences_default_and_upsert():
    async def _run() -> None:
        engine, async_session = await _session_factory()
        async with async_session() as session:
            assert await repositories.get_preferences(session) == {"theme": "light"}

            values = await repositories.upsert_preferences(session, {"theme": "dark"})
            await session.commit()
            assert values["theme"] == "dark"

            values = await repositories.upsert_preferences(session, {"theme": "light"})
            assert values["theme"] == "light"

            with pytest.raises(ValueError):
                await repositories.upsert_preferences(session, {"theme": "sepia"})
        await engine.dispose()

    asyncio.run(_run())
