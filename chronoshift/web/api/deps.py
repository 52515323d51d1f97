"""FastAPI dependencies used across routers."""
from __future__ import annotations

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from chronoshift.ai.fun_facts import FunFactClient
from chronoshift.data.database import SessionLocal
from chronoshift.tasks.conversion import ConversionService

_conversion_service: ConversionService | None = None


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with SessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


def get_conversion_service() -> ConversionService:
    """Return the process-wide conversion service (the zone catalog is cached on it)."""
    global _conversion_service
    if _conversion_service is None:
        _conversion_service = ConversionService.from_settings()
    return _conversion_service


async def close_conversion_service() -> None:
    global _conversion_service
    if _conversion_service is not None:
        await _conversion_service.close()
        _conversion_service = None


def get_fun_fact_client() -> FunFactClient:
    return FunFactClient()
