"""Client for the remote zone authority (worldtimeapi.org compatible)."""
from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional, Sequence

from .fetcher import FetchError, ResilientFetcher

logger = logging.getLogger("chronoshift.world_time")

_IDENTIFIER_RE = re.compile(r"^[A-Za-z0-9_+\-]+(?:/[A-Za-z0-9_+\-]+)*$")

SnapshotFetcher = Callable[[str], Awaitable[Optional["ZoneSnapshot"]]]


class CatalogError(FetchError):
    """The zone catalog payload was empty or not a list of identifiers."""


@dataclass(frozen=True)
class ZoneSnapshot:
    timezone: str
    abbreviation: str
    utc_offset: str
    dst: bool
    dst_from: datetime | None = None
    dst_until: datetime | None = None
    dst_offset: int = 0

    @classmethod
    def from_payload(cls, payload: dict, *, fallback_timezone: str = "") -> "ZoneSnapshot":
        return cls(
            timezone=str(payload.get("timezone") or fallback_timezone),
            abbreviation=str(payload.get("abbreviation") or ""),
            utc_offset=str(payload.get("utc_offset") or ""),
            dst=bool(payload.get("dst")),
            dst_from=_parse_instant(payload.get("dst_from")),
            dst_until=_parse_instant(payload.get("dst_until")),
            dst_offset=_coerce_int(payload.get("dst_offset")),
        )


def is_valid_identifier(identifier: str | None) -> bool:
    return bool(identifier) and bool(_IDENTIFIER_RE.match(identifier)) and ".." not in identifier


class WorldTimeClient:
    """Catalog and per-zone snapshot lookups backed by a ``ResilientFetcher``."""

    def __init__(self, fetcher: ResilientFetcher, *, base_url: str = "https://worldtimeapi.org/api") -> None:
        self.fetcher = fetcher
        self.base_url = base_url.rstrip("/")

    async def close(self) -> None:
        await self.fetcher.close()

    async def list_zones(self) -> list[str]:
        url = f"{self.base_url}/timezone"
        payload = await self.fetcher.get_json(url)
        if not isinstance(payload, list) or not payload:
            raise CatalogError("Received an empty or invalid timezone list from API.", url=url)
        zones = [item for item in payload if isinstance(item, str) and item]
        if len(zones) != len(payload):
            raise CatalogError("Timezone list contained non-string entries.", url=url)
        logger.info("Loaded %d zone identifiers", len(zones))
        return zones

    async def get_snapshot(self, identifier: str) -> ZoneSnapshot | None:
        """Return the zone's current snapshot, or ``None`` when it is unavailable.

        Fetch failures are logged and swallowed so batch callers can carry on.
        """
        if not is_valid_identifier(identifier):
            logger.warning("Skipping snapshot lookup for invalid identifier %r", identifier)
            return None
        url = f"{self.base_url}/timezone/{identifier}"
        try:
            payload = await self.fetcher.get_json(url)
        except FetchError as exc:
            logger.error("Failed to fetch data for %s after retries: %s", identifier, exc)
            return None
        if not isinstance(payload, dict):
            logger.error("Unexpected snapshot payload for %s: %r", identifier, type(payload).__name__)
            return None
        return ZoneSnapshot.from_payload(payload, fallback_timezone=identifier)


async def gather_snapshots(
    identifiers: Sequence[str],
    fetch: SnapshotFetcher,
    *,
    limit: int | None = None,
) -> list[ZoneSnapshot | None]:
    """Fetch many snapshots with at most ``limit`` in flight, preserving input order."""
    semaphore = asyncio.Semaphore(limit) if limit else None

    async def _one(identifier: str) -> ZoneSnapshot | None:
        if semaphore is None:
            return await fetch(identifier)
        async with semaphore:
            return await fetch(identifier)

    return list(await asyncio.gather(*(_one(identifier) for identifier in identifiers)))


def _parse_instant(value: object) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _coerce_int(value: object) -> int:
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0
