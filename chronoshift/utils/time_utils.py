"""Timezone-aware helpers for the service's own clock."""
from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

from chronoshift.config.settings import get_settings


def get_local_timezone(name: str | None = None) -> ZoneInfo:
    """Return ``name`` as a zone, defaulting to the configured local zone."""
    return ZoneInfo(name or get_settings().local_timezone)


def now_local(name: str | None = None) -> datetime:
    """Get the current time in ``name`` (or the configured local zone)."""
    return datetime.now(get_local_timezone(name))
