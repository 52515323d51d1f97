"""Application configuration and environment management."""
from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


load_dotenv()


def _detect_timezone() -> str:
    tz_env = os.environ.get("TZ") or os.environ.get("LOCAL_TIMEZONE")
    if tz_env:
        return tz_env

    try:
        import tzlocal

        local_tz = tzlocal.get_localzone()
        return str(local_tz)
    except Exception:
        return "UTC"


class Settings(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    app_name: str = Field(default="ChronoShift", description="Human readable app name")
    environment: str = Field(default="development", description="Runtime environment name")

    data_dir: Path = Field(default=Path("data"), description="Directory for persistent data")
    database_url: str = Field(
        default="sqlite+aiosqlite:///data/chronoshift.db",
        description="SQLAlchemy connection string for profiles and preferences",
    )

    world_time_api_base_url: str = Field(
        default="https://worldtimeapi.org/api",
        description="Base URL of the remote zone authority",
    )

    working_hours_start: int = Field(default=9, description="Local hour working hours begin")
    working_hours_end: int = Field(default=17, description="Local hour working hours end (exclusive)")

    fetch_retries: int = Field(default=2, description="Retries after the first fetch attempt")
    fetch_initial_timeout: float = Field(default=10.0, description="Timeout in seconds of the first attempt")
    fetch_backoff_base: float = Field(default=1.0, description="Seconds multiplied by the attempt number between retries")
    fetch_concurrency: int = Field(default=4, description="Snapshot fetches allowed in flight per conversion")

    default_from_timezone: str = Field(default="America/New_York", description="Default source zone")
    default_to_timezone: str = Field(default="Europe/London", description="Default target zone")
    local_timezone: str = Field(
        default_factory=_detect_timezone,
        description="Olson timezone identifier of the machine running the service",
    )

    gemini_api_key: Optional[str] = Field(default=None, description="Gemini API key for fun facts")
    fun_fact_model: str = Field(default="gemini-2.5-flash", description="Gemini model used for fun facts")

    @field_validator("default_from_timezone", "default_to_timezone")
    @classmethod
    def _validate_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (KeyError, ValueError) as exc:
            raise ValueError(f"Unknown timezone {value!r}") from exc
        return value

    @field_validator("local_timezone")
    @classmethod
    def _validate_local_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except Exception:
            return "UTC"
        return value

    @field_validator("fetch_retries")
    @classmethod
    def _validate_retries(cls, value: int) -> int:
        if value < 0:
            raise ValueError("Retry count cannot be negative")
        return value

    @field_validator("fetch_initial_timeout")
    @classmethod
    def _validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("Initial timeout must be positive")
        return value

    @field_validator("fetch_backoff_base")
    @classmethod
    def _validate_backoff(cls, value: float) -> float:
        if value < 0:
            raise ValueError("Backoff base cannot be negative")
        return value

    @field_validator("fetch_concurrency")
    @classmethod
    def _validate_concurrency(cls, value: int) -> int:
        if value < 1:
            raise ValueError("Fetch concurrency must be at least 1")
        return value

    @model_validator(mode="after")
    def _validate_working_hours(self) -> "Settings":
        if not (0 <= self.working_hours_start < self.working_hours_end <= 24):
            raise ValueError("Working hours must satisfy 0 <= start < end <= 24")
        return self

    def database_path(self) -> Path:
        if self.database_url.startswith("sqlite"):
            if "///" in self.database_url:
                path = self.database_url.split("///", 1)[1]
            else:
                path = self.database_url.split(":", 1)[-1]
            return Path(path)
        raise ValueError("Database path only available for sqlite URLs")


_ENV_MAPPING = {
    "APP_NAME": "app_name",
    "ENVIRONMENT": "environment",
    "DATA_DIR": "data_dir",
    "DATABASE_URL": "database_url",
    "WORLD_TIME_API_BASE_URL": "world_time_api_base_url",
    "WORKING_HOURS_START": "working_hours_start",
    "WORKING_HOURS_END": "working_hours_end",
    "FETCH_RETRIES": "fetch_retries",
    "FETCH_INITIAL_TIMEOUT": "fetch_initial_timeout",
    "FETCH_BACKOFF_BASE": "fetch_backoff_base",
    "FETCH_CONCURRENCY": "fetch_concurrency",
    "DEFAULT_FROM_TIMEZONE": "default_from_timezone",
    "DEFAULT_TO_TIMEZONE": "default_to_timezone",
    "LOCAL_TIMEZONE": "local_timezone",
    "GEMINI_API_KEY": "gemini_api_key",
    "FUN_FACT_MODEL": "fun_fact_model",
}


def _load_settings() -> Settings:
    data: dict[str, object] = {}
    for env_name, field_name in _ENV_MAPPING.items():
        if env_name not in os.environ:
            continue
        data[field_name] = os.environ[env_name]
    return Settings(**data)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    settings = _load_settings()
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    return settings
