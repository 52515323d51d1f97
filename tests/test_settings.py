import pytest
from pydantic import ValidationError

from chronoshift.config import settings as settings_module
from chronoshift.config.settings import Settings


def test_defaults():
    settings = Settings(local_timezone="UTC")

    assert settings.working_hours_start == 9
    assert settings.working_hours_end == 17
    assert settings.fetch_retries == 2
    assert settings.fetch_initial_timeout == 10.0
    assert settings.database_path().name == "chronoshift.db"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("WORKING_HOURS_START", "8")
    monkeypatch.setenv("WORKING_HOURS_END", "24")
    monkeypatch.setenv("FETCH_RETRIES", "0")
    monkeypatch.setenv("LOCAL_TIMEZONE", "Asia/Tokyo")

    settings = settings_module._load_settings()

    assert settings.working_hours_start == 8
    assert settings.working_hours_end == 24
    assert settings.fetch_retries == 0
    assert settings.local_timezone == "Asia/Tokyo"


def test_unknown_local_timezone_falls_back_to_utc():
    assert Settings(local_timezone="Mars/Olympus_Mons").local_timezone == "UTC"


@pytest.mark.parametrize(
    "overrides",
    [
        {"working_hours_start": 17, "working_hours_end": 9},
        {"working_hours_start": 9, "working_hours_end": 25},
        {"fetch_retries": -1},
        {"fetch_initial_timeout": 0},
        {"fetch_concurrency": 0},
        {"default_from_timezone": "Not/A_Zone"},
    ],
)
def test_invalid_values_are_rejected(overrides):
    with pytest.raises(ValidationError):
        Settings(local_timezone="UTC", **overrides)
