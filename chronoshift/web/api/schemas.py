"""Pydantic models shared across API routes."""
from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


def _normalise_zones(value):  # type: ignore[no-untyped-def]
    if value is None:
        return value
    if isinstance(value, str):
        value = value.split(",")
    return [item.strip() for item in value if item and item.strip()]


class ConversionCreate(BaseModel):
    from_timezone: Optional[str] = None
    target_timezones: List[str] = Field(default_factory=list)
    date: Optional[str] = Field(default=None, description="YYYY-MM-DD; defaults to today")
    time: Optional[str] = Field(default=None, description="HH:MM[:SS]; defaults to now")
    profile_id: Optional[int] = Field(default=None, description="Load zones from a saved profile")
    theme: Literal["light", "dark"] = "light"

    @field_validator("target_timezones", mode="before")
    @classmethod
    def normalise_targets(cls, value):  # type: ignore[override]
        return _normalise_zones(value) or []


class OverlapHealthOut(BaseModel):
    tier: str
    score: int
    label: str


class TimeWarpOut(BaseModel):
    time: str
    title: str
    is_current: bool


class DisplayRecordOut(BaseModel):
    zone_id: str
    location_name: str
    abbreviation: str
    time_string: str
    day_difference: str
    is_dst_active: bool
    dst_tooltip: str
    visibility_text: str
    utc_offset: str
    hour_in_zone: Optional[int]
    is_source: bool
    is_placeholder: bool
    health: Optional[OverlapHealthOut] = None
    difference_text: Optional[str] = None
    time_of_day: Optional[str] = None
    time_warp: List[TimeWarpOut] = Field(default_factory=list)


class LocalSlotOut(BaseModel):
    timezone: str
    local_start: str
    local_end: str


class MeetingSlotOut(BaseModel):
    start: datetime
    end: datetime


class MeetingPlanOut(BaseModel):
    common_slot: Optional[MeetingSlotOut]
    individual_slots: List[LocalSlotOut]
    all_timezones_valid: bool


class ConversionResponse(BaseModel):
    date: str
    time: str
    reference_utc: datetime
    time_of_day: str
    accent_color: str
    records: List[DisplayRecordOut]
    meeting: MeetingPlanOut


class ProfileCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    from_timezone: str = Field(..., min_length=1, max_length=64)
    target_timezones: List[str] = Field(default_factory=list)

    @field_validator("target_timezones", mode="before")
    @classmethod
    def normalise_targets(cls, value):  # type: ignore[override]
        return _normalise_zones(value) or []


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    from_timezone: Optional[str] = Field(default=None, min_length=1, max_length=64)
    target_timezones: Optional[List[str]] = None
    expected_version: Optional[int] = Field(default=None, description="Reject the update if the profile moved on")

    @field_validator("target_timezones", mode="before")
    @classmethod
    def normalise_targets(cls, value):  # type: ignore[override]
        return _normalise_zones(value)


class ProfileResponse(BaseModel):
    id: int
    name: str
    from_timezone: str
    target_timezones: List[str]
    version: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PreferencesResponse(BaseModel):
    theme: Literal["light", "dark"] = "light"


class PreferencesUpdate(BaseModel):
    theme: Optional[Literal["light", "dark"]] = None
