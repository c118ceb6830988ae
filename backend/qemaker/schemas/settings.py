"""Pydantic models for site-wide configuration settings."""

from pydantic import BaseModel, Field


class SettingsRead(BaseModel):
    site_name: str
    pass_threshold: int
    default_max_attempts: int
    default_time_limit_minutes: int
    timer_warning_seconds: int


class SettingsUpdate(BaseModel):
    site_name: str | None = None
    pass_threshold: int | None = Field(default=None, ge=0, le=100)
    default_max_attempts: int | None = Field(default=None, ge=1)
    default_time_limit_minutes: int | None = Field(default=None, ge=0)
    timer_warning_seconds: int | None = Field(default=None, ge=0)
