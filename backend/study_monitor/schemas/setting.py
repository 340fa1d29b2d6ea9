from __future__ import annotations
from datetime import datetime

from pydantic import BaseModel, Field

from study_monitor.schemas.study import StudyOut

MIN_INTERVAL_MINUTES = 1
MAX_INTERVAL_MINUTES = 60


class RunSettings(BaseModel):
    check_interval_minutes: int = Field(default=10, ge=MIN_INTERVAL_MINUTES, le=MAX_INTERVAL_MINUTES)
    enabled: bool = True
    last_run_at: datetime | None = None


class RunSettingsPatch(BaseModel):
    check_interval_minutes: int | None = Field(default=None, ge=MIN_INTERVAL_MINUTES, le=MAX_INTERVAL_MINUTES)
    enabled: bool | None = None


class RunSettingsOut(RunSettings):
    is_running: bool = False


class NotificationSettings(BaseModel):
    discord_webhook_url: str = ""
    email_from: str = ""


class CheckTriggerResponse(BaseModel):
    success: bool
    new_studies_count: int
    studies: list[StudyOut] = []
