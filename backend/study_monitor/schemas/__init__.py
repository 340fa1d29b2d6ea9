from __future__ import annotations
from study_monitor.schemas.auth import LoginRequest, TokenResponse
from study_monitor.schemas.log import CheckLogOut
from study_monitor.schemas.recipient import RecipientCreate, RecipientOut, RecipientPatch
from study_monitor.schemas.setting import (
    CheckTriggerResponse,
    NotificationSettings,
    RunSettings,
    RunSettingsOut,
    RunSettingsPatch,
)
from study_monitor.schemas.study import StudyOut

__all__ = [
    "LoginRequest",
    "TokenResponse",
    "CheckLogOut",
    "RecipientCreate",
    "RecipientOut",
    "RecipientPatch",
    "CheckTriggerResponse",
    "NotificationSettings",
    "RunSettings",
    "RunSettingsOut",
    "RunSettingsPatch",
    "StudyOut",
]
