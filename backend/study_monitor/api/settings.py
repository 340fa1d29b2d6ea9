from __future__ import annotations
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from study_monitor.api.deps import get_scheduler, require_user
from study_monitor.db.database import get_db
from study_monitor.schemas.setting import NotificationSettings, RunSettingsOut, RunSettingsPatch
from study_monitor.services.scheduler import AgentScheduler
from study_monitor.services.seed import NOTIFICATIONS_KEY
from study_monitor.services.settings_service import get_run_settings, get_setting, update_run_settings, upsert_setting

router = APIRouter(prefix="/settings", tags=["settings"])


def _run_settings_out(db: Session, scheduler: AgentScheduler) -> RunSettingsOut:
    return RunSettingsOut(**get_run_settings(db).model_dump(), is_running=scheduler.is_running())


@router.get("/agent", response_model=RunSettingsOut)
def get_agent_settings(
    _: str = Depends(require_user),
    db: Session = Depends(get_db),
    scheduler: AgentScheduler = Depends(get_scheduler),
):
    return _run_settings_out(db, scheduler)


@router.patch("/agent", response_model=RunSettingsOut)
def patch_agent_settings(
    body: RunSettingsPatch,
    _: str = Depends(require_user),
    db: Session = Depends(get_db),
    scheduler: AgentScheduler = Depends(get_scheduler),
):
    if body.check_interval_minutes is not None:
        scheduler.set_interval(body.check_interval_minutes)
    if body.enabled is not None:
        update_run_settings(db, enabled=body.enabled)
        if body.enabled:
            scheduler.start()
        else:
            scheduler.stop()
    db.expire_all()
    return _run_settings_out(db, scheduler)


@router.get("/notifications", response_model=NotificationSettings)
def get_notifications(_: str = Depends(require_user), db: Session = Depends(get_db)):
    return get_setting(db, NOTIFICATIONS_KEY)


@router.put("/notifications", response_model=NotificationSettings)
def put_notifications(body: NotificationSettings, _: str = Depends(require_user), db: Session = Depends(get_db)):
    return upsert_setting(db, NOTIFICATIONS_KEY, body.model_dump())
