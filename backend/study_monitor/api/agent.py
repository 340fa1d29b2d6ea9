from __future__ import annotations
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from study_monitor.api.deps import get_scheduler, require_user
from study_monitor.db.database import get_db
from study_monitor.schemas.setting import CheckTriggerResponse
from study_monitor.schemas.study import StudyOut
from study_monitor.services.scheduler import AgentScheduler
from study_monitor.services.settings_service import update_run_settings

router = APIRouter(prefix="/agent", tags=["agent"])


@router.post("/check", response_model=CheckTriggerResponse)
def trigger_check(_: str = Depends(require_user), scheduler: AgentScheduler = Depends(get_scheduler)):
    studies = scheduler.run_once()
    return CheckTriggerResponse(
        success=True,
        new_studies_count=len(studies),
        studies=[StudyOut.model_validate(s) for s in studies],
    )


@router.get("/status")
def status(_: str = Depends(require_user), scheduler: AgentScheduler = Depends(get_scheduler)):
    next_run = scheduler.next_run_time()
    return {"is_running": scheduler.is_running(), "next_run_at": next_run.isoformat() if next_run else None}


@router.post("/start")
def start(
    _: str = Depends(require_user),
    db: Session = Depends(get_db),
    scheduler: AgentScheduler = Depends(get_scheduler),
):
    update_run_settings(db, enabled=True)
    scheduler.start()
    return {"success": True, "is_running": scheduler.is_running()}


@router.post("/stop")
def stop(
    _: str = Depends(require_user),
    db: Session = Depends(get_db),
    scheduler: AgentScheduler = Depends(get_scheduler),
):
    update_run_settings(db, enabled=False)
    scheduler.stop()
    return {"success": True, "is_running": scheduler.is_running()}
