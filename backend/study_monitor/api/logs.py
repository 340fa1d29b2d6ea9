from __future__ import annotations
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from study_monitor.api.deps import require_user
from study_monitor.db.database import get_db
from study_monitor.schemas.log import CheckLogOut
from study_monitor.services.log_service import clear_logs, list_logs

router = APIRouter(prefix="/logs", tags=["logs"])


@router.get("", response_model=list[CheckLogOut])
def get_logs(
    limit: int = Query(default=100, ge=1, le=500),
    _: str = Depends(require_user),
    db: Session = Depends(get_db),
):
    return list_logs(db, limit)


@router.delete("")
def delete_logs(_: str = Depends(require_user), db: Session = Depends(get_db)):
    return {"success": True, "removed": clear_logs(db)}
