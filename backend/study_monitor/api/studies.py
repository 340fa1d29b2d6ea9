from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from study_monitor.api.deps import require_user
from study_monitor.db.database import get_db
from study_monitor.schemas.study import StudyOut
from study_monitor.services.sync_service import get_by_external_id, list_studies, list_undelivered

router = APIRouter(prefix="/studies", tags=["studies"])


@router.get("", response_model=list[StudyOut])
def get_studies(
    limit: int = Query(default=200, ge=1, le=1000),
    delivered: bool | None = Query(default=None),
    _: str = Depends(require_user),
    db: Session = Depends(get_db),
):
    if delivered is False:
        return list_undelivered(db, limit)
    return list_studies(db, limit, delivered=delivered)


@router.get("/{external_id}", response_model=StudyOut)
def get_study(external_id: str, _: str = Depends(require_user), db: Session = Depends(get_db)):
    row = get_by_external_id(db, external_id)
    if not row:
        raise HTTPException(status_code=404, detail="study not found")
    return row
