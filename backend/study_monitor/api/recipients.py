from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from study_monitor.api.deps import require_user
from study_monitor.db.database import get_db
from study_monitor.schemas.recipient import RecipientCreate, RecipientOut, RecipientPatch
from study_monitor.services.recipient_service import (
    DuplicateRecipientError,
    add_recipient,
    list_recipients,
    remove_recipient,
    set_recipient_active,
)

router = APIRouter(prefix="/recipients", tags=["recipients"])


@router.get("", response_model=list[RecipientOut])
def get_recipients(_: str = Depends(require_user), db: Session = Depends(get_db)):
    return list_recipients(db)


@router.post("", response_model=RecipientOut)
def post_recipient(body: RecipientCreate, _: str = Depends(require_user), db: Session = Depends(get_db)):
    try:
        return add_recipient(db, body.email, body.active)
    except DuplicateRecipientError:
        raise HTTPException(status_code=400, detail="recipient already exists")


@router.patch("/{recipient_id}", response_model=RecipientOut)
def patch_recipient(
    recipient_id: int, body: RecipientPatch, _: str = Depends(require_user), db: Session = Depends(get_db)
):
    row = set_recipient_active(db, recipient_id, body.active)
    if not row:
        raise HTTPException(status_code=404, detail="recipient not found")
    return row


@router.delete("/{recipient_id}")
def delete_recipient(recipient_id: int, _: str = Depends(require_user), db: Session = Depends(get_db)):
    if not remove_recipient(db, recipient_id):
        raise HTTPException(status_code=404, detail="recipient not found")
    return {"success": True}
