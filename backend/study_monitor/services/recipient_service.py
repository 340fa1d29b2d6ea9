from __future__ import annotations

from sqlalchemy import desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from study_monitor.models.recipient import Recipient


class DuplicateRecipientError(ValueError):
    pass


def list_recipients(db: Session) -> list[Recipient]:
    return db.query(Recipient).order_by(desc(Recipient.created_at), desc(Recipient.id)).all()


def list_active_recipients(db: Session) -> list[Recipient]:
    return db.query(Recipient).filter(Recipient.active.is_(True)).order_by(Recipient.id.asc()).all()


def add_recipient(db: Session, email: str, active: bool = True) -> Recipient:
    row = Recipient(email=email.strip().lower(), active=active)
    db.add(row)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateRecipientError(email) from exc
    db.refresh(row)
    return row


def set_recipient_active(db: Session, recipient_id: int, active: bool) -> Recipient | None:
    row = db.query(Recipient).filter(Recipient.id == recipient_id).first()
    if not row:
        return None
    row.active = active
    db.commit()
    db.refresh(row)
    return row


def remove_recipient(db: Session, recipient_id: int) -> bool:
    removed = db.query(Recipient).filter(Recipient.id == recipient_id).delete(synchronize_session=False)
    db.commit()
    return removed > 0
