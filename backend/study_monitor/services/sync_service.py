from __future__ import annotations
from collections.abc import Iterable
from datetime import datetime

from sqlalchemy import desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from study_monitor.crawlers.base import NormalizedStudy
from study_monitor.models.study import Study

# Fields a dedicated update may touch; identity and delivery state are excluded.
UPDATABLE_FIELDS = frozenset(
    {
        "title",
        "payout",
        "duration",
        "study_type",
        "study_format",
        "match_score",
        "posted_at",
        "link",
        "description",
    }
)


def get_by_external_id(db: Session, external_id: str) -> Study | None:
    return db.query(Study).filter(Study.external_id == external_id).first()


def list_studies(db: Session, limit: int | None = None, delivered: bool | None = None) -> list[Study]:
    query = db.query(Study)
    if delivered is not None:
        query = query.filter(Study.delivered.is_(delivered))
    query = query.order_by(desc(Study.created_at), desc(Study.id))
    if limit:
        query = query.limit(limit)
    return query.all()


def list_undelivered(db: Session, limit: int | None = None) -> list[Study]:
    """Studies whose digest never went out, oldest first."""

    query = db.query(Study).filter(Study.delivered.is_(False)).order_by(Study.id.asc())
    if limit:
        query = query.limit(limit)
    return query.all()


def reconcile(db: Session, candidates: Iterable[NormalizedStudy]) -> list[Study]:
    """Insert candidates whose ``external_id`` is not stored yet and return the inserted rows.

    Present rows are left untouched. A unique-constraint violation on insert
    means a concurrent run stored the same identity first and is treated as
    "already exists".
    """

    created: list[Study] = []
    for candidate in candidates:
        if not candidate.external_id:
            continue
        if get_by_external_id(db, candidate.external_id):
            continue

        record = Study(**candidate.to_row(), delivered=False, created_at=datetime.utcnow())
        db.add(record)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            continue

        db.refresh(record)
        created.append(record)
    return created


def update_study(db: Session, external_id: str, /, **changes) -> Study | None:
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"fields not updatable: {', '.join(sorted(unknown))}")

    record = get_by_external_id(db, external_id)
    if not record:
        return None
    for key, value in changes.items():
        setattr(record, key, value)
    db.commit()
    db.refresh(record)
    return record


def prune(db: Session, current_ids: Iterable[str]) -> int:
    """Delete stored studies absent from ``current_ids``.

    An empty id set is a no-op and returns 0.
    """

    ids = {i for i in current_ids if i}
    if not ids:
        return 0
    removed = db.query(Study).filter(Study.external_id.notin_(ids)).delete(synchronize_session=False)
    db.commit()
    return removed


def mark_delivered(db: Session, study_id: int) -> bool:
    record = db.query(Study).filter(Study.id == study_id).first()
    if not record:
        return False
    if not record.delivered:
        record.delivered = True
        db.commit()
    return True
