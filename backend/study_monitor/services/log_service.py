from __future__ import annotations

from sqlalchemy import desc
from sqlalchemy.orm import Session

from study_monitor.core.logging_conf import get_logger
from study_monitor.models.check_log import CheckLog

LOG_TYPES = ("info", "success", "warning", "error")
_LEVELS = {"info": "info", "success": "info", "warning": "warning", "error": "error"}

logger = get_logger("check_log")


def add_log(db: Session, message: str, log_type: str = "info") -> CheckLog | None:
    """Append a run log entry and mirror it to the process logger.

    A failure to persist the entry is reported and swallowed so that logging
    never aborts a pipeline run.
    """

    if log_type not in LOG_TYPES:
        raise ValueError(f"unknown log type: {log_type}")
    getattr(logger, _LEVELS[log_type])(message, log_type=log_type)

    row = CheckLog(message=message, log_type=log_type)
    db.add(row)
    try:
        db.commit()
    except Exception as exc:  # noqa: BLE001
        db.rollback()
        logger.error("check_log_write_failed", error=str(exc))
        return None
    return row


def list_logs(db: Session, limit: int = 100) -> list[CheckLog]:
    return db.query(CheckLog).order_by(desc(CheckLog.created_at), desc(CheckLog.id)).limit(limit).all()


def clear_logs(db: Session) -> int:
    removed = db.query(CheckLog).delete(synchronize_session=False)
    db.commit()
    return removed
