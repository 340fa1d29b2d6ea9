from __future__ import annotations
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from study_monitor.models.setting import Setting
from study_monitor.schemas.setting import NotificationSettings, RunSettings
from study_monitor.services.seed import (
    AGENT_KEY,
    NOTIFICATIONS_KEY,
    default_agent_config,
    default_notification_config,
)

_DEFAULTS = {
    AGENT_KEY: default_agent_config,
    NOTIFICATIONS_KEY: default_notification_config,
}


def get_setting(db: Session, key: str) -> dict:
    """Return the stored value for ``key``, creating the row with defaults on first read."""

    row = db.query(Setting).filter(Setting.key == key).first()
    if row:
        return dict(row.value)
    factory = _DEFAULTS.get(key)
    if factory is None:
        return {}
    value = factory()
    db.add(Setting(key=key, value=value, updated_at=datetime.utcnow()))
    try:
        db.commit()
    except IntegrityError:
        # Another session created it first.
        db.rollback()
        return get_setting(db, key)
    return dict(value)


def upsert_setting(db: Session, key: str, value: dict) -> dict:
    row = db.query(Setting).filter(Setting.key == key).first()
    if row:
        row.value = value
        row.updated_at = datetime.utcnow()
    else:
        row = Setting(key=key, value=value, updated_at=datetime.utcnow())
        db.add(row)
    db.commit()
    db.refresh(row)
    return dict(row.value)


def get_run_settings(db: Session) -> RunSettings:
    return RunSettings.model_validate(get_setting(db, AGENT_KEY))


def update_run_settings(db: Session, **changes) -> RunSettings:
    """Validate and persist changes to the run settings singleton.

    Accepts any of ``check_interval_minutes``, ``enabled`` and ``last_run_at``;
    ``None`` values are ignored. Raises ``pydantic.ValidationError`` when the
    interval falls outside 1..60.
    """

    current = get_run_settings(db)
    merged = current.model_dump()
    merged.update({k: v for k, v in changes.items() if v is not None and k in merged})
    updated = RunSettings.model_validate(merged)
    upsert_setting(db, AGENT_KEY, updated.model_dump(mode="json"))
    return updated


def touch_last_run(db: Session, when: datetime | None = None) -> RunSettings:
    return update_run_settings(db, last_run_at=when or datetime.utcnow())


def get_notification_settings(db: Session) -> NotificationSettings:
    return NotificationSettings.model_validate(get_setting(db, NOTIFICATIONS_KEY))
