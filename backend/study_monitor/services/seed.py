from __future__ import annotations

from datetime import datetime

from study_monitor.core.config import settings
from study_monitor.db.database import SessionLocal
from study_monitor.models.setting import Setting

AGENT_KEY = "agent"
NOTIFICATIONS_KEY = "notifications"


def default_agent_config() -> dict:
    return {
        "check_interval_minutes": settings.default_check_interval_minutes,
        "enabled": True,
        "last_run_at": None,
    }


def default_notification_config() -> dict:
    return {
        "discord_webhook_url": settings.discord_webhook_url,
        "email_from": settings.email_from,
    }


def seed_settings_if_empty(session_factory=SessionLocal) -> None:
    db = session_factory()
    try:
        keys = {s.key for s in db.query(Setting).all()}
        if AGENT_KEY not in keys:
            db.add(Setting(key=AGENT_KEY, value=default_agent_config(), updated_at=datetime.utcnow()))
        if NOTIFICATIONS_KEY not in keys:
            db.add(Setting(key=NOTIFICATIONS_KEY, value=default_notification_config(), updated_at=datetime.utcnow()))
        db.commit()
    finally:
        db.close()
