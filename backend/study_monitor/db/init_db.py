from __future__ import annotations
from study_monitor.db.database import Base, engine
from study_monitor.models import check_log, recipient, setting, study
from study_monitor.services.seed import seed_settings_if_empty


def init_db() -> None:
    Base.metadata.create_all(bind=engine)
    seed_settings_if_empty()
