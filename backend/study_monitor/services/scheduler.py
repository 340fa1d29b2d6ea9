"""Background agent that runs the discovery pipeline on an interval."""

from __future__ import annotations

from datetime import datetime, timezone
from threading import RLock
from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.orm import Session

from study_monitor.core.config import settings
from study_monitor.core.logging_conf import get_logger
from study_monitor.db.database import SessionLocal
from study_monitor.models.study import Study
from study_monitor.schemas.setting import RunSettings
from study_monitor.services.log_service import add_log
from study_monitor.services.monitor_service import run_once
from study_monitor.services.settings_service import get_run_settings, update_run_settings

JOB_ID = "study-monitor::check"


class AgentScheduler:
    """Own the single interval job that drives pipeline runs.

    Stopped → ``start()`` (with ``enabled`` set) → Running → ``stop()`` or a
    tick that finds ``enabled`` cleared → Stopped. Manual ``run_once()`` calls
    bypass the timer and may overlap a scheduled run.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        run: Callable[[Session], list[Study]] = run_once,
        scheduler: BackgroundScheduler | None = None,
    ) -> None:
        self.session_factory = session_factory
        self._run = run
        self.scheduler = scheduler or BackgroundScheduler(timezone=timezone.utc)
        self.logger = get_logger("scheduler")
        self._lock = RLock()

    def _ensure_started(self) -> None:
        if not self.scheduler.running:
            self.scheduler.start()
            self.logger.info("apscheduler_started")

    def is_running(self) -> bool:
        return self.scheduler.get_job(JOB_ID) is not None

    def next_run_time(self) -> datetime | None:
        job = self.scheduler.get_job(JOB_ID)
        return job.next_run_time if job else None

    def start(self, run_immediately: bool = True) -> bool:
        with self._lock:
            db = self.session_factory()
            try:
                if self.is_running():
                    add_log(db, "Agent already running", "warning")
                    return False
                cfg = get_run_settings(db)
                if not cfg.enabled:
                    add_log(db, "Agent is disabled in settings", "info")
                    return False

                self._ensure_started()
                job_kwargs = {}
                if run_immediately:
                    job_kwargs["next_run_time"] = datetime.now(timezone.utc)
                self.scheduler.add_job(
                    self._tick,
                    trigger=IntervalTrigger(minutes=cfg.check_interval_minutes),
                    id=JOB_ID,
                    replace_existing=True,
                    max_instances=1,
                    coalesce=True,
                    **job_kwargs,
                )

                add_log(db, "Agent started", "info")
                add_log(db, f"Check interval: {cfg.check_interval_minutes} minutes", "info")
                add_log(db, f"Monitoring: {settings.target_url}", "info")
                return True
            finally:
                db.close()

    def stop(self) -> bool:
        """Cancel future runs; a run already in progress is left to finish."""

        with self._lock:
            if not self.is_running():
                return False
            self.scheduler.remove_job(JOB_ID)
            db = self.session_factory()
            try:
                add_log(db, "Agent stopped", "info")
            finally:
                db.close()
            return True

    def restart(self) -> bool:
        with self._lock:
            self.stop()
            return self.start()

    def set_interval(self, minutes: int) -> RunSettings:
        """Persist a new interval and, when running, reschedule from now with it."""

        with self._lock:
            db = self.session_factory()
            try:
                cfg = update_run_settings(db, check_interval_minutes=minutes)
                if self.is_running():
                    self.scheduler.reschedule_job(
                        JOB_ID, trigger=IntervalTrigger(minutes=cfg.check_interval_minutes)
                    )
                    add_log(db, f"Check interval changed to {cfg.check_interval_minutes} minutes", "info")
                return cfg
            finally:
                db.close()

    def run_once(self) -> list[Study]:
        db = self.session_factory()
        try:
            studies = self._run(db)
            for study in studies:
                db.refresh(study)
            db.expunge_all()
            return studies
        finally:
            db.close()

    def _tick(self) -> None:
        db = self.session_factory()
        try:
            cfg = get_run_settings(db)
            if not cfg.enabled:
                self.stop()
                return
            add_log(db, f"Starting scheduled check (interval: {cfg.check_interval_minutes}m)...", "info")
            self._run(db)
        except Exception as exc:  # noqa: BLE001
            self.logger.error("scheduled_check_failed", error=str(exc))
        finally:
            db.close()

    def shutdown(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            self.logger.info("apscheduler_stopped")


__all__ = ["AgentScheduler", "JOB_ID"]
