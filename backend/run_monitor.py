from __future__ import annotations
import sys
import time

from study_monitor.core.logging_conf import configure_logging
from study_monitor.db.database import SessionLocal
from study_monitor.db.init_db import init_db
from study_monitor.services.monitor_service import run_once
from study_monitor.services.scheduler import AgentScheduler


def main(argv: list[str]) -> int:
    configure_logging()
    init_db()

    if "--loop" in argv:
        scheduler = AgentScheduler()
        if not scheduler.start():
            return 1
        try:
            while True:
                time.sleep(60)
        except KeyboardInterrupt:
            pass
        finally:
            scheduler.shutdown()
        return 0

    db = SessionLocal()
    try:
        studies = run_once(db)
        print(f"new studies: {len(studies)}")
        for study in studies:
            print(f"- {study.external_id} {study.title} (${study.payout})")
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
