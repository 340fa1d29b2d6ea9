from __future__ import annotations
from study_monitor.models.check_log import CheckLog
from study_monitor.models.recipient import Recipient
from study_monitor.models.setting import Setting
from study_monitor.models.study import Study

__all__ = ["CheckLog", "Recipient", "Setting", "Study"]
