from __future__ import annotations
from datetime import datetime
from typing import Literal

from pydantic import BaseModel

LogType = Literal["info", "success", "warning", "error"]


class CheckLogOut(BaseModel):
    id: int
    message: str
    log_type: LogType
    created_at: datetime

    class Config:
        from_attributes = True
