from __future__ import annotations
from datetime import datetime

from pydantic import BaseModel


class StudyOut(BaseModel):
    id: int
    external_id: str
    title: str
    payout: int
    duration: str
    study_type: str
    study_format: str | None
    match_score: int | None
    posted_at: str | None
    link: str | None
    description: str | None
    delivered: bool
    created_at: datetime

    class Config:
        from_attributes = True
