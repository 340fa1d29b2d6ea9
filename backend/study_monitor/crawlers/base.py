from __future__ import annotations
from dataclasses import asdict, dataclass


@dataclass
class NormalizedStudy:
    external_id: str
    title: str
    payout: int = 0
    duration: str = "Unknown"
    study_type: str = "Unknown"
    study_format: str = ""
    match_score: int | None = None
    posted_at: str = ""
    link: str = ""
    description: str = ""

    def to_row(self) -> dict:
        row = asdict(self)
        for key in ("study_format", "posted_at", "link", "description"):
            row[key] = row[key] or None
        return row


class SourceAdapter:
    source_name: str

    def fetch(self) -> list[NormalizedStudy]:
        raise NotImplementedError
