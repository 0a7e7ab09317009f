from datetime import datetime
from enum import Enum

from pydantic import BaseModel


class ProcessFailureReason(str, Enum):
    MALFORMED = "malformed"
    NOT_FOUND = "not_found"
    ERROR = "error"


class ProcessResult(BaseModel):
    success: bool
    external_id: str | None = None
    match_id: int | None = None
    players_processed: int = 0
    teams_processed: int = 0
    # Players created with a default role because theirs was not recognized
    fallback_resolutions: int = 0
    reason: ProcessFailureReason | None = None
    error: str | None = None


class RegionSummary(BaseModel):
    region: str
    matches_found: int = 0
    matches_processed: int = 0
    matches_failed: int = 0


class PollSummary(BaseModel):
    started_at: datetime
    finished_at: datetime | None = None
    watermark: datetime | None = None
    regions: list[RegionSummary] = []

    @property
    def matches_found(self) -> int:
        return sum(r.matches_found for r in self.regions)

    @property
    def matches_processed(self) -> int:
        return sum(r.matches_processed for r in self.regions)

    @property
    def matches_failed(self) -> int:
        return sum(r.matches_failed for r in self.regions)
