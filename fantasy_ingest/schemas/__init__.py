from fantasy_ingest.schemas.cargo import CargoQuery
from fantasy_ingest.schemas.ingestion import (
    PollSummary,
    ProcessFailureReason,
    ProcessResult,
    RegionSummary,
)
from fantasy_ingest.schemas.records import MatchRecord, PlayerStatRecord, TeamStatRecord

__all__ = [
    "CargoQuery",
    "MatchRecord",
    "PlayerStatRecord",
    "TeamStatRecord",
    "ProcessResult",
    "ProcessFailureReason",
    "PollSummary",
    "RegionSummary",
]
