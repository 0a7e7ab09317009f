"""Canonical records produced from raw Cargo rows."""
from datetime import datetime

from pydantic import BaseModel


class MatchRecord(BaseModel):
    external_id: str
    tournament: str | None = None
    overview_page: str | None = None
    region: str | None = None
    occurred_at: datetime | None = None
    duration_seconds: int = 0
    patch_version: str | None = None
    week: str | None = None
    team1: str | None = None
    team2: str | None = None
    # Team name, or side index "1"/"2" depending on the table revision
    winner: str | None = None

    @property
    def duration_minutes(self) -> float | None:
        if self.duration_seconds <= 0:
            return None
        return self.duration_seconds / 60

    @property
    def winning_team(self) -> str | None:
        if self.winner == "1":
            return self.team1
        if self.winner == "2":
            return self.team2
        return self.winner


class PlayerStatRecord(BaseModel):
    external_id: str
    player_name: str
    team: str
    role: str | None = None
    champion: str | None = None
    kills: int = 0
    deaths: int = 0
    assists: int = 0
    cs: int = 0
    vision_score: int = 0
    gold: int = 0
    damage: int = 0


class TeamStatRecord(BaseModel):
    external_id: str
    team: str
    dragons: int = 0
    rift_heralds: int = 0
    barons: int = 0
    void_grubs: int = 0
    atakhans: int = 0
    turrets: int = 0
    inhibitors: int = 0
    total_kills: int = 0
    won: bool = False
