from fantasy_ingest.models.match import Match, MatchStatus
from fantasy_ingest.models.team import Team
from fantasy_ingest.models.role import Role
from fantasy_ingest.models.player import Player
from fantasy_ingest.models.player_match_stats import PlayerMatchStats
from fantasy_ingest.models.team_match_stats import TeamMatchStats

__all__ = [
    "Match",
    "MatchStatus",
    "Team",
    "Role",
    "Player",
    "PlayerMatchStats",
    "TeamMatchStats",
]
