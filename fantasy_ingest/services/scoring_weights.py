"""
Fantasy scoring weights.

Every weight can be overridden from the environment through the nested
``scoring`` settings field, e.g. ``SCORING__PLAYER__KILLS=4`` or
``SCORING__TEAM__WIN=20``. Changes take effect on process restart.

PLAYER POINTS:

    base = kills*KILLS + deaths*DEATHS + assists*ASSISTS
         + cs*CS + vision_score*VISION_SCORE
         + kill_participation_percent*KILL_PARTICIPATION
    if deaths == 0 and base > 0: base *= FLAWLESS_BONUS

    Example: 5/0/8, 250 CS, 45 vision, team kills 20
        15 + 0 + 16 + 5 + 0.9 + 16.25 = 53.15, flawless -> 63.78

TEAM POINTS:

    dragons*DRAGONS + rift_heralds*RIFT_HERALDS + barons*BARONS
    + void_grubs*VOID_GRUBS + atakhans*ATAKHAN + turrets*TURRETS
    + inhibitors*INHIBITORS + total_kills*TOTAL_KILLS + (WIN or LOSS)

    Example (winning team): 4 dragons, 1 herald, 1 baron, 3 grubs,
    1 atakhan, 9 turrets, 2 inhibitors, 25 kills -> 99.5
"""
import logging

from pydantic import BaseModel, model_validator

logger = logging.getLogger(__name__)


class PlayerScoringWeights(BaseModel):
    kills: float = 3
    deaths: float = -0.5
    assists: float = 2
    cs: float = 0.02
    vision_score: float = 0.02
    # Applied to the kill participation percentage (0-100)
    kill_participation: float = 0.25
    flawless_bonus: float = 1.2

    @model_validator(mode="after")
    def _warn_unusual(self) -> "PlayerScoringWeights":
        if self.flawless_bonus < 1:
            logger.warning(
                f"flawless_bonus={self.flawless_bonus} is below 1.0 and will reduce points"
            )
        if self.deaths > 0:
            logger.warning(f"deaths weight is positive ({self.deaths}), deaths will add points")
        return self


class TeamScoringWeights(BaseModel):
    dragons: float = 2
    rift_heralds: float = 4
    barons: float = 10
    void_grubs: float = 1.5
    atakhan: float = 7
    turrets: float = 2
    inhibitors: float = 4
    total_kills: float = 1
    win: float = 15
    loss: float = -15


class DurationMultipliers(BaseModel):
    short_game_minutes: float = 20
    long_game_minutes: float = 40
    under_short: float = 1.05
    normal: float = 1.0
    over_long: float = 0.95


class ScoringWeights(BaseModel):
    player: PlayerScoringWeights = PlayerScoringWeights()
    team: TeamScoringWeights = TeamScoringWeights()
    duration: DurationMultipliers = DurationMultipliers()
