"""
Fantasy scoring.

Pure functions: the same counters and weights always give the same points,
so stored values can be recomputed at any time. Any negative counter makes
the whole score 0.00 instead of a partial total.
"""
import logging
from collections import defaultdict
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable

from fantasy_ingest.config import get_settings
from fantasy_ingest.services.scoring_weights import DurationMultipliers, ScoringWeights

logger = logging.getLogger(__name__)

PLAYER_COUNTERS = ("kills", "deaths", "assists", "cs", "vision_score")
TEAM_COUNTERS = (
    "dragons", "rift_heralds", "barons", "void_grubs", "atakhans",
    "turrets", "inhibitors", "total_kills",
)


def _default_weights() -> ScoringWeights:
    return get_settings().scoring


def round_points(value: float) -> float:
    """Round half-up to 2 decimals."""
    return float(Decimal(repr(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _counter(stats: Any, name: str) -> int | float:
    if isinstance(stats, dict):
        return stats.get(name, 0) or 0
    return getattr(stats, name, 0) or 0


def duration_multiplier(game_duration_minutes: float | None, weights: DurationMultipliers) -> float:
    if not game_duration_minutes or game_duration_minutes <= 0:
        return weights.normal
    if game_duration_minutes < weights.short_game_minutes:
        return weights.under_short
    if game_duration_minutes > weights.long_game_minutes:
        return weights.over_long
    return weights.normal


def apply_duration_multiplier(
    points: float,
    game_duration_minutes: float | None,
    weights: DurationMultipliers,
) -> float:
    multiplier = duration_multiplier(game_duration_minutes, weights)
    if multiplier != weights.normal:
        logger.debug(
            f"Duration multiplier {multiplier} applied "
            f"({game_duration_minutes:.1f} min): {points} -> {points * multiplier}"
        )
    return round_points(points * multiplier)


def score_player(
    stats: Any,
    team_total_kills: int,
    game_duration_minutes: float | None = None,
    weights: ScoringWeights | None = None,
) -> float:
    """
    Fantasy points for one player in one game.

    Args:
        stats: object or dict with kills, deaths, assists, cs, vision_score
        team_total_kills: kills of the player's team, for kill participation
        game_duration_minutes: optional game length for the duration multiplier
        weights: scoring weights (settings when omitted)

    Returns:
        Points rounded to 2 decimals
    """
    weights = weights or _default_weights()
    w = weights.player

    kills = _counter(stats, "kills")
    deaths = _counter(stats, "deaths")
    assists = _counter(stats, "assists")
    cs = _counter(stats, "cs")
    vision_score = _counter(stats, "vision_score")

    if min(kills, deaths, assists, cs, vision_score) < 0 or team_total_kills < 0:
        logger.warning(
            f"Negative player counters, scoring 0: k={kills} d={deaths} a={assists} "
            f"cs={cs} vs={vision_score} team_kills={team_total_kills}"
        )
        return 0.0

    points = (
        kills * w.kills
        + deaths * w.deaths
        + assists * w.assists
        + cs * w.cs
        + vision_score * w.vision_score
    )

    if team_total_kills > 0:
        kill_participation = (kills + assists) / team_total_kills * 100
        points += kill_participation * w.kill_participation
    elif kills + assists > 0:
        # Should not happen with valid data; full participation credit
        logger.warning(
            f"Player has kills/assists but team total kills is 0 (k={kills} a={assists})"
        )
        points += 100 * w.kill_participation

    if deaths == 0 and points > 0:
        points *= w.flawless_bonus

    points = round_points(points)

    if game_duration_minutes is not None:
        points = apply_duration_multiplier(points, game_duration_minutes, weights.duration)

    logger.debug(f"Player points calculated: {points}")
    return points


def score_team(
    stats: Any,
    game_duration_minutes: float | None = None,
    weights: ScoringWeights | None = None,
) -> float:
    """Fantasy points for one team in one game, rounded to 2 decimals."""
    weights = weights or _default_weights()
    w = weights.team

    counters = {name: _counter(stats, name) for name in TEAM_COUNTERS}
    if min(counters.values()) < 0:
        logger.warning(f"Negative team counters, scoring 0: {counters}")
        return 0.0

    won = bool(stats.get("won") if isinstance(stats, dict) else getattr(stats, "won", False))

    points = (
        counters["dragons"] * w.dragons
        + counters["rift_heralds"] * w.rift_heralds
        + counters["barons"] * w.barons
        + counters["void_grubs"] * w.void_grubs
        + counters["atakhans"] * w.atakhan
        + counters["turrets"] * w.turrets
        + counters["inhibitors"] * w.inhibitors
        + counters["total_kills"] * w.total_kills
        + (w.win if won else w.loss)
    )
    points = round_points(points)

    if game_duration_minutes is not None:
        points = apply_duration_multiplier(points, game_duration_minutes, weights.duration)

    logger.debug(f"Team points calculated: {points}")
    return points


# ==================== Batch helpers ====================

def team_kills_map(player_stats: Iterable[Any]) -> dict[str, int]:
    """Sum player kills per team name."""
    totals: dict[str, int] = defaultdict(int)
    for stat in player_stats:
        team = stat["team"] if isinstance(stat, dict) else stat.team
        totals[team] += _counter(stat, "kills")
    return dict(totals)


def score_players(
    player_stats: list[Any],
    game_duration_minutes: float | None = None,
    weights: ScoringWeights | None = None,
) -> list[float]:
    """Score a game's player rows using team kills derived from the same rows."""
    totals = team_kills_map(player_stats)
    points = []
    for stat in player_stats:
        team = stat["team"] if isinstance(stat, dict) else stat.team
        points.append(score_player(stat, totals.get(team, 0), game_duration_minutes, weights))
    return points


def get_scoring_weights() -> dict[str, Any]:
    """Current weights, for display and debugging."""
    return _default_weights().model_dump()
