"""
Raw Cargo row -> canonical record conversion.

Pure functions, no I/O. A row that cannot be turned into a record yields
None and the caller drops it.
"""
import logging
import re
from datetime import datetime
from typing import Any

from fantasy_ingest.exceptions import MalformedRecord
from fantasy_ingest.schemas.records import MatchRecord, PlayerStatRecord, TeamStatRecord
from fantasy_ingest.utils.timestamps import as_utc

logger = logging.getLogger(__name__)

DURATION_RE = re.compile(r"^\s*(\d+):(\d{1,2})\s*$")
WEEK_RE = re.compile(r"_Week (\d+)_")
COUNTER_RE = re.compile(r"^\s*([+-]?\d+)")

TIMESTAMP_FORMATS = ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M", "%Y-%m-%d")


# ==================== Field parsing ====================

def parse_duration(value: Any) -> int:
    """Parse ``MM:SS`` game length into seconds, 0 when it does not conform."""
    if not isinstance(value, str):
        return 0
    match = DURATION_RE.match(value)
    if not match:
        return 0
    minutes, seconds = int(match.group(1)), int(match.group(2))
    return minutes * 60 + seconds


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse a provider timestamp.

    Values carrying an offset are kept as given; naive values are UTC.
    Unparseable input returns None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else as_utc(value)
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        parsed = None
        for fmt in TIMESTAMP_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
    if parsed is None:
        return None
    return parsed if parsed.tzinfo else as_utc(parsed)


def extract_week_label(external_id: str | None) -> str | None:
    """``LPL/2026 Season/Split 1_Week 3_10_2`` -> ``Week 3``."""
    if not external_id:
        return None
    match = WEEK_RE.search(external_id)
    if not match:
        return None
    return f"Week {int(match.group(1))}"


def derive_region_code(overview_page: str | None) -> str | None:
    """``LPL/2026 Season/Split 1`` -> ``LPL``."""
    if not overview_page:
        return None
    code = overview_page.split("/", 1)[0].strip()
    return code or None


def parse_counter(value: Any) -> int:
    """Leading integer of a provider counter; missing or garbage is 0."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    match = COUNTER_RE.match(str(value))
    return int(match.group(1)) if match else 0


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _require(raw: dict[str, Any], key: str) -> str:
    value = _text(raw.get(key))
    if value is None:
        raise MalformedRecord(f"missing {key}")
    return value


# ==================== Records ====================

def _build_match(raw: dict[str, Any]) -> MatchRecord:
    external_id = _require(raw, "GameId")
    overview_page = _text(raw.get("OverviewPage"))
    return MatchRecord(
        external_id=external_id,
        tournament=_text(raw.get("Tournament")),
        overview_page=overview_page,
        region=derive_region_code(overview_page),
        occurred_at=parse_timestamp(raw.get("DateTime UTC") or raw.get("DateTime_UTC")),
        duration_seconds=parse_duration(raw.get("Gamelength")),
        patch_version=_text(raw.get("Patch")),
        week=extract_week_label(external_id),
        team1=_text(raw.get("Team1")),
        team2=_text(raw.get("Team2")),
        winner=_text(raw.get("Winner")),
    )


def normalize_match(raw: dict[str, Any]) -> MatchRecord | None:
    try:
        return _build_match(raw)
    except (MalformedRecord, AttributeError, TypeError) as e:
        logger.warning(f"Dropping malformed match row: {e}")
        return None


def normalize_player_stat(raw: dict[str, Any]) -> PlayerStatRecord | None:
    try:
        return PlayerStatRecord(
            external_id=_require(raw, "GameId"),
            player_name=_require(raw, "Link"),
            team=_require(raw, "Team"),
            role=_text(raw.get("Role")),
            champion=_text(raw.get("Champion")),
            kills=parse_counter(raw.get("Kills")),
            deaths=parse_counter(raw.get("Deaths")),
            assists=parse_counter(raw.get("Assists")),
            cs=parse_counter(raw.get("CS")),
            vision_score=parse_counter(raw.get("VisionScore")),
            gold=parse_counter(raw.get("Gold")),
            damage=parse_counter(raw.get("DamageToChampions")),
        )
    except (MalformedRecord, AttributeError, TypeError) as e:
        logger.warning(f"Dropping malformed player stat row: {e}")
        return None


def normalize_team_stat(raw: dict[str, Any], match: MatchRecord) -> TeamStatRecord | None:
    try:
        team = _require(raw, "Team")
        return TeamStatRecord(
            external_id=_require(raw, "GameId"),
            team=team,
            dragons=parse_counter(raw.get("Dragons")),
            rift_heralds=parse_counter(raw.get("RiftHeralds", raw.get("RiftHerald"))),
            barons=parse_counter(raw.get("Barons")),
            void_grubs=parse_counter(raw.get("VoidGrubs")),
            atakhans=parse_counter(raw.get("Atakhans")),
            turrets=parse_counter(raw.get("Towers")),
            inhibitors=parse_counter(raw.get("Inhibitors")),
            total_kills=parse_counter(raw.get("Kills", raw.get("TeamKills"))),
            won=match.winning_team is not None and team == match.winning_team,
        )
    except (MalformedRecord, AttributeError, TypeError) as e:
        logger.warning(f"Dropping malformed team stat row: {e}")
        return None
