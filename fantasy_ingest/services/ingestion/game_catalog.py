"""
Game catalog fetcher.

Lists completed games per region and fetches per-game player and team
scoreboards from the Leaguepedia Cargo tables.
"""
import logging
from datetime import datetime
from typing import Any

from fantasy_ingest.config import Settings, get_settings
from fantasy_ingest.exceptions import ProviderError
from fantasy_ingest.schemas.cargo import CargoQuery
from fantasy_ingest.services.leaguepedia_client import LeaguepediaClient, get_leaguepedia_client
from fantasy_ingest.utils.cargo_filter import CargoFilter
from fantasy_ingest.utils.timestamps import to_cargo_datetime

logger = logging.getLogger(__name__)

PLAYERS_PER_GAME = 10
TEAMS_PER_GAME = 2

GAME_FIELDS = [
    "GameId", "Tournament", "DateTime_UTC", "Team1", "Team2", "Winner",
    "Gamelength", "OverviewPage", "Team1Score", "Team2Score", "Patch",
]
PLAYER_FIELDS = [
    "GameId", "Link", "Team", "Role", "Champion", "Kills", "Deaths", "Assists",
    "Gold", "CS", "DamageToChampions", "VisionScore",
]
TEAM_FIELDS = [
    "GameId", "Team", "Dragons", "RiftHeralds", "VoidGrubs", "Atakhans",
    "Barons", "Towers", "Inhibitors", "Kills",
]


class GameCatalogFetcher:
    def __init__(self, client: LeaguepediaClient | None = None, settings: Settings | None = None):
        settings = settings or get_settings()
        self.client = client or get_leaguepedia_client()
        self.overview_page_template = settings.overview_page_template
        self.page_size = settings.match_page_size

    def overview_page_for(self, region: str) -> str:
        """``LPL`` -> ``LPL/2026 Season/Split 1``"""
        return self.overview_page_template.format(region=region)

    async def fetch_completed_matches(
        self, region: str, since: datetime | None = None
    ) -> list[dict[str, Any]]:
        """
        Completed games for a region, newest first.

        Provider failures return an empty list: one region being unavailable
        must not stop the poll.
        """
        overview_page = self.overview_page_for(region)
        where = CargoFilter.all_of(
            CargoFilter.eq("OverviewPage", overview_page),
            CargoFilter.gte("DateTime_UTC", to_cargo_datetime(since)) if since else None,
        )
        logger.info(f"Fetching completed games for {region} since {since}")
        try:
            rows = await self.client.query(
                CargoQuery(
                    tables="ScoreboardGames",
                    fields=GAME_FIELDS,
                    where=where,
                    order_by="DateTime_UTC DESC",
                    limit=self.page_size,
                )
            )
        except ProviderError as e:
            logger.error(f"Error fetching completed games for {region}: {e}")
            return []

        if not rows:
            logger.info(f"No completed games found for {region}")
        return rows

    async def fetch_match(self, external_id: str) -> dict[str, Any] | None:
        """Single game row by GameId, for manual processing and backfills."""
        rows = await self.client.query(
            CargoQuery(
                tables="ScoreboardGames",
                fields=GAME_FIELDS,
                where=CargoFilter.eq("GameId", external_id),
                limit=1,
            )
        )
        return rows[0] if rows else None

    async def fetch_player_stats(self, external_id: str) -> list[dict[str, Any]]:
        rows = await self.client.query(
            CargoQuery(
                tables="ScoreboardPlayers",
                fields=PLAYER_FIELDS,
                where=CargoFilter.eq("GameId", external_id),
                limit=PLAYERS_PER_GAME,
            )
        )
        if not rows:
            logger.warning(f"No player stats found for {external_id}")
        return rows[:PLAYERS_PER_GAME]

    async def fetch_team_stats(self, external_id: str) -> list[dict[str, Any]]:
        rows = await self.client.query(
            CargoQuery(
                tables="ScoreboardTeams",
                fields=TEAM_FIELDS,
                where=CargoFilter.eq("GameId", external_id),
                limit=TEAMS_PER_GAME,
            )
        )
        if not rows:
            logger.warning(f"No team stats found for {external_id}")
        return rows[:TEAMS_PER_GAME]
