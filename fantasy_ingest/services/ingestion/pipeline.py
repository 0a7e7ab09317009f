"""
Ingestion pipeline for a single game.

    unseen -> inserted (pending_validation) -> stats_fetched -> scored_and_persisted

A game that already exists is refreshed and goes straight to the stats
step; re-ingestion overwrites derived fields and never appends rows. All
writes for a game happen in one transaction.
"""
import asyncio
import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from fantasy_ingest.config import Settings, get_settings
from fantasy_ingest.exceptions import ProviderError
from fantasy_ingest.schemas.ingestion import ProcessFailureReason, ProcessResult
from fantasy_ingest.schemas.records import MatchRecord
from fantasy_ingest.services.ingestion.entity_resolver import EntityResolver
from fantasy_ingest.services.ingestion.game_catalog import GameCatalogFetcher
from fantasy_ingest.services.ingestion.normalizer import (
    normalize_match,
    normalize_player_stat,
    normalize_team_stat,
)
from fantasy_ingest.services.ingestion.repository import IngestionRepository
from fantasy_ingest.services.scoring import score_player, score_team, team_kills_map

logger = logging.getLogger(__name__)


class IngestionPipeline:
    def __init__(
        self,
        db: AsyncSession,
        fetcher: GameCatalogFetcher | None = None,
        settings: Settings | None = None,
    ):
        """
        Args:
            db: SQLAlchemy async session, committed once per game
            fetcher: Game catalog fetcher (uses the client singleton if not provided)
            settings: Settings override (tests)
        """
        settings = settings or get_settings()
        self.db = db
        self.fetcher = fetcher or GameCatalogFetcher(settings=settings)
        self.repository = IngestionRepository(db, video_game_id=settings.video_game_id)
        self.resolver = EntityResolver(self.repository, default_role_id=settings.default_role_id)
        self.weights = settings.scoring
        self.source = settings.stat_source
        self.stats_call_delay = settings.stats_call_delay_seconds

    async def process_match(self, raw_match: dict[str, Any] | MatchRecord) -> ProcessResult:
        """
        Normalize, upsert, fetch stats, resolve, score and persist one game.

        Never raises: failures are rolled back, logged and reported in the
        result so the rest of a poll cycle keeps going.
        """
        record = raw_match if isinstance(raw_match, MatchRecord) else normalize_match(raw_match)
        if record is None:
            return ProcessResult(
                success=False,
                reason=ProcessFailureReason.MALFORMED,
                error="match row is missing GameId",
            )

        external_id = record.external_id
        try:
            result = await self._process(record)
        except Exception as e:
            await self.db.rollback()
            self.resolver.clear_cache()
            logger.error(f"Error processing match {external_id}: {e}", exc_info=True)
            return ProcessResult(
                success=False,
                external_id=external_id,
                reason=ProcessFailureReason.ERROR,
                error=str(e),
            )

        logger.info(
            f"Match processed successfully: {external_id} (id={result.match_id}, "
            f"players={result.players_processed}, teams={result.teams_processed})"
        )
        return result

    async def _process(self, record: MatchRecord) -> ProcessResult:
        external_id = record.external_id
        region = record.region

        # unseen -> inserted
        existing_id = await self.repository.find_match_id(external_id)
        match_id = await self.repository.upsert_match(record)
        if existing_id is None:
            logger.info(f"Match inserted: {external_id} (id={match_id}, pending_validation)")
        else:
            logger.debug(f"Match {external_id} already exists (id={match_id}), refreshing stats")

        # inserted -> stats_fetched
        raw_players = await self.fetcher.fetch_player_stats(external_id)
        if self.stats_call_delay > 0:
            await asyncio.sleep(self.stats_call_delay)
        raw_teams = await self.fetcher.fetch_team_stats(external_id)

        player_stats = [
            stat for stat in (normalize_player_stat(raw) for raw in raw_players) if stat is not None
        ]
        team_stats = [
            stat for stat in (normalize_team_stat(raw, record) for raw in raw_teams) if stat is not None
        ]

        # Resolve every entity before writing any statistic row
        fallback_count = 0
        resolved_players = []
        for stat in player_stats:
            player = await self.resolver.resolve_player(stat.player_name, stat.team, stat.role, region)
            team = await self.resolver.resolve_team(stat.team, region)
            if player.is_fallback:
                fallback_count += 1
            resolved_players.append((stat, player.entity_id, team.entity_id))

        resolved_teams = []
        for stat in team_stats:
            team = await self.resolver.resolve_team(stat.team, region)
            resolved_teams.append((stat, team.entity_id))

        # stats_fetched -> scored_and_persisted
        duration_minutes = record.duration_minutes
        kills_by_team = team_kills_map(player_stats)

        for stat, player_id, team_id in resolved_players:
            points = score_player(
                stat, kills_by_team.get(stat.team, 0), duration_minutes, self.weights
            )
            await self.repository.upsert_player_stat(
                match_id, player_id, team_id, stat, points, self.source
            )

        for stat, team_id in resolved_teams:
            points = score_team(stat, duration_minutes, self.weights)
            await self.repository.upsert_team_stat(match_id, team_id, stat, points, self.source)

        await self.db.commit()

        return ProcessResult(
            success=True,
            external_id=external_id,
            match_id=match_id,
            players_processed=len(resolved_players),
            teams_processed=len(resolved_teams),
            fallback_resolutions=fallback_count,
        )

    async def process_external_id(self, external_id: str) -> ProcessResult:
        """Look a game up by GameId and process it (manual runs, backfills)."""
        try:
            raw_match = await self.fetcher.fetch_match(external_id)
        except ProviderError as e:
            logger.error(f"Error fetching match {external_id}: {e}")
            return ProcessResult(
                success=False,
                external_id=external_id,
                reason=ProcessFailureReason.ERROR,
                error=str(e),
            )

        if raw_match is None:
            logger.warning(f"Match not found in Leaguepedia: {external_id}")
            return ProcessResult(
                success=False,
                external_id=external_id,
                reason=ProcessFailureReason.NOT_FOUND,
            )
        return await self.process_match(raw_match)
