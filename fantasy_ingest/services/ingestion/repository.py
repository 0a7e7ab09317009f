"""
Persistence for the ingestion pipeline.

Every write is an insert keyed by a uniqueness constraint:
- teams (video_game_id, name) and players (video_game_id, ign): insert if absent
- matches (external_id): insert or refresh descriptive fields
- player_stats (match_id, player_id), team_stats (match_id, team_id):
  insert or overwrite counters and points
"""
import logging
from datetime import datetime

from sqlalchemy import select, or_, func
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from fantasy_ingest.exceptions import PersistenceConflict
from fantasy_ingest.models import (
    Match, MatchStatus, Team, Role, Player, PlayerMatchStats, TeamMatchStats,
)
from fantasy_ingest.schemas.records import MatchRecord, PlayerStatRecord, TeamStatRecord
from fantasy_ingest.utils.timestamps import utcnow

logger = logging.getLogger(__name__)


class IngestionRepository:
    def __init__(self, db: AsyncSession, video_game_id: int = 1):
        self.db = db
        self.video_game_id = video_game_id

    # ==================== Teams ====================

    async def find_team_by_name(self, name: str) -> int | None:
        """Exact match on name or short name."""
        result = await self.db.execute(
            select(Team.id)
            .where(
                Team.video_game_id == self.video_game_id,
                or_(Team.name == name, Team.short_name == name),
            )
            .order_by(Team.id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def insert_team(self, name: str, region: str) -> int:
        """
        Insert a team; raises PersistenceConflict if the name already exists.
        """
        now = utcnow()
        stmt = (
            insert(Team)
            .values(
                video_game_id=self.video_game_id,
                name=name,
                short_name=name,
                region=region,
                active=True,
                created_at=now,
                updated_at=now,
            )
            .on_conflict_do_nothing(index_elements=["video_game_id", "name"])
            .returning(Team.id)
        )
        result = await self.db.execute(stmt)
        team_id = result.scalar_one_or_none()
        if team_id is None:
            raise PersistenceConflict(f"Team {name!r} already exists")
        return team_id

    # ==================== Players ====================

    async def find_player_by_name(self, ign: str) -> int | None:
        result = await self.db.execute(
            select(Player.id).where(
                Player.video_game_id == self.video_game_id,
                Player.ign == ign,
            )
        )
        return result.scalar_one_or_none()

    async def insert_player(self, ign: str, team_id: int | None, role_id: int) -> int:
        """
        Insert a player; raises PersistenceConflict if the ign already exists.
        """
        now = utcnow()
        stmt = (
            insert(Player)
            .values(
                video_game_id=self.video_game_id,
                ign=ign,
                team_id=team_id,
                role_id=role_id,
                active=True,
                created_at=now,
                updated_at=now,
            )
            .on_conflict_do_nothing(index_elements=["video_game_id", "ign"])
            .returning(Player.id)
        )
        result = await self.db.execute(stmt)
        player_id = result.scalar_one_or_none()
        if player_id is None:
            raise PersistenceConflict(f"Player {ign!r} already exists")
        return player_id

    async def find_role_id(self, role_label: str | None) -> int | None:
        """Role by short name (case-insensitive), else by partial name."""
        if not role_label:
            return None
        label = role_label.strip()
        if not label:
            return None

        result = await self.db.execute(
            select(Role.id)
            .where(func.lower(Role.short_name) == label.lower())
            .order_by(Role.id)
            .limit(1)
        )
        role_id = result.scalar_one_or_none()
        if role_id is not None:
            return role_id

        result = await self.db.execute(
            select(Role.id)
            .where(Role.name.icontains(label, autoescape=True))
            .order_by(Role.id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    # ==================== Matches ====================

    async def find_match_id(self, external_id: str) -> int | None:
        result = await self.db.execute(
            select(Match.id).where(Match.external_id == external_id)
        )
        return result.scalar_one_or_none()

    async def upsert_match(self, record: MatchRecord) -> int:
        """
        Insert a match as pending_validation, or refresh its descriptive fields.

        status is never touched on conflict, so a validated match stays validated.
        """
        now = utcnow()
        stmt = insert(Match).values(
            video_game_id=self.video_game_id,
            external_id=record.external_id,
            tournament=record.tournament,
            region=record.region,
            overview_page=record.overview_page,
            occurred_at=record.occurred_at,
            duration_seconds=record.duration_seconds,
            patch_version=record.patch_version,
            week=record.week,
            status=MatchStatus.pending_validation,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["external_id"],
            set_={
                "tournament": stmt.excluded.tournament,
                "region": stmt.excluded.region,
                "overview_page": stmt.excluded.overview_page,
                "occurred_at": func.coalesce(stmt.excluded.occurred_at, Match.occurred_at),
                "duration_seconds": stmt.excluded.duration_seconds,
                "patch_version": stmt.excluded.patch_version,
                "week": stmt.excluded.week,
                "updated_at": stmt.excluded.updated_at,
            },
        ).returning(Match.id)
        result = await self.db.execute(stmt)
        return result.scalar_one()

    async def latest_pending_match_created_at(self) -> datetime | None:
        result = await self.db.execute(
            select(func.max(Match.created_at)).where(
                Match.status == MatchStatus.pending_validation
            )
        )
        return result.scalar_one_or_none()

    # ==================== Statistics ====================

    async def upsert_player_stat(
        self,
        match_id: int,
        player_id: int,
        team_id: int | None,
        record: PlayerStatRecord,
        fantasy_points: float,
        source: str,
    ) -> None:
        now = utcnow()
        stmt = insert(PlayerMatchStats).values(
            match_id=match_id,
            player_id=player_id,
            team_id=team_id,
            champion=record.champion,
            kills=record.kills,
            deaths=record.deaths,
            assists=record.assists,
            cs=record.cs,
            vision_score=record.vision_score,
            gold=record.gold,
            damage=record.damage,
            fantasy_points=fantasy_points,
            source=source,
            validated=False,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["match_id", "player_id"],
            set_={
                "team_id": stmt.excluded.team_id,
                "champion": stmt.excluded.champion,
                "kills": stmt.excluded.kills,
                "deaths": stmt.excluded.deaths,
                "assists": stmt.excluded.assists,
                "cs": stmt.excluded.cs,
                "vision_score": stmt.excluded.vision_score,
                "gold": stmt.excluded.gold,
                "damage": stmt.excluded.damage,
                "fantasy_points": stmt.excluded.fantasy_points,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        await self.db.execute(stmt)

    async def upsert_team_stat(
        self,
        match_id: int,
        team_id: int,
        record: TeamStatRecord,
        fantasy_points: float,
        source: str,
    ) -> None:
        now = utcnow()
        stmt = insert(TeamMatchStats).values(
            match_id=match_id,
            team_id=team_id,
            dragons=record.dragons,
            rift_heralds=record.rift_heralds,
            barons=record.barons,
            void_grubs=record.void_grubs,
            atakhans=record.atakhans,
            turrets=record.turrets,
            inhibitors=record.inhibitors,
            total_kills=record.total_kills,
            won=record.won,
            fantasy_points=fantasy_points,
            source=source,
            validated=False,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["match_id", "team_id"],
            set_={
                "dragons": stmt.excluded.dragons,
                "rift_heralds": stmt.excluded.rift_heralds,
                "barons": stmt.excluded.barons,
                "void_grubs": stmt.excluded.void_grubs,
                "atakhans": stmt.excluded.atakhans,
                "turrets": stmt.excluded.turrets,
                "inhibitors": stmt.excluded.inhibitors,
                "total_kills": stmt.excluded.total_kills,
                "won": stmt.excluded.won,
                "fantasy_points": stmt.excluded.fantasy_points,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        await self.db.execute(stmt)
