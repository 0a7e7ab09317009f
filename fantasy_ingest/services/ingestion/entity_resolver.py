"""
Find-or-create for teams and players referenced by statistic rows.

Names are the de-duplication key: exact match only, no fuzzy matching.
"""
import enum
import logging
from dataclasses import dataclass

from fantasy_ingest.exceptions import EntityResolutionFailure, PersistenceConflict
from fantasy_ingest.services.ingestion.repository import IngestionRepository

logger = logging.getLogger(__name__)

UNKNOWN_REGION = "Unknown"


class ResolutionKind(str, enum.Enum):
    found = "found"
    created = "created"
    # Created, but a best-effort guess filled a missing attribute (role)
    created_with_fallback = "created_with_fallback"


@dataclass(frozen=True)
class Resolution:
    entity_id: int
    kind: ResolutionKind
    fallback_reason: str | None = None

    @property
    def is_fallback(self) -> bool:
        return self.kind == ResolutionKind.created_with_fallback


class EntityResolver:
    """
    Resolves team and player names to ids, creating rows on first sighting.

    Repeated calls with the same name never create duplicates. If an insert
    loses a race, the repository raises PersistenceConflict and the row is
    read back instead.
    """

    def __init__(self, repository: IngestionRepository, default_role_id: int = 1):
        self.repository = repository
        self.default_role_id = default_role_id
        self._team_cache: dict[str, int] = {}
        self._player_cache: dict[str, int] = {}

    def clear_cache(self) -> None:
        self._team_cache.clear()
        self._player_cache.clear()

    async def resolve_team(self, name: str | None, region: str | None = None) -> Resolution:
        name = (name or "").strip()
        if not name:
            raise EntityResolutionFailure("Team name is empty")

        cached = self._team_cache.get(name)
        if cached is not None:
            return Resolution(cached, ResolutionKind.found)

        team_id = await self.repository.find_team_by_name(name)
        if team_id is not None:
            self._team_cache[name] = team_id
            return Resolution(team_id, ResolutionKind.found)

        try:
            team_id = await self.repository.insert_team(name, region or UNKNOWN_REGION)
        except PersistenceConflict:
            team_id = await self.repository.find_team_by_name(name)
            if team_id is None:
                raise EntityResolutionFailure(f"Team {name!r} conflicted but could not be read back")
            self._team_cache[name] = team_id
            return Resolution(team_id, ResolutionKind.found)

        logger.info(f"Created new team {name!r} (id={team_id}, region={region or UNKNOWN_REGION})")
        self._team_cache[name] = team_id
        return Resolution(team_id, ResolutionKind.created)

    async def resolve_player(
        self,
        name: str | None,
        team_name: str | None,
        role: str | None,
        region: str | None = None,
    ) -> Resolution:
        name = (name or "").strip()
        if not name:
            raise EntityResolutionFailure("Player name is empty")

        cached = self._player_cache.get(name)
        if cached is not None:
            return Resolution(cached, ResolutionKind.found)

        player_id = await self.repository.find_player_by_name(name)
        if player_id is not None:
            self._player_cache[name] = player_id
            return Resolution(player_id, ResolutionKind.found)

        team_id = None
        if team_name:
            team_id = (await self.resolve_team(team_name, region)).entity_id

        role_id = await self.repository.find_role_id(role)
        fallback_reason = None
        if role_id is None:
            role_id = self.default_role_id
            fallback_reason = f"unknown role {role!r}, defaulted to role {role_id}"
            logger.warning(f"Player {name!r}: {fallback_reason}")

        try:
            player_id = await self.repository.insert_player(name, team_id, role_id)
        except PersistenceConflict:
            player_id = await self.repository.find_player_by_name(name)
            if player_id is None:
                raise EntityResolutionFailure(f"Player {name!r} conflicted but could not be read back")
            self._player_cache[name] = player_id
            return Resolution(player_id, ResolutionKind.found)

        logger.info(f"Created new player {name!r} (id={player_id}, team={team_name}, role={role})")
        self._player_cache[name] = player_id
        if fallback_reason:
            return Resolution(player_id, ResolutionKind.created_with_fallback, fallback_reason)
        return Resolution(player_id, ResolutionKind.created)
