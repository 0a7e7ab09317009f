from datetime import datetime
from decimal import Decimal
from sqlalchemy import Integer, String, Boolean, Numeric, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fantasy_ingest.database import Base
from fantasy_ingest.models.match import MATCH_PK_TYPE
from fantasy_ingest.models.player import PLAYER_PK_TYPE
from fantasy_ingest.utils.timestamps import utcnow


class PlayerMatchStats(Base):
    """
    Player statistics for a single game from Leaguepedia ScoreboardPlayers.

    fantasy_points is derived from the stored counters and is recomputed
    whenever the row is re-ingested.
    """

    __tablename__ = "player_stats"
    __table_args__ = (
        UniqueConstraint("match_id", "player_id", name="uq_player_stats_match_player"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    match_id: Mapped[int] = mapped_column(MATCH_PK_TYPE, ForeignKey("matches.id"), index=True)
    player_id: Mapped[int] = mapped_column(PLAYER_PK_TYPE, ForeignKey("players.id"), index=True)
    team_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("teams.id"), index=True)
    champion: Mapped[str | None] = mapped_column(String(50))

    kills: Mapped[int] = mapped_column(Integer, default=0)
    deaths: Mapped[int] = mapped_column(Integer, default=0)
    assists: Mapped[int] = mapped_column(Integer, default=0)
    cs: Mapped[int] = mapped_column(Integer, default=0)
    vision_score: Mapped[int] = mapped_column(Integer, default=0)
    gold: Mapped[int] = mapped_column(Integer, default=0)
    damage: Mapped[int] = mapped_column(Integer, default=0)

    fantasy_points: Mapped[Decimal] = mapped_column(Numeric(8, 2), default=0)
    source: Mapped[str] = mapped_column(String(50), default="leaguepedia")
    validated: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # Relationships
    match: Mapped["Match"] = relationship("Match", back_populates="player_stats")
    player: Mapped["Player"] = relationship("Player", back_populates="match_stats")
