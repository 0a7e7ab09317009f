import enum
from datetime import datetime
from sqlalchemy import BigInteger, Integer, String, DateTime, Enum, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fantasy_ingest.database import Base
from fantasy_ingest.utils.timestamps import utcnow

# BIGINT key on PostgreSQL; sqlite only autoincrements INTEGER primary keys.
MATCH_PK_TYPE = BigInteger().with_variant(Integer, "sqlite")


class MatchStatus(str, enum.Enum):
    """Lifecycle of an ingested match."""
    pending_validation = "pending_validation"
    validated = "validated"


class Match(Base):
    __tablename__ = "matches"
    __table_args__ = (
        Index("ix_matches_status_created_at", "status", "created_at"),
    )

    id: Mapped[int] = mapped_column(MATCH_PK_TYPE, primary_key=True, autoincrement=True)
    video_game_id: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    # Leaguepedia GameId, e.g. "LPL/2026 Season/Split 1_Week 3_10_2"
    external_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    tournament: Mapped[str | None] = mapped_column(String(255))
    region: Mapped[str | None] = mapped_column(String(50), index=True)  # LPL, LCK, ...
    overview_page: Mapped[str | None] = mapped_column(String(255))
    occurred_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), index=True)
    duration_seconds: Mapped[int] = mapped_column(Integer, default=0)
    patch_version: Mapped[str | None] = mapped_column(String(20))
    week: Mapped[str | None] = mapped_column(String(20))  # "Week 3"

    status: Mapped[MatchStatus] = mapped_column(
        Enum(MatchStatus),
        nullable=False,
        default=MatchStatus.pending_validation,
        server_default=MatchStatus.pending_validation.value,
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # Relationships
    player_stats: Mapped[list["PlayerMatchStats"]] = relationship(
        "PlayerMatchStats", back_populates="match"
    )
    team_stats: Mapped[list["TeamMatchStats"]] = relationship(
        "TeamMatchStats", back_populates="match"
    )
