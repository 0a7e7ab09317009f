from datetime import datetime
from decimal import Decimal
from sqlalchemy import Integer, String, Boolean, Numeric, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fantasy_ingest.database import Base
from fantasy_ingest.models.match import MATCH_PK_TYPE
from fantasy_ingest.utils.timestamps import utcnow


class TeamMatchStats(Base):
    """Team objectives for a single game from Leaguepedia ScoreboardTeams."""

    __tablename__ = "team_stats"
    __table_args__ = (
        UniqueConstraint("match_id", "team_id", name="uq_team_stats_match_team"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    match_id: Mapped[int] = mapped_column(MATCH_PK_TYPE, ForeignKey("matches.id"), index=True)
    team_id: Mapped[int] = mapped_column(Integer, ForeignKey("teams.id"), index=True)

    # Epic monsters
    dragons: Mapped[int] = mapped_column(Integer, default=0)
    rift_heralds: Mapped[int] = mapped_column(Integer, default=0)
    barons: Mapped[int] = mapped_column(Integer, default=0)
    void_grubs: Mapped[int] = mapped_column(Integer, default=0)
    atakhans: Mapped[int] = mapped_column(Integer, default=0)

    # Structures
    turrets: Mapped[int] = mapped_column(Integer, default=0)
    inhibitors: Mapped[int] = mapped_column(Integer, default=0)

    total_kills: Mapped[int] = mapped_column(Integer, default=0)
    won: Mapped[bool] = mapped_column(Boolean, default=False)

    fantasy_points: Mapped[Decimal] = mapped_column(Numeric(8, 2), default=0)
    source: Mapped[str] = mapped_column(String(50), default="leaguepedia")
    validated: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # Relationships
    match: Mapped["Match"] = relationship("Match", back_populates="team_stats")
    team: Mapped["Team"] = relationship("Team", back_populates="match_stats")
