from datetime import datetime
from sqlalchemy import BigInteger, Integer, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fantasy_ingest.database import Base
from fantasy_ingest.utils.timestamps import utcnow

PLAYER_PK_TYPE = BigInteger().with_variant(Integer, "sqlite")


class Player(Base):
    __tablename__ = "players"
    __table_args__ = (
        UniqueConstraint("video_game_id", "ign", name="uq_players_video_game_ign"),
    )

    id: Mapped[int] = mapped_column(PLAYER_PK_TYPE, primary_key=True, autoincrement=True)
    video_game_id: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    ign: Mapped[str] = mapped_column(String(100), nullable=False)  # in-game name
    team_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("teams.id"), index=True)
    role_id: Mapped[int] = mapped_column(Integer, ForeignKey("roles.id"), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # Relationships
    team: Mapped["Team"] = relationship("Team", back_populates="players")
    role: Mapped["Role"] = relationship("Role")
    match_stats: Mapped[list["PlayerMatchStats"]] = relationship(
        "PlayerMatchStats", back_populates="player"
    )
