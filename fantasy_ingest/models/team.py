from datetime import datetime
from sqlalchemy import Integer, String, Boolean, DateTime, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fantasy_ingest.database import Base
from fantasy_ingest.utils.timestamps import utcnow


class Team(Base):
    __tablename__ = "teams"
    __table_args__ = (
        UniqueConstraint("video_game_id", "name", name="uq_teams_video_game_name"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    video_game_id: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    short_name: Mapped[str | None] = mapped_column(String(100), index=True)
    region: Mapped[str] = mapped_column(String(50), default="Unknown")
    active: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # Relationships
    players: Mapped[list["Player"]] = relationship("Player", back_populates="team")
    match_stats: Mapped[list["TeamMatchStats"]] = relationship(
        "TeamMatchStats", back_populates="team"
    )
