from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from fantasy_ingest.database import Base


class Role(Base):
    """Player role reference data (Top, Jungle, Mid, Bot, Support)."""

    __tablename__ = "roles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    short_name: Mapped[str | None] = mapped_column(String(20))
