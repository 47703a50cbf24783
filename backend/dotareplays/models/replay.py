"""Replay ORM — the versioned catalog record table.

Invariants:
    - id is an identity primary key; created_at and version are store-assigned
    - version starts at 1 and only the conditional UPDATE in ReplayStore bumps it
    - heroes is TEXT[] on PostgreSQL (GIN-indexable, supports @>) and JSON elsewhere

Design Decisions:
    - ARRAY with a JSON variant: tests run on SQLite, production on PostgreSQL
"""

from datetime import datetime, timezone

from sqlalchemy import BigInteger, DateTime, Integer, JSON, Text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column

from dotareplays.db.base import Base

HeroesType = ARRAY(Text).with_variant(JSON(), "sqlite")


class ReplayModel(Base):
    """Replay row."""
    __tablename__ = "replays"

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer(), "sqlite"),
        primary_key=True, autoincrement=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    runtime: Mapped[int] = mapped_column(Integer, nullable=False)
    heroes: Mapped[list[str]] = mapped_column(HeroesType, nullable=False)
    version: Mapped[int] = mapped_column(
        Integer, nullable=False, default=1, server_default="1",
    )
