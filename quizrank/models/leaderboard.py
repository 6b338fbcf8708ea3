"""Database model for per-period leaderboard aggregates."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Index, UniqueConstraint
from sqlmodel import Field as ORMField, SQLModel

from ..core.time import utcnow


class PeriodKind(str, enum.Enum):
    """Independent ranking windows tracked for every game."""

    all_time = "all_time"
    monthly = "monthly"
    weekly = "weekly"


class LeaderboardEntry(SQLModel, table=True):
    """Best points of one user on one (game, period) board."""

    __tablename__ = "leaderboard_entries"
    __table_args__ = (
        UniqueConstraint("user_id", "game_id", "period", name="uq_leaderboard_entries_key"),
        Index("ix_leaderboard_entries_partition", "game_id", "period", "points"),
    )

    id: Optional[int] = ORMField(default=None, primary_key=True)
    user_id: uuid.UUID = ORMField(index=True)
    game_id: int = ORMField(foreign_key="games.id")
    period: PeriodKind
    points: int = ORMField(ge=0)
    rank: Optional[int] = None
    created_at: datetime = ORMField(default_factory=utcnow)
    updated_at: datetime = ORMField(default_factory=utcnow)


__all__ = ["LeaderboardEntry", "PeriodKind"]
