"""Database models for rewards, their game bindings and grants."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Index, UniqueConstraint
from sqlmodel import Field as ORMField, SQLModel

from ..core.time import utcnow
from .leaderboard import PeriodKind


class Reward(SQLModel, table=True):
    """Prize that can be bound to leaderboard positions."""

    __tablename__ = "rewards"

    id: Optional[int] = ORMField(default=None, primary_key=True)
    name: str
    description: str = ""
    type: str = "physical"
    value: str = ""
    is_active: bool = True
    created_at: datetime = ORMField(default_factory=utcnow)


class RewardGameAssociation(SQLModel, table=True):
    """Binds a reward to a rank position of one (game, period) board."""

    __tablename__ = "reward_games"
    __table_args__ = (
        UniqueConstraint("game_id", "period", "reward_id", name="uq_reward_games_key"),
        Index("ix_reward_games_lookup", "game_id", "period", "position"),
    )

    id: Optional[int] = ORMField(default=None, primary_key=True)
    game_id: int = ORMField(foreign_key="games.id")
    reward_id: int = ORMField(foreign_key="rewards.id")
    period: PeriodKind
    position: int = ORMField(ge=1)


class UserRewardGrant(SQLModel, table=True):
    """Immutable record that a reward was given for a (game, period) board."""

    __tablename__ = "user_rewards"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "reward_id", "game_id", "period", name="uq_user_rewards_key"
        ),
    )

    id: Optional[int] = ORMField(default=None, primary_key=True)
    user_id: uuid.UUID = ORMField(index=True)
    reward_id: int = ORMField(foreign_key="rewards.id")
    game_id: int = ORMField(foreign_key="games.id")
    period: PeriodKind
    rank: int
    granted_at: datetime = ORMField(default_factory=utcnow)


__all__ = ["Reward", "RewardGameAssociation", "UserRewardGrant"]
