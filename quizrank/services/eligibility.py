"""Exact-position reward lookup for a freshly ranked user."""

from __future__ import annotations

import uuid
from typing import List, Optional, Tuple

from sqlmodel import Session, select

from ..core.config import REWARD_MAX_POSITION
from ..models import PeriodKind, Reward, RewardGameAssociation
from .aggregator import get_entry


def current_rank(
    session: Session, user_id: uuid.UUID, game_id: int, period: PeriodKind
) -> Optional[int]:
    entry = get_entry(session, user_id, game_id, period)
    return entry.rank if entry else None


def rewards_for_position(
    session: Session, game_id: int, period: PeriodKind, position: int
) -> List[int]:
    """Active rewards bound to exactly ``position`` on the board."""

    statement = (
        select(RewardGameAssociation.reward_id)
        .join(Reward, Reward.id == RewardGameAssociation.reward_id)
        .where(
            RewardGameAssociation.game_id == game_id,
            RewardGameAssociation.period == period,
            RewardGameAssociation.position == position,
            Reward.is_active == True,  # noqa: E712
        )
        .order_by(RewardGameAssociation.reward_id)
    )
    return list(session.exec(statement).all())


def match_rewards(
    session: Session,
    user_id: uuid.UUID,
    game_id: int,
    period: PeriodKind,
    max_position: int = REWARD_MAX_POSITION,
) -> List[int]:
    """Reward ids earned by the user's current rank on this board.

    Ranks past ``max_position`` (or a rank still pending) never reach the
    association table.
    """

    rank = current_rank(session, user_id, game_id, period)
    if rank is None or rank > max_position:
        return []
    return rewards_for_position(session, game_id, period, rank)


def associations_for_board(
    session: Session, game_id: int, period: PeriodKind
) -> List[Tuple[RewardGameAssociation, Reward]]:
    """Active rewards configured on a board, ordered by position."""

    statement = (
        select(RewardGameAssociation, Reward)
        .join(Reward, Reward.id == RewardGameAssociation.reward_id)
        .where(
            RewardGameAssociation.game_id == game_id,
            RewardGameAssociation.period == period,
            Reward.is_active == True,  # noqa: E712
        )
        .order_by(RewardGameAssociation.position, RewardGameAssociation.reward_id)
    )
    return list(session.exec(statement).all())


__all__ = ["associations_for_board", "current_rank", "match_rewards", "rewards_for_position"]
