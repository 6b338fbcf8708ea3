"""Exactly-once persistence of reward grants."""

from __future__ import annotations

import logging
import uuid
from typing import List, Tuple

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..models import PeriodKind, Reward, UserRewardGrant

logger = logging.getLogger(__name__)


def grant_exists(
    session: Session,
    user_id: uuid.UUID,
    reward_id: int,
    game_id: int,
    period: PeriodKind,
) -> bool:
    statement = select(UserRewardGrant.id).where(
        UserRewardGrant.user_id == user_id,
        UserRewardGrant.reward_id == reward_id,
        UserRewardGrant.game_id == game_id,
        UserRewardGrant.period == period,
    )
    return session.exec(statement).first() is not None


def grant(
    session: Session,
    user_id: uuid.UUID,
    reward_id: int,
    game_id: int,
    period: PeriodKind,
    rank: int,
) -> bool:
    """Record the grant unless one already exists for the key.

    The insert runs in a savepoint so that losing a race against the unique
    constraint leaves the surrounding transaction usable. Returns True only
    when this call created the row.
    """

    if grant_exists(session, user_id, reward_id, game_id, period):
        logger.debug(
            "Reward %s already granted to user %s on %s board of game %s",
            reward_id, user_id, period.value, game_id,
        )
        return False

    try:
        with session.begin_nested():
            session.add(
                UserRewardGrant(
                    user_id=user_id,
                    reward_id=reward_id,
                    game_id=game_id,
                    period=period,
                    rank=rank,
                )
            )
    except IntegrityError:
        logger.info(
            "Concurrent grant of reward %s to user %s on %s board of game %s won elsewhere",
            reward_id, user_id, period.value, game_id,
        )
        return False

    logger.info(
        "Granted reward %s to user %s for rank %s on %s board of game %s",
        reward_id, user_id, rank, period.value, game_id,
    )
    return True


def grants_for_user(session: Session, user_id: uuid.UUID) -> List[Tuple[UserRewardGrant, Reward]]:
    """Grants held by ``user_id`` with their reward rows, newest first."""

    statement = (
        select(UserRewardGrant, Reward)
        .join(Reward, Reward.id == UserRewardGrant.reward_id)
        .where(UserRewardGrant.user_id == user_id)
        .order_by(UserRewardGrant.granted_at.desc(), UserRewardGrant.id.desc())
    )
    return list(session.exec(statement).all())


__all__ = ["grant", "grant_exists", "grants_for_user"]
