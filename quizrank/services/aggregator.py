"""Best-score aggregation per (user, game, period)."""

from __future__ import annotations

import enum
import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from sqlmodel import Session, select

from ..core.time import utcnow
from ..models import LeaderboardEntry, PeriodKind

logger = logging.getLogger(__name__)


class ApplyOutcome(str, enum.Enum):
    created = "created"
    updated = "updated"
    unchanged = "unchanged"


@dataclass(frozen=True)
class ApplyResult:
    outcome: ApplyOutcome
    points: int
    previous_points: Optional[int] = None

    @property
    def changed(self) -> bool:
        """True when the stored points moved and the board needs re-ranking."""
        return self.outcome is not ApplyOutcome.unchanged


def entry_query(user_id: uuid.UUID, game_id: int, period: PeriodKind):
    return select(LeaderboardEntry).where(
        LeaderboardEntry.user_id == user_id,
        LeaderboardEntry.game_id == game_id,
        LeaderboardEntry.period == period,
    )


def get_entry(
    session: Session,
    user_id: uuid.UUID,
    game_id: int,
    period: PeriodKind,
    *,
    for_update: bool = False,
) -> Optional[LeaderboardEntry]:
    statement = entry_query(user_id, game_id, period)
    if for_update:
        statement = statement.with_for_update()
    return session.exec(statement).first()


def apply_score(
    session: Session,
    user_id: uuid.UUID,
    game_id: int,
    period: PeriodKind,
    points: int,
) -> ApplyResult:
    """Store ``points`` if it beats the user's best on this board.

    A new entry is created with its rank pending. Existing entries only move
    up; an equal or lower score leaves the row untouched. The caller owns the
    transaction and must re-rank the partition when the result changed.
    """

    entry = get_entry(session, user_id, game_id, period, for_update=True)

    if entry is None:
        entry = LeaderboardEntry(
            user_id=user_id, game_id=game_id, period=period, points=points
        )
        session.add(entry)
        session.flush()
        logger.info(
            "Created %s entry for user %s on game %s with %s points",
            period.value, user_id, game_id, points,
        )
        return ApplyResult(ApplyOutcome.created, points)

    if points > entry.points:
        previous = entry.points
        entry.points = points
        entry.updated_at = utcnow()
        session.add(entry)
        session.flush()
        logger.info(
            "Raised %s entry for user %s on game %s from %s to %s points",
            period.value, user_id, game_id, previous, points,
        )
        return ApplyResult(ApplyOutcome.updated, points, previous)

    logger.debug(
        "Kept %s entry for user %s on game %s at %s points (submitted %s)",
        period.value, user_id, game_id, entry.points, points,
    )
    return ApplyResult(ApplyOutcome.unchanged, entry.points, entry.points)


__all__ = ["ApplyOutcome", "ApplyResult", "apply_score", "entry_query", "get_entry"]
