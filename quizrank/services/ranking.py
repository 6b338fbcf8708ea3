"""Full-partition rank recompute for one (game, period) board."""

from __future__ import annotations

import logging
from typing import Dict, List, Sequence, Tuple

from sqlmodel import Session, select

from ..models import Game, LeaderboardEntry, PeriodKind

logger = logging.getLogger(__name__)


def competition_ranks(points: Sequence[int]) -> List[int]:
    """Rank values in descending order; ties share a rank.

    The rank of a value is one plus the number of strictly greater values, so
    ``[90, 80, 80, 70]`` ranks as ``[1, 2, 2, 4]``. Input must already be
    sorted descending.
    """

    ranks: List[int] = []
    for index, value in enumerate(points):
        if index and value == points[index - 1]:
            ranks.append(ranks[-1])
        else:
            ranks.append(index + 1)
    return ranks


def partition_query(game_id: int, period: PeriodKind):
    """Entries of one board, best first, earliest achievement breaking ties."""

    return (
        select(LeaderboardEntry)
        .where(LeaderboardEntry.game_id == game_id, LeaderboardEntry.period == period)
        .order_by(
            LeaderboardEntry.points.desc(),
            LeaderboardEntry.updated_at.asc(),
            LeaderboardEntry.id.asc(),
        )
    )


def anchor_query(game_id: int):
    return select(Game).where(Game.id == game_id).with_for_update()


def lock_partition(session: Session, game_id: int) -> None:
    """Take the game row lock that serializes writers to this game's boards.

    Must run before the entry is read so that concurrent processes cannot
    interleave their aggregate writes and recomputes. SQLite ignores the row
    lock; there the transaction already holds the database write lock.
    """

    session.exec(anchor_query(game_id)).first()


def recompute(session: Session, game_id: int, period: PeriodKind) -> Dict[int, int]:
    """Re-rank every entry on the board and write changed ranks back.

    Rows are locked for update where the backend supports it. Returns a map of
    entry id to its new rank.
    """

    entries = session.exec(partition_query(game_id, period).with_for_update()).all()
    ranks = competition_ranks([entry.points for entry in entries])

    changed: List[Tuple[int, int]] = []
    for entry, rank in zip(entries, ranks):
        if entry.rank != rank:
            entry.rank = rank
            session.add(entry)
            changed.append((entry.id, rank))
    session.flush()

    logger.debug(
        "Re-ranked %s board of game %s: %s entries, %s changed",
        period.value, game_id, len(entries), len(changed),
    )
    return {entry.id: rank for entry, rank in zip(entries, ranks)}


__all__ = [
    "anchor_query",
    "competition_ranks",
    "lock_partition",
    "partition_query",
    "recompute",
]
