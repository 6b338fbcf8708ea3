"""Read-only leaderboard projections."""

from __future__ import annotations

import uuid
from typing import List, Optional

from sqlalchemy import func
from sqlmodel import Session, SQLModel, select

from ..core.config import PLACEHOLDER_USERNAME
from ..models import LeaderboardEntry, PeriodKind, User
from .errors import ValidationError
from .ranking import competition_ranks, partition_query


class LeaderboardRow(SQLModel):
    """One line of a leaderboard as shown to players."""

    rank: int
    user_id: uuid.UUID
    username: str
    avatar_url: Optional[str] = None
    points: int

    def to_api(self) -> dict:
        return {
            "rank": self.rank,
            "userId": str(self.user_id),
            "username": self.username,
            "avatarUrl": self.avatar_url,
            "points": self.points,
        }


def parse_period(raw: object) -> PeriodKind:
    """Check a period-kind query value."""

    if isinstance(raw, PeriodKind):
        return raw
    try:
        return PeriodKind(str(raw))
    except ValueError as exc:
        allowed = ", ".join(item.value for item in PeriodKind)
        raise ValidationError(f"period must be one of: {allowed}", "Invalid period parameter") from exc


def _check_limit(limit: int) -> None:
    if limit < 1:
        raise ValidationError("limit must be a positive integer")


def _game_rows(
    session: Session, game_id: int, period: PeriodKind, limit: int
) -> List[LeaderboardRow]:
    board = partition_query(game_id, period).limit(limit).subquery()
    statement = (
        select(
            board.c.rank,
            board.c.user_id,
            board.c.points,
            User.username,
            User.avatar_url,
        )
        .select_from(board)
        .outerjoin(User, User.id == board.c.user_id)
        .order_by(board.c.points.desc(), board.c.updated_at.asc(), board.c.id.asc())
    )
    rows = session.exec(statement).all()

    # Pending ranks only show up if a recompute never completed; derive them.
    derived = competition_ranks([row.points for row in rows])
    return [
        LeaderboardRow(
            rank=row.rank if row.rank is not None else fallback,
            user_id=row.user_id,
            username=row.username or PLACEHOLDER_USERNAME,
            avatar_url=row.avatar_url,
            points=row.points,
        )
        for row, fallback in zip(rows, derived)
    ]


def _global_rows(session: Session, period: PeriodKind, limit: int) -> List[LeaderboardRow]:
    total = func.sum(LeaderboardEntry.points).label("points")
    latest = func.max(LeaderboardEntry.updated_at).label("updated_at")
    totals = (
        select(LeaderboardEntry.user_id, total, latest)
        .where(LeaderboardEntry.period == period)
        .group_by(LeaderboardEntry.user_id)
        .subquery()
    )
    statement = (
        select(totals.c.user_id, totals.c.points, User.username, User.avatar_url)
        .select_from(totals)
        .outerjoin(User, User.id == totals.c.user_id)
        .order_by(totals.c.points.desc(), totals.c.updated_at.asc(), totals.c.user_id.asc())
        .limit(limit)
    )
    rows = session.exec(statement).all()
    ranks = competition_ranks([int(row.points) for row in rows])
    return [
        LeaderboardRow(
            rank=rank,
            user_id=row.user_id,
            username=row.username or PLACEHOLDER_USERNAME,
            avatar_url=row.avatar_url,
            points=int(row.points),
        )
        for row, rank in zip(rows, ranks)
    ]


def read(
    session: Session,
    game_id: Optional[int],
    period: PeriodKind,
    limit: int,
) -> List[LeaderboardRow]:
    """Top ``limit`` rows of a game board, or of the global board when
    ``game_id`` is None. An empty board reads as an empty list."""

    _check_limit(limit)
    if game_id is None:
        return _global_rows(session, period, limit)
    return _game_rows(session, game_id, period, limit)


__all__ = ["LeaderboardRow", "parse_period", "read"]
