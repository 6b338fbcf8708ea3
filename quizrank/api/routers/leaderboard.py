"""Leaderboard endpoints."""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from ...core import LEADERBOARD_DEFAULT_LIMIT, LEADERBOARD_MAX_LIMIT, get_engine, get_session
from ...services import (
    EngineError,
    PartitionLocks,
    ScoreSubmissionService,
    StorageError,
    parse_period,
    read,
)
from ...services.validation import parse_game_type, resolve_game
from ..errors import http_error

logger = logging.getLogger(__name__)

router = APIRouter(tags=["leaderboard"])

_PARTITION_LOCKS = PartitionLocks()


def get_submission_service(engine: Engine = Depends(get_engine)) -> ScoreSubmissionService:
    """Submission service bound to the process-wide partition locks."""

    return ScoreSubmissionService(engine, _PARTITION_LOCKS)


def _clamp_limit(limit: int) -> int:
    return min(limit, LEADERBOARD_MAX_LIMIT)


def _read_board(session: Session, game_type: str | None, period: str, limit: int):
    try:
        period_kind = parse_period(period)
        game_id = None
        if game_type is not None:
            game_id = resolve_game(session, parse_game_type(game_type)).id
        rows = read(session, game_id, period_kind, _clamp_limit(limit))
    except SQLAlchemyError as exc:
        logger.error("Storage failure while reading leaderboard: %s", exc)
        raise http_error(StorageError("leaderboard read", str(exc))) from exc
    except EngineError as exc:
        raise http_error(exc) from exc
    return {"data": [row.to_api() for row in rows]}


@router.post("/leaderboard/score")
def submit_score(
    body: Dict[str, Any],
    service: ScoreSubmissionService = Depends(get_submission_service),
):
    """Submit a quiz result to every period board of its game."""

    try:
        result = service.submit(body)
    except EngineError as exc:
        raise http_error(exc) from exc

    return {
        "success": True,
        "message": "Score updated successfully",
        "points": result.event.points,
        "ranks": {
            period.value: outcome.rank
            for period, outcome in result.outcomes.items()
            if outcome.rank is not None
        },
    }


@router.get("/leaderboard")
def get_global_leaderboard(
    period: str = "all_time",
    limit: int = LEADERBOARD_DEFAULT_LIMIT,
    session: Session = Depends(get_session),
):
    """Best players across all games for a period."""

    return _read_board(session, None, period, limit)


@router.get("/leaderboard/{game_type}")
def get_game_leaderboard(
    game_type: str,
    period: str = "all_time",
    limit: int = LEADERBOARD_DEFAULT_LIMIT,
    session: Session = Depends(get_session),
):
    """Leaderboard of one game for a period."""

    return _read_board(session, game_type, period, limit)


__all__ = ["get_submission_service", "router"]
