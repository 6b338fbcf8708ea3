"""Reward lookup endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from ...core import get_session
from ...services import EngineError, StorageError, associations_for_board, grants_for_user, parse_period
from ...services.validation import parse_game_type, parse_user_id, resolve_game
from ..errors import http_error

router = APIRouter(tags=["rewards"])


@router.get("/users/{user_id}/rewards")
def get_user_rewards(user_id: str, session: Session = Depends(get_session)):
    """Rewards granted to a user, newest first."""

    try:
        user_uuid = parse_user_id(user_id)
        grants = grants_for_user(session, user_uuid)
    except SQLAlchemyError as exc:
        raise http_error(StorageError("reward read", str(exc))) from exc
    except EngineError as exc:
        raise http_error(exc) from exc

    return {
        "user_id": str(user_uuid),
        "rewards": [
            {
                "reward_id": reward.id,
                "name": reward.name,
                "description": reward.description,
                "type": reward.type,
                "value": reward.value,
                "game_id": grant.game_id,
                "period": grant.period.value,
                "rank": grant.rank,
                "granted_at": grant.granted_at.isoformat(),
            }
            for grant, reward in grants
        ],
    }


@router.get("/games/{game_type}/rewards")
def get_available_rewards(
    game_type: str, period: str = "all_time", session: Session = Depends(get_session)
):
    """Rewards configured for a game board with the position they pay out on."""

    try:
        period_kind = parse_period(period)
        game = resolve_game(session, parse_game_type(game_type))
        associations = associations_for_board(session, game.id, period_kind)
    except SQLAlchemyError as exc:
        raise http_error(StorageError("reward read", str(exc))) from exc
    except EngineError as exc:
        raise http_error(exc) from exc

    return {
        "game_type": game.game_type.value,
        "period": period_kind.value,
        "rewards": [
            {
                "reward_id": reward.id,
                "name": reward.name,
                "description": reward.description,
                "position": association.position,
            }
            for association, reward in associations
        ],
    }


__all__ = ["router"]
