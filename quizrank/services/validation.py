"""Shape checks for incoming score submissions."""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Mapping

from sqlmodel import Session, select

from ..core.time import utcnow
from ..models import Game, GameType
from .errors import NotFoundError, ValidationError

_INTEGER = re.compile(r"-?[0-9]+")


@dataclass(frozen=True)
class ScoreEvent:
    """A validated submission with its game resolved and points derived."""

    user_id: uuid.UUID
    game_id: int
    game_type: GameType
    correct_answers: int
    total_questions: int
    session_id: str
    points: int
    submitted_at: datetime = field(default_factory=utcnow)


def compute_points(correct: int, total: int) -> int:
    """Percentage of correct answers, rounded half up to an integer."""

    return (correct * 200 + total) // (total * 2)


def _coerce_count(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be an integer")
    if isinstance(value, int):
        result = value
    elif isinstance(value, float) and value.is_integer():
        result = int(value)
    elif isinstance(value, str) and _INTEGER.fullmatch(value.strip()):
        result = int(value.strip())
    else:
        raise ValidationError(f"{name} must be an integer")
    if result < 0:
        raise ValidationError(f"{name} must not be negative")
    return result


def parse_user_id(raw: Any) -> uuid.UUID:
    """Parse an opaque user identifier (UUID)."""

    if isinstance(raw, uuid.UUID):
        return raw
    if not isinstance(raw, str) or not raw.strip():
        raise ValidationError("userId is required")
    try:
        return uuid.UUID(raw.strip())
    except ValueError as exc:
        raise ValidationError("userId must be a valid UUID") from exc


def parse_game_type(raw: Any) -> GameType:
    """Check a game-type token against the known enumerated values."""

    if isinstance(raw, GameType):
        return raw
    if not isinstance(raw, str) or not raw.strip():
        raise ValidationError("gameType is required")
    try:
        return GameType(raw.strip())
    except ValueError as exc:
        allowed = ", ".join(item.value for item in GameType)
        raise ValidationError(f"gameType must be one of: {allowed}") from exc


def resolve_game(session: Session, game_type: GameType) -> Game:
    """Look up the catalog row for ``game_type``."""

    game = session.exec(select(Game).where(Game.game_type == game_type)).first()
    if game is None:
        raise NotFoundError(f"Game '{game_type.value}' not found", "Game not found")
    return game


def validate_score(session: Session, payload: Mapping[str, Any]) -> ScoreEvent:
    """Validate a raw submission body and resolve its game.

    Raises ``ValidationError`` for malformed fields and ``NotFoundError`` when
    the game-type token has no catalog row. Reads only.
    """

    if not isinstance(payload, Mapping):
        raise ValidationError("Request body must be a JSON object")

    body: Dict[str, Any] = dict(payload)
    missing = [
        name
        for name in ("userId", "gameType", "correctAnswers", "totalQuestions", "sessionId")
        if body.get(name) is None
    ]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    user_id = parse_user_id(body["userId"])
    game_type = parse_game_type(body["gameType"])
    correct = _coerce_count("correctAnswers", body["correctAnswers"])
    total = _coerce_count("totalQuestions", body["totalQuestions"])
    if total == 0:
        raise ValidationError("totalQuestions must be greater than zero")
    if correct > total:
        raise ValidationError("correctAnswers cannot exceed totalQuestions")

    session_id = body["sessionId"]
    if not isinstance(session_id, str) or not session_id.strip():
        raise ValidationError("sessionId is required")

    game = resolve_game(session, game_type)

    return ScoreEvent(
        user_id=user_id,
        game_id=game.id,
        game_type=game_type,
        correct_answers=correct,
        total_questions=total,
        session_id=session_id.strip(),
        points=compute_points(correct, total),
    )


__all__ = [
    "ScoreEvent",
    "compute_points",
    "parse_game_type",
    "parse_user_id",
    "resolve_game",
    "validate_score",
]
