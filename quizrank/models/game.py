"""Database model for the game catalog."""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Optional

from sqlmodel import Field as ORMField, SQLModel

from ..core.time import utcnow


class GameType(str, enum.Enum):
    """External game-type tokens accepted on score submission."""

    books = "books"
    authors = "authors"
    years = "years"


class Game(SQLModel, table=True):
    """Quiz game, looked up by its external game-type token."""

    __tablename__ = "games"

    id: Optional[int] = ORMField(default=None, primary_key=True)
    name: str
    game_type: GameType = ORMField(index=True, unique=True)
    is_active: bool = True
    created_at: datetime = ORMField(default_factory=utcnow)


__all__ = ["Game", "GameType"]
