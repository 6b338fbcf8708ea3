"""Database model for quiz players."""

from __future__ import annotations

import uuid
from typing import Optional

from sqlmodel import Field as ORMField, SQLModel


class User(SQLModel, table=True):
    """Player profile owned by the user store; read for display only."""

    __tablename__ = "users"

    id: uuid.UUID = ORMField(default_factory=uuid.uuid4, primary_key=True, nullable=False)
    username: str = ORMField(index=True)
    avatar_url: Optional[str] = None


__all__ = ["User"]
