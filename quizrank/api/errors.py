"""Translation of engine failures into HTTP errors."""

from __future__ import annotations

from fastapi import HTTPException

from ..services.errors import EngineError


def http_error(exc: EngineError) -> HTTPException:
    """Map an engine failure to the matching HTTP status."""

    return HTTPException(exc.status_code, exc.user_message)


__all__ = ["http_error"]
