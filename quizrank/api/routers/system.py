"""System-level API endpoints."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ...core import LEADERBOARD_DEFAULT_LIMIT, LEADERBOARD_MAX_LIMIT, REWARD_MAX_POSITION
from ...models import GameType, PeriodKind

router = APIRouter(tags=["system"])


@router.get("/health")
def health() -> Dict[str, bool]:
    """Simple readiness check."""

    return {"ok": True}


@router.get("/healthz")
def healthz() -> JSONResponse:
    """Kubernetes-style readiness endpoint."""

    return JSONResponse({"ok": True})


@router.get("/config")
def get_config() -> Dict[str, Any]:
    """Expose leaderboard settings to the frontend."""

    return {
        "periods": [period.value for period in PeriodKind],
        "game_types": [game_type.value for game_type in GameType],
        "reward_max_position": REWARD_MAX_POSITION,
        "default_limit": LEADERBOARD_DEFAULT_LIMIT,
        "max_limit": LEADERBOARD_MAX_LIMIT,
    }


__all__ = ["router"]
