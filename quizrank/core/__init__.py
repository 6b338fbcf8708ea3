"""Core configuration and infrastructure helpers."""

from .config import (
    ALLOWED_CORS_ORIGINS,
    DATABASE_URL,
    DB_RESET,
    LEADERBOARD_DEFAULT_LIMIT,
    LEADERBOARD_MAX_LIMIT,
    LOG_LEVEL,
    PLACEHOLDER_USERNAME,
    REWARD_MAX_POSITION,
    SUBMIT_MAX_RETRIES,
    SUBMIT_RETRY_BACKOFF,
    SUBMIT_RETRY_BACKOFF_CAP,
)
from .database import build_engine, engine, get_engine, get_session
from .logging import setup_logging
from .time import utcnow

__all__ = [
    "ALLOWED_CORS_ORIGINS",
    "DATABASE_URL",
    "DB_RESET",
    "LEADERBOARD_DEFAULT_LIMIT",
    "LEADERBOARD_MAX_LIMIT",
    "LOG_LEVEL",
    "PLACEHOLDER_USERNAME",
    "REWARD_MAX_POSITION",
    "SUBMIT_MAX_RETRIES",
    "SUBMIT_RETRY_BACKOFF",
    "SUBMIT_RETRY_BACKOFF_CAP",
    "build_engine",
    "engine",
    "get_engine",
    "get_session",
    "setup_logging",
    "utcnow",
]
