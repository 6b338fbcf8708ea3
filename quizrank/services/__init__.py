"""Ranking and reward engine services."""

from .aggregator import ApplyOutcome, ApplyResult, apply_score
from .awarder import grant, grants_for_user
from .eligibility import associations_for_board, match_rewards
from .errors import ConflictError, EngineError, NotFoundError, StorageError, ValidationError
from .locks import PartitionLocks
from .ranking import competition_ranks, lock_partition, recompute
from .reader import LeaderboardRow, parse_period, read
from .submission import PeriodOutcome, ScoreSubmissionService, SubmissionResult
from .validation import ScoreEvent, compute_points, resolve_game, validate_score

__all__ = [
    "ApplyOutcome",
    "ApplyResult",
    "ConflictError",
    "EngineError",
    "LeaderboardRow",
    "NotFoundError",
    "PartitionLocks",
    "PeriodOutcome",
    "ScoreEvent",
    "ScoreSubmissionService",
    "StorageError",
    "SubmissionResult",
    "ValidationError",
    "apply_score",
    "associations_for_board",
    "competition_ranks",
    "compute_points",
    "grant",
    "grants_for_user",
    "lock_partition",
    "match_rewards",
    "parse_period",
    "read",
    "recompute",
    "resolve_game",
    "validate_score",
]
