"""Score submission pipeline.

Each submission is validated once and then applied to the three period-kind
boards independently. For one board the aggregate write, the rank recompute,
the rank read and the resulting grants form a single transaction, serialized
per (game, period) partition. Conflicts retry the whole unit with exponential
backoff; any other failure rolls the unit back and surfaces to the caller.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlmodel import Session

from ..core.config import (
    REWARD_MAX_POSITION,
    SUBMIT_MAX_RETRIES,
    SUBMIT_RETRY_BACKOFF,
    SUBMIT_RETRY_BACKOFF_CAP,
)
from ..models import PeriodKind
from .aggregator import ApplyResult, apply_score
from .awarder import grant
from .eligibility import current_rank, match_rewards
from .errors import ConflictError, EngineError, StorageError
from .locks import PartitionLocks
from .ranking import lock_partition, recompute
from .validation import ScoreEvent, validate_score

logger = logging.getLogger(__name__)

_LOCK_ERROR_MARKERS = ("database is locked", "deadlock", "could not serialize", "lock timeout")


@dataclass(frozen=True)
class PeriodOutcome:
    period: PeriodKind
    result: ApplyResult
    rank: Optional[int] = None
    granted: List[int] = field(default_factory=list)


@dataclass(frozen=True)
class SubmissionResult:
    event: ScoreEvent
    outcomes: Dict[PeriodKind, PeriodOutcome]

    @property
    def granted(self) -> Dict[PeriodKind, List[int]]:
        return {period: outcome.granted for period, outcome in self.outcomes.items() if outcome.granted}


def _is_lock_error(exc: OperationalError) -> bool:
    message = str(exc.orig or exc).lower()
    return any(marker in message for marker in _LOCK_ERROR_MARKERS)


class ScoreSubmissionService:
    """Runs validated score events through aggregation, ranking and rewards."""

    def __init__(
        self,
        engine: Engine,
        locks: Optional[PartitionLocks] = None,
        *,
        max_retries: int = SUBMIT_MAX_RETRIES,
        backoff: float = SUBMIT_RETRY_BACKOFF,
        backoff_cap: float = SUBMIT_RETRY_BACKOFF_CAP,
        max_position: int = REWARD_MAX_POSITION,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.engine = engine
        self.locks = locks or PartitionLocks()
        self.max_retries = max(1, max_retries)
        self.backoff = backoff
        self.backoff_cap = backoff_cap
        self.max_position = max_position
        self._sleep = sleep

    def validate(self, payload: Mapping[str, Any]) -> ScoreEvent:
        try:
            with Session(self.engine) as session:
                return validate_score(session, payload)
        except SQLAlchemyError as exc:
            logger.error("Storage failure while validating score: %s", exc)
            raise StorageError("score validation", str(exc)) from exc

    def submit(self, payload: Mapping[str, Any]) -> SubmissionResult:
        """Validate ``payload`` and apply it to every period-kind board.

        Boards are processed independently: a failure on one does not undo
        the others. After all boards were attempted the first failure is
        re-raised.
        """

        event = self.validate(payload)
        logger.info(
            "Score from user %s on %s: %s/%s -> %s points (session %s)",
            event.user_id,
            event.game_type.value,
            event.correct_answers,
            event.total_questions,
            event.points,
            event.session_id,
        )

        outcomes: Dict[PeriodKind, PeriodOutcome] = {}
        failures: List[EngineError] = []
        for period in PeriodKind:
            try:
                outcomes[period] = self._apply_with_retry(event, period)
            except EngineError as exc:
                logger.error(
                    "Failed to apply score for user %s on %s board of game %s: %s",
                    event.user_id, period.value, event.game_id, exc,
                )
                failures.append(exc)

        if failures:
            raise failures[0]
        return SubmissionResult(event=event, outcomes=outcomes)

    def _apply_with_retry(self, event: ScoreEvent, period: PeriodKind) -> PeriodOutcome:
        for attempt in range(1, self.max_retries + 1):
            try:
                return self.apply_period(event, period)
            except ConflictError as exc:
                if attempt == self.max_retries:
                    logger.error(
                        "Giving up on %s board of game %s after %s attempts",
                        period.value, event.game_id, attempt,
                    )
                    raise ConflictError("score submission", attempt, str(exc)) from exc
                delay = min(self.backoff * (2 ** (attempt - 1)), self.backoff_cap)
                logger.warning(
                    "Retry %s for user %s on %s board of game %s in %.3fs",
                    attempt, event.user_id, period.value, event.game_id, delay,
                )
                self._sleep(delay)
        raise AssertionError("unreachable")

    def apply_period(self, event: ScoreEvent, period: PeriodKind) -> PeriodOutcome:
        """Run the atomic unit for one board.

        Aggregate write, recompute, rank read and grants commit together or
        not at all.
        """

        with self.locks.hold((event.game_id, period)):
            try:
                with Session(self.engine) as session, session.begin():
                    return self._apply_in_transaction(session, event, period)
            except IntegrityError as exc:
                raise ConflictError("leaderboard write", details=str(exc.orig)) from exc
            except OperationalError as exc:
                if _is_lock_error(exc):
                    raise ConflictError("leaderboard write", details=str(exc.orig)) from exc
                raise StorageError("leaderboard write", str(exc)) from exc
            except SQLAlchemyError as exc:
                raise StorageError("leaderboard write", str(exc)) from exc

    def _apply_in_transaction(
        self, session: Session, event: ScoreEvent, period: PeriodKind
    ) -> PeriodOutcome:
        lock_partition(session, event.game_id)
        result = apply_score(session, event.user_id, event.game_id, period, event.points)
        if not result.changed:
            return PeriodOutcome(period=period, result=result)

        recompute(session, event.game_id, period)
        rank = current_rank(session, event.user_id, event.game_id, period)

        granted: List[int] = []
        for reward_id in match_rewards(
            session, event.user_id, event.game_id, period, max_position=self.max_position
        ):
            if grant(session, event.user_id, reward_id, event.game_id, period, rank):
                granted.append(reward_id)

        return PeriodOutcome(period=period, result=result, rank=rank, granted=granted)


__all__ = ["PeriodOutcome", "ScoreSubmissionService", "SubmissionResult"]
