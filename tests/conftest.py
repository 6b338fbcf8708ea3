"""Shared fixtures: a throwaway SQLite database with a small seeded catalog."""

from __future__ import annotations

import os
import uuid
from types import SimpleNamespace

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

from quizrank.core import build_engine, get_engine, get_session
from quizrank.models import Game, GameType, PeriodKind, Reward, RewardGameAssociation, User
from quizrank.services import ScoreSubmissionService


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def catalog(engine):
    """Games for ``books`` and ``authors`` (no ``years``) and two players."""

    alice = User(id=uuid.uuid4(), username="alice", avatar_url="https://cdn.example/alice.png")
    bob = User(id=uuid.uuid4(), username="bob")
    books = Game(name="Books quiz", game_type=GameType.books)
    authors = Game(name="Authors quiz", game_type=GameType.authors)

    with Session(engine) as session:
        session.add_all([alice, bob, books, authors])
        session.commit()
        return SimpleNamespace(
            alice=alice.id,
            bob=bob.id,
            books=books.id,
            authors=authors.id,
        )


@pytest.fixture
def add_reward(engine):
    """Create a reward bound to one board position; returns the reward id."""

    def _add(game_id: int, period: PeriodKind, position: int, *, name: str = "Voucher", is_active: bool = True) -> int:
        with Session(engine) as session:
            reward = Reward(name=name, description=f"{name} for rank {position}", is_active=is_active)
            session.add(reward)
            session.flush()
            session.add(
                RewardGameAssociation(
                    game_id=game_id, reward_id=reward.id, period=period, position=position
                )
            )
            session.commit()
            return reward.id

    return _add


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def service(engine, sleeps):
    return ScoreSubmissionService(engine, sleep=sleeps.append)


def score_payload(user_id, correct: int, total: int = 10, game_type: str = "books", session_id: str = "sess-1"):
    return {
        "userId": str(user_id),
        "gameType": game_type,
        "correctAnswers": correct,
        "totalQuestions": total,
        "sessionId": session_id,
    }


@pytest.fixture
def payload():
    return score_payload


@pytest.fixture
def client(engine):
    from quizrank.app import app

    def _session_override():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_engine] = lambda: engine
    app.dependency_overrides[get_session] = _session_override
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
