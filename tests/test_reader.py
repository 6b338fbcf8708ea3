"""Tests for leaderboard read projections."""

import uuid

import pytest
from sqlmodel import Session

from quizrank.core import PLACEHOLDER_USERNAME
from quizrank.models import PeriodKind, User
from quizrank.services import ValidationError, parse_period, read


@pytest.fixture
def boards(catalog, service, payload):
    stranger = uuid.uuid4()
    service.submit(payload(catalog.alice, 8))
    service.submit(payload(catalog.bob, 9))
    service.submit(payload(stranger, 8))
    service.submit(payload(catalog.alice, 4, game_type="authors"))
    return stranger


def test_game_board_is_ordered_by_rank(engine, catalog, boards):
    with Session(engine) as session:
        rows = read(session, catalog.books, PeriodKind.weekly, 10)

    assert [row.rank for row in rows] == [1, 2, 2]
    assert rows[0].user_id == catalog.bob
    assert rows[0].username == "bob"
    assert {row.user_id for row in rows[1:]} == {catalog.alice, boards}


def test_ties_listed_by_earliest_achievement(engine, catalog, boards):
    with Session(engine) as session:
        rows = read(session, catalog.books, PeriodKind.all_time, 10)

    assert [row.user_id for row in rows[1:]] == [catalog.alice, boards]


def test_missing_user_gets_placeholder(engine, catalog, boards):
    with Session(engine) as session:
        rows = read(session, catalog.books, PeriodKind.monthly, 10)

    stranger = next(row for row in rows if row.user_id == boards)
    assert stranger.username == PLACEHOLDER_USERNAME
    assert stranger.avatar_url is None


def test_limit_truncates(engine, catalog, boards):
    with Session(engine) as session:
        rows = read(session, catalog.books, PeriodKind.all_time, 1)

    assert len(rows) == 1
    assert rows[0].user_id == catalog.bob


def test_empty_board_reads_empty(engine, catalog):
    with Session(engine) as session:
        assert read(session, catalog.authors, PeriodKind.weekly, 10) == []
        assert read(session, None, PeriodKind.weekly, 10) == []


def test_global_board_sums_games(engine, catalog, boards):
    with Session(engine) as session:
        rows = read(session, None, PeriodKind.all_time, 10)

    assert [(row.user_id, row.points, row.rank) for row in rows] == [
        (catalog.alice, 120, 1),
        (catalog.bob, 90, 2),
        (boards, 80, 3),
    ]


def test_api_shape(engine, catalog, boards):
    with Session(engine) as session:
        (row,) = read(session, catalog.books, PeriodKind.all_time, 1)

    assert row.to_api() == {
        "rank": 1,
        "userId": str(catalog.bob),
        "username": "bob",
        "avatarUrl": None,
        "points": 90,
    }


def test_invalid_limit(engine, catalog):
    with Session(engine) as session:
        with pytest.raises(ValidationError):
            read(session, catalog.books, PeriodKind.all_time, 0)


def test_parse_period():
    assert parse_period("weekly") is PeriodKind.weekly
    with pytest.raises(ValidationError):
        parse_period("daily")


def test_user_defaults(engine):
    user = User(username="carol")
    assert isinstance(user.id, uuid.UUID)
    assert user.avatar_url is None

    with Session(engine) as session:
        session.add(user)
        session.commit()
        assert session.get(User, user.id).username == "carol"
    assert any(index.columns.keys() == ["username"] for index in User.__table__.indexes)
