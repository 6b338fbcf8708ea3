"""Tests for aggregation and rank recompute."""

import uuid

import pytest
from sqlalchemy import event
from sqlalchemy.dialects import postgresql
from sqlmodel import Session, select

from quizrank.models import LeaderboardEntry, PeriodKind
from quizrank.services import ApplyOutcome, apply_score, competition_ranks, recompute
from quizrank.services.ranking import anchor_query, lock_partition


def _board(session, game_id, period=PeriodKind.all_time):
    return session.exec(
        select(LeaderboardEntry).where(
            LeaderboardEntry.game_id == game_id, LeaderboardEntry.period == period
        )
    ).all()


class TestCompetitionRanks:
    def test_ties_share_rank_and_skip_slots(self):
        assert competition_ranks([90, 80, 80, 70]) == [1, 2, 2, 4]

    def test_all_tied(self):
        assert competition_ranks([50, 50, 50]) == [1, 1, 1]

    def test_distinct(self):
        assert competition_ranks([30, 20, 10]) == [1, 2, 3]

    def test_empty(self):
        assert competition_ranks([]) == []


class TestApplyScore:
    def test_first_score_creates_entry_with_pending_rank(self, engine, catalog):
        with Session(engine) as session:
            result = apply_score(session, catalog.alice, catalog.books, PeriodKind.weekly, 60)
            session.commit()

            assert result.outcome is ApplyOutcome.created
            assert result.changed
            (entry,) = _board(session, catalog.books, PeriodKind.weekly)
            assert entry.points == 60
            assert entry.rank is None

    def test_higher_score_replaces(self, engine, catalog):
        with Session(engine) as session:
            apply_score(session, catalog.alice, catalog.books, PeriodKind.all_time, 60)
            result = apply_score(session, catalog.alice, catalog.books, PeriodKind.all_time, 75)

            assert result.outcome is ApplyOutcome.updated
            assert result.previous_points == 60
            assert _board(session, catalog.books)[0].points == 75

    @pytest.mark.parametrize("points", [60, 40, 0])
    def test_equal_or_lower_score_is_ignored(self, engine, catalog, points):
        with Session(engine) as session:
            apply_score(session, catalog.alice, catalog.books, PeriodKind.all_time, 60)
            result = apply_score(session, catalog.alice, catalog.books, PeriodKind.all_time, points)

            assert result.outcome is ApplyOutcome.unchanged
            assert not result.changed
            assert _board(session, catalog.books)[0].points == 60

    def test_points_track_running_maximum(self, engine, catalog):
        submitted = [40, 70, 20, 70, 65, 90, 10]
        with Session(engine) as session:
            for points in submitted:
                apply_score(session, catalog.alice, catalog.books, PeriodKind.monthly, points)
            assert _board(session, catalog.books, PeriodKind.monthly)[0].points == max(submitted)


class TestRecompute:
    def test_assigns_competition_ranks_to_whole_partition(self, engine, catalog):
        users = [uuid.uuid4() for _ in range(5)]
        points = [70, 90, 80, 80, 40]
        with Session(engine) as session:
            for user_id, value in zip(users, points):
                apply_score(session, user_id, catalog.books, PeriodKind.all_time, value)
            ranks = recompute(session, catalog.books, PeriodKind.all_time)
            session.commit()

            by_points = {entry.points: entry.rank for entry in _board(session, catalog.books)}
            assert by_points == {90: 1, 80: 2, 70: 4, 40: 5}
            assert sorted(ranks.values()) == [1, 2, 2, 4, 5]

    def test_next_rank_counts_strictly_greater_entries(self, engine, catalog):
        points = [100, 100, 100, 50, 50, 10]
        with Session(engine) as session:
            for value in points:
                apply_score(session, uuid.uuid4(), catalog.books, PeriodKind.weekly, value)
            recompute(session, catalog.books, PeriodKind.weekly)

            for entry in _board(session, catalog.books, PeriodKind.weekly):
                greater = sum(1 for other in points if other > entry.points)
                assert entry.rank == greater + 1

    def test_partitions_are_independent(self, engine, catalog):
        with Session(engine) as session:
            apply_score(session, catalog.alice, catalog.books, PeriodKind.weekly, 50)
            apply_score(session, catalog.bob, catalog.books, PeriodKind.weekly, 90)
            apply_score(session, catalog.alice, catalog.books, PeriodKind.monthly, 50)
            apply_score(session, catalog.alice, catalog.authors, PeriodKind.weekly, 20)
            recompute(session, catalog.books, PeriodKind.weekly)
            recompute(session, catalog.books, PeriodKind.monthly)
            recompute(session, catalog.authors, PeriodKind.weekly)

            weekly = {e.user_id: e.rank for e in _board(session, catalog.books, PeriodKind.weekly)}
            monthly = {e.user_id: e.rank for e in _board(session, catalog.books, PeriodKind.monthly)}
            authors = {e.user_id: e.rank for e in _board(session, catalog.authors, PeriodKind.weekly)}

            assert weekly == {catalog.bob: 1, catalog.alice: 2}
            assert monthly == {catalog.alice: 1}
            assert authors == {catalog.alice: 1}


def _postgres_sql(statement):
    return str(statement.compile(dialect=postgresql.dialect()))


class TestRowLocks:
    def test_anchor_locks_the_game_row(self):
        sql = _postgres_sql(anchor_query(7))
        assert "FROM games" in sql
        assert sql.rstrip().endswith("FOR UPDATE")

    def test_lock_partition_runs_on_sqlite(self, engine, catalog):
        with Session(engine) as session, session.begin():
            lock_partition(session, catalog.books)

    def test_apply_score_reads_entry_for_update(self, engine, catalog):
        statements = []

        with Session(engine) as session:
            event.listen(
                session, "do_orm_execute", lambda state: statements.append(state.statement)
            )
            apply_score(session, catalog.alice, catalog.books, PeriodKind.weekly, 40)

        entry_reads = [
            _postgres_sql(s) for s in statements if "leaderboard_entries" in _postgres_sql(s)
        ]
        assert entry_reads
        assert all("FOR UPDATE" in sql for sql in entry_reads)
