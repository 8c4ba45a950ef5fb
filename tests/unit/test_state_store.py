"""
Unit tests for the SQLite StateStore.
"""

import sqlite3
from datetime import UTC, datetime

import pytest

from quizcore.core.calibration import StarterTier
from quizcore.core.question import AnswerRecord, Choice
from quizcore.delivery.state_store import StateStore


@pytest.fixture
def store(tmp_path):
    store = StateStore(tmp_path / "state.db")
    yield store
    store.close()


class TestMastery:
    def test_empty(self, store):
        assert store.get_mastery("q1") is None
        assert store.get_all_mastery() == {}
        assert not store.has_history()

    def test_put_and_get(self, store):
        store.put_mastery("q1", 40)
        store.put_mastery("q1", 55)

        assert store.get_mastery("q1") == 55
        assert store.has_history()

    def test_batch_write_clamps(self, store):
        store.put_masteries({"q1": 120, "q2": -5, "q3": 42.5})
        assert store.get_all_mastery() == {"q1": 100, "q2": 0, "q3": 42.5}

    def test_persists_across_connections(self, tmp_path):
        path = tmp_path / "state.db"
        first = StateStore(path)
        first.put_mastery("q1", 70)
        first.close()

        assert StateStore(path).get_mastery("q1") == 70


class TestAnswerLog:
    def test_append_and_read_in_order(self, store):
        t0 = datetime(2026, 1, 1, 9, 0, tzinfo=UTC)
        t1 = datetime(2026, 1, 1, 9, 5, tzinfo=UTC)
        store.append_answer(AnswerRecord("q2", Choice.B, False, t0))
        store.append_answer(AnswerRecord("q1", Choice.A, True, t1))

        history = store.get_history()

        assert [r.question_id for r in history] == ["q2", "q1"]
        assert history[0] == AnswerRecord("q2", Choice.B, False, t0)
        assert history[1].is_correct is True


class TestProfile:
    def test_starter_tier(self, store):
        assert store.get_starter_tier() is None
        store.put_starter_tier(StarterTier.ADVANCED)
        assert store.get_starter_tier() == "advanced"

    def test_reset(self, store):
        store.put_mastery("q1", 10)
        store.append_answer(AnswerRecord("q1", Choice.A, True, datetime.now(UTC)))
        store.put_starter_tier(StarterTier.BEGINNER)

        store.reset()

        assert store.get_all_mastery() == {}
        assert store.get_history() == []
        assert store.get_starter_tier() is None


class TestErrors:
    """sqlite errors are logged, never raised."""

    def test_failures_are_swallowed(self, store):
        store.conn.execute("DROP TABLE mastery")
        store.conn.execute("DROP TABLE answer_log")

        store.put_mastery("q1", 10)
        store.append_answer(AnswerRecord("q1", Choice.A, True, datetime.now(UTC)))

        assert store.get_mastery("q1") is None
        assert store.get_all_mastery() == {}
        assert store.get_history() == []

    def test_closed_connection_reopens(self, store):
        store.close()
        store.put_mastery("q1", 25)
        assert store.get_mastery("q1") == 25
        assert isinstance(store.conn, sqlite3.Connection)
