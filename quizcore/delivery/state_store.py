"""
SQLite State Store for quizcore.

Provides portable persistence for:
- Mastery per question (overrides merged onto bank content by id)
- Answer history log (append-only)
- Learner profile (starter tier)

Database location: ~/.quizcore/state.db

Write failures are logged and swallowed; reads fall back to empty results.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Mapping
from datetime import UTC, datetime
from pathlib import Path

from loguru import logger

from quizcore.core.calibration import StarterTier
from quizcore.core.mastery import clamp_mastery
from quizcore.core.question import AnswerRecord, Choice

STARTER_TIER_KEY = "starter_tier"


class StateStore:
    """
    SQLite-backed QuizRepository.

    Handles:
    - Mastery per question
    - Answer log with correctness and timestamp
    - Learner profile key/value pairs
    """

    DEFAULT_DB_PATH = Path.home() / ".quizcore" / "state.db"

    def __init__(self, db_path: Path | None = None):
        """
        Initialize the state store.

        Args:
            db_path: Custom database path (defaults to ~/.quizcore/state.db)
        """
        self.db_path = db_path or self.DEFAULT_DB_PATH
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn: sqlite3.Connection | None = None
        self._init_schema()

        logger.info(f"StateStore initialized at {self.db_path}")

    @property
    def conn(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._conn is None:
            # Full-test auto-submit may write from the countdown thread
            self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def _init_schema(self) -> None:
        """Initialize database schema."""
        cursor = self.conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS mastery (
                question_id TEXT PRIMARY KEY,
                mastery REAL NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS answer_log (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                question_id TEXT NOT NULL,
                selected TEXT NOT NULL,
                is_correct BOOLEAN NOT NULL,
                answered_at TEXT NOT NULL
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS learner_profile (
                key TEXT PRIMARY KEY,
                value TEXT
            )
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_answer_log_question
            ON answer_log(question_id)
        """)

        self.conn.commit()

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    # =========================================================================
    # Mastery
    # =========================================================================

    def get_mastery(self, question_id: str) -> float | None:
        try:
            row = self.conn.execute(
                "SELECT mastery FROM mastery WHERE question_id = ?", (question_id,)
            ).fetchone()
        except sqlite3.Error:
            logger.exception(f"Failed to load mastery for {question_id}")
            return None
        return None if row is None else row["mastery"]

    def get_all_mastery(self) -> dict[str, float]:
        try:
            rows = self.conn.execute("SELECT question_id, mastery FROM mastery").fetchall()
        except sqlite3.Error:
            logger.exception("Failed to load mastery scores")
            return {}
        return {row["question_id"]: row["mastery"] for row in rows}

    def put_mastery(self, question_id: str, mastery: float) -> None:
        self.put_masteries({question_id: mastery})

    def put_masteries(self, updates: Mapping[str, float]) -> None:
        """
        Save mastery for several questions in one transaction.

        Args:
            updates: New mastery keyed by question id
        """
        if not updates:
            return

        now = datetime.now(UTC).isoformat()
        rows = [(qid, clamp_mastery(value), now) for qid, value in updates.items()]
        try:
            with self.conn:
                self.conn.executemany(
                    """
                    INSERT INTO mastery (question_id, mastery, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(question_id) DO UPDATE SET
                        mastery = excluded.mastery,
                        updated_at = excluded.updated_at
                """,
                    rows,
                )
        except sqlite3.Error:
            logger.exception(f"Failed to save mastery for {len(rows)} question(s)")

    # =========================================================================
    # Answer Log
    # =========================================================================

    def append_answer(self, record: AnswerRecord) -> None:
        """
        Append an answer event to the log.

        Args:
            record: The answer record
        """
        try:
            with self.conn:
                self.conn.execute(
                    """
                    INSERT INTO answer_log (question_id, selected, is_correct, answered_at)
                    VALUES (?, ?, ?, ?)
                """,
                    (
                        record.question_id,
                        record.selected.value,
                        record.is_correct,
                        record.answered_at.isoformat(),
                    ),
                )
        except sqlite3.Error:
            logger.exception(f"Failed to append answer for {record.question_id}")

    def get_history(self) -> list[AnswerRecord]:
        """
        Get the full answer history.

        Returns:
            AnswerRecords in chronological order
        """
        try:
            rows = self.conn.execute(
                "SELECT * FROM answer_log ORDER BY id ASC"
            ).fetchall()
        except sqlite3.Error:
            logger.exception("Failed to load answer history")
            return []

        return [
            AnswerRecord(
                question_id=row["question_id"],
                selected=Choice(row["selected"]),
                is_correct=bool(row["is_correct"]),
                answered_at=datetime.fromisoformat(row["answered_at"]),
            )
            for row in rows
        ]

    def has_history(self) -> bool:
        """Check whether any answer or mastery has been stored."""
        try:
            answers = self.conn.execute("SELECT 1 FROM answer_log LIMIT 1").fetchone()
            mastery = self.conn.execute("SELECT 1 FROM mastery LIMIT 1").fetchone()
        except sqlite3.Error:
            logger.exception("Failed to check history")
            return False
        return answers is not None or mastery is not None

    # =========================================================================
    # Learner Profile
    # =========================================================================

    def get_starter_tier(self) -> str | None:
        try:
            row = self.conn.execute(
                "SELECT value FROM learner_profile WHERE key = ?", (STARTER_TIER_KEY,)
            ).fetchone()
        except sqlite3.Error:
            logger.exception("Failed to load starter tier")
            return None
        return None if row is None else row["value"]

    def put_starter_tier(self, tier: StarterTier) -> None:
        try:
            with self.conn:
                self.conn.execute(
                    """
                    INSERT INTO learner_profile (key, value) VALUES (?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                    (STARTER_TIER_KEY, StarterTier(tier).value),
                )
        except sqlite3.Error:
            logger.exception("Failed to save starter tier")

    # =========================================================================
    # Maintenance
    # =========================================================================

    def reset(self) -> None:
        """Clear all learner state (mastery, history, profile)."""
        try:
            with self.conn:
                self.conn.execute("DELETE FROM mastery")
                self.conn.execute("DELETE FROM answer_log")
                self.conn.execute("DELETE FROM learner_profile")
        except sqlite3.Error:
            logger.exception("Failed to reset state")
            return
        logger.info("Learner state cleared")
