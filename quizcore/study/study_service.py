"""
Study Service: learner-level orchestration.

Wires the question bank, repository and sessions together:
- merges persisted mastery onto bank content
- runs starter calibration exactly once per learner
- builds practice / full-test sessions over the current pool
- summarizes mastery for the stats table
"""

from __future__ import annotations

import random
from collections import Counter, defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from loguru import logger

from quizcore.config import get_settings
from quizcore.core.calibration import StarterTier, apply_starter_tier, parse_starter_tier
from quizcore.core.mastery import MasteryLevel
from quizcore.core.question import Question, merge_mastery
from quizcore.core.repository import QuizRepository
from quizcore.study.session import FullTestSession, PracticeSession, QuizSession


@dataclass
class MasteryStats:
    """Plain mastery counts for the CLI stats table."""

    total_questions: int = 0
    total_answered: int = 0
    accuracy: float = 0.0
    average_mastery: float = 0.0
    by_level: dict[MasteryLevel, int] = field(default_factory=dict)
    by_topic: dict[str, float] = field(default_factory=dict)


class StudyService:
    """
    Orchestrates calibration and sessions for one learner.

    The service keeps the current pool in memory; sessions hand their
    updated pool back through finish_session().
    """

    def __init__(
        self,
        repository: QuizRepository,
        rng: random.Random | None = None,
        full_test_seconds: int | None = None,
        session_lengths: Sequence[int] | None = None,
    ):
        settings = get_settings()
        self.repository = repository
        self.rng = rng
        self.full_test_seconds = (
            full_test_seconds if full_test_seconds is not None else settings.full_test_seconds
        )
        self.session_lengths = tuple(session_lengths or settings.session_lengths)
        self.pool: list[Question] = []

    # =========================================================================
    # Calibration
    # =========================================================================

    @property
    def starter_tier(self) -> StarterTier | None:
        """Stored starter tier; malformed values read as absent."""
        return parse_starter_tier(self.repository.get_starter_tier())

    def has_mastery_state(self) -> bool:
        """True once the learner has stored mastery or answer history."""
        return self.repository.has_history()

    def needs_calibration(self) -> bool:
        """True when the learner has neither a starter tier nor stored history."""
        return self.starter_tier is None and not self.has_mastery_state()

    def load_pool(self, questions: Iterable[Question]) -> list[Question]:
        """
        Merge persisted mastery overrides onto bank questions.

        If the learner has a starter tier but no stored history yet, the
        tier is applied here.

        Args:
            questions: Bank content (mastery from the bank file)

        Returns:
            The current pool
        """
        overrides = self.repository.get_all_mastery()
        merged = merge_mastery(questions, overrides)

        tier = self.starter_tier
        if tier is not None and not self.repository.has_history():
            merged = self._calibrate(merged, tier)

        self.pool = merged
        logger.info(f"Loaded pool of {len(merged)} questions ({len(overrides)} stored masteries)")
        return self.pool

    def calibrate(self, questions: Iterable[Question], tier: StarterTier | str) -> list[Question]:
        """
        Record the starter tier and calibrate the pool.

        Calibration is skipped when mastery state already exists, so
        calling this again never re-applies the transform.

        Args:
            questions: Bank content
            tier: Chosen starter tier

        Returns:
            The current pool
        """
        tier = StarterTier(tier)
        if self.starter_tier is None:
            self.repository.put_starter_tier(tier)
        else:
            logger.info(f"Starter tier already set to '{self.starter_tier.value}'")

        return self.load_pool(questions)

    def _calibrate(self, questions: list[Question], tier: StarterTier) -> list[Question]:
        calibrated = apply_starter_tier(questions, tier)
        self.repository.put_masteries({q.id: q.mastery for q in calibrated})
        return calibrated

    # =========================================================================
    # Sessions
    # =========================================================================

    def start_practice(self) -> PracticeSession:
        return PracticeSession(
            self.pool,
            self.repository,
            rng=self.rng,
            session_lengths=self.session_lengths,
        )

    def start_full_test(self) -> FullTestSession:
        return FullTestSession(
            self.pool,
            self.repository,
            rng=self.rng,
            session_lengths=self.session_lengths,
            duration_seconds=self.full_test_seconds,
        )

    def finish_session(self, session: QuizSession) -> list[Question]:
        """Adopt the session's in-memory mastery as the current pool."""
        self.pool = session.pool
        return self.pool

    # =========================================================================
    # Stats
    # =========================================================================

    def stats(self, questions: Sequence[Question] | None = None) -> MasteryStats:
        """
        Summarize mastery and answer history.

        Args:
            questions: Pool to summarize (current pool if None)

        Returns:
            MasteryStats
        """
        questions = list(self.pool if questions is None else questions)
        history = self.repository.get_history()

        stats = MasteryStats(total_questions=len(questions), total_answered=len(history))
        if history:
            stats.accuracy = sum(1 for r in history if r.is_correct) / len(history) * 100
        if not questions:
            return stats

        stats.average_mastery = sum(q.mastery for q in questions) / len(questions)

        levels = Counter(MasteryLevel.from_score(q.mastery) for q in questions)
        stats.by_level = {level: levels.get(level, 0) for level in MasteryLevel}

        topics: dict[str, list[float]] = defaultdict(list)
        for q in questions:
            topics[q.topic].append(q.mastery)
        stats.by_topic = {
            topic: sum(values) / len(values) for topic, values in sorted(topics.items())
        }
        return stats
