"""
Repository interface for learner state.

Sessions and the study service depend on this abstraction rather than on
a concrete store, so the core stays testable with the in-memory fake.

Implementations:
- InMemoryQuizRepository: tests and throwaway sessions
- StateStore (quizcore.delivery.state_store): SQLite persistence
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol

from quizcore.core.calibration import StarterTier
from quizcore.core.question import AnswerRecord


class QuizRepository(Protocol):
    """Persistence collaborator for mastery, history and starter tier."""

    def get_mastery(self, question_id: str) -> float | None:
        """Stored mastery for a question, or None if never stored."""
        ...

    def get_all_mastery(self) -> dict[str, float]:
        """All stored mastery overrides keyed by question id."""
        ...

    def put_mastery(self, question_id: str, mastery: float) -> None:
        """Persist mastery for one question."""
        ...

    def put_masteries(self, updates: Mapping[str, float]) -> None:
        """Persist a batch of mastery updates."""
        ...

    def append_answer(self, record: AnswerRecord) -> None:
        """Append an answer record to history."""
        ...

    def get_history(self) -> list[AnswerRecord]:
        """Answer history in chronological order."""
        ...

    def has_history(self) -> bool:
        """True once any mastery or answer has been stored."""
        ...

    def get_starter_tier(self) -> str | None:
        """Stored starter tier value (may be malformed)."""
        ...

    def put_starter_tier(self, tier: StarterTier) -> None:
        """Persist the chosen starter tier."""
        ...


class InMemoryQuizRepository:
    """Dict-backed QuizRepository."""

    def __init__(
        self,
        mastery: Mapping[str, float] | None = None,
        history: list[AnswerRecord] | None = None,
        starter_tier: str | None = None,
    ):
        self.mastery: dict[str, float] = dict(mastery or {})
        self.history: list[AnswerRecord] = list(history or [])
        self.starter_tier = starter_tier

    def get_mastery(self, question_id: str) -> float | None:
        return self.mastery.get(question_id)

    def get_all_mastery(self) -> dict[str, float]:
        return dict(self.mastery)

    def put_mastery(self, question_id: str, mastery: float) -> None:
        self.mastery[question_id] = mastery

    def put_masteries(self, updates: Mapping[str, float]) -> None:
        self.mastery.update(updates)

    def append_answer(self, record: AnswerRecord) -> None:
        self.history.append(record)

    def get_history(self) -> list[AnswerRecord]:
        return list(self.history)

    def has_history(self) -> bool:
        return bool(self.mastery or self.history)

    def get_starter_tier(self) -> str | None:
        return self.starter_tier

    def put_starter_tier(self, tier: StarterTier) -> None:
        self.starter_tier = StarterTier(tier).value
