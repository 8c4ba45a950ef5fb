"""
Question and answer records.

Question content is immutable; mastery is the only field that changes,
and every change produces a new Question via with_mastery().
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import Enum

from quizcore.core.mastery import clamp_mastery


class Choice(str, Enum):
    """The four labeled answer choices."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"

    @classmethod
    def _missing_(cls, value: object) -> Choice | None:
        """Accept labels in any case and with surrounding whitespace."""
        if isinstance(value, str):
            normalized = value.strip().upper()
            if normalized != value:
                return cls.__members__.get(normalized)
        return None


class Difficulty(str, Enum):
    """Content difficulty tier."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def parse(cls, raw: object, default: Difficulty | None = None) -> Difficulty | None:
        """Parse a stored difficulty, returning default for malformed values."""
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, str):
            try:
                return cls(raw.strip().lower())
            except ValueError:
                pass
        return default


@dataclass(frozen=True)
class Question:
    """A single multiple-choice question with the learner's mastery."""

    id: str
    prompt: str
    choices: dict[Choice, str]
    correct: Choice
    explanations: dict[Choice, str] = field(default_factory=dict)
    topic: str = "General"
    difficulty: Difficulty = Difficulty.MEDIUM
    mastery: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "mastery", clamp_mastery(self.mastery))

    def with_mastery(self, mastery: float) -> Question:
        """Return a copy with a new (clamped) mastery value."""
        return replace(self, mastery=clamp_mastery(mastery))

    def is_correct(self, selected: Choice | str) -> bool:
        """Check whether a selected choice is the correct one."""
        return Choice(selected) == self.correct

    def explanation_for(self, choice: Choice | str) -> str:
        """Explanation text for a choice (empty string if none)."""
        return self.explanations.get(Choice(choice), "")


@dataclass(frozen=True)
class AnswerRecord:
    """A single answer event. Append-only."""

    question_id: str
    selected: Choice
    is_correct: bool
    answered_at: datetime

    @classmethod
    def for_question(
        cls,
        question: Question,
        selected: Choice | str,
        now: datetime | None = None,
    ) -> AnswerRecord:
        """
        Build a record, deriving correctness from the question.

        Args:
            question: The answered question
            selected: Choice the learner picked
            now: Timestamp override (defaults to UTC now)

        Returns:
            AnswerRecord
        """
        choice = Choice(selected)
        return cls(
            question_id=question.id,
            selected=choice,
            is_correct=question.is_correct(choice),
            answered_at=now or datetime.now(UTC),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "question_id": self.question_id,
            "selected": self.selected.value,
            "is_correct": self.is_correct,
            "answered_at": self.answered_at.isoformat(),
        }


def merge_mastery(questions: Iterable[Question], overrides: Mapping[str, float]) -> list[Question]:
    """Apply persisted mastery overrides by matching question id."""
    return [
        q.with_mastery(overrides[q.id]) if q.id in overrides else q
        for q in questions
    ]
