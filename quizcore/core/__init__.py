"""
Core Module - Shared domain models and interfaces.

Components:
- mastery: Bounded mastery update rule and selection weights
- calibration: One-time starter tier calibration
- question: Question and AnswerRecord
- repository: Persistence interface and in-memory fake
- errors: Quiz engine exceptions

Design Principle:
quizcore.study and quizcore.delivery import from quizcore.core rather
than reimplementing shared concepts.
"""

from quizcore.core.calibration import StarterTier, apply_starter_tier, parse_starter_tier
from quizcore.core.errors import InvalidTransitionError, QuestionBankError, QuizError
from quizcore.core.mastery import (
    MasteryLevel,
    is_high_mastery,
    is_mastered,
    selection_weight,
    update_mastery,
)
from quizcore.core.question import AnswerRecord, Choice, Difficulty, Question, merge_mastery
from quizcore.core.repository import InMemoryQuizRepository, QuizRepository

__all__ = [
    # Mastery
    "MasteryLevel",
    "update_mastery",
    "selection_weight",
    "is_mastered",
    "is_high_mastery",
    # Calibration
    "StarterTier",
    "apply_starter_tier",
    "parse_starter_tier",
    # Records
    "Question",
    "AnswerRecord",
    "Choice",
    "Difficulty",
    "merge_mastery",
    # Persistence
    "QuizRepository",
    "InMemoryQuizRepository",
    # Errors
    "QuizError",
    "InvalidTransitionError",
    "QuestionBankError",
]
