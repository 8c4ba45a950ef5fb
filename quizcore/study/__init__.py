"""
Study Module - selection, sessions and learner orchestration.

Components:
- WeightedSelector: Weighted sampling without replacement + shuffle
- CountdownTimer: Cancelable full-test countdown
- PracticeSession / FullTestSession: Session state machines
- StudyService: Calibration and session wiring for a learner
"""

from .selector import WeightedSelector, select_questions, shuffle_questions
from .session import (
    SESSION_LENGTHS,
    AnswerFeedback,
    FullTestSession,
    PracticeSession,
    QuestionOutcome,
    SessionMode,
    SessionResult,
    SessionState,
)
from .study_service import MasteryStats, StudyService
from .timer import CountdownTimer

__all__ = [
    # Selection
    "WeightedSelector",
    "select_questions",
    "shuffle_questions",
    # Sessions
    "SESSION_LENGTHS",
    "SessionMode",
    "SessionState",
    "PracticeSession",
    "FullTestSession",
    "AnswerFeedback",
    "QuestionOutcome",
    "SessionResult",
    "CountdownTimer",
    # Orchestration
    "StudyService",
    "MasteryStats",
]
