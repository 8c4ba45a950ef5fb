"""
Quiz Sessions: practice and timed full-test state machines.

Practice:
    awaiting_session_length -> awaiting_answer <-> showing_feedback -> complete

    One question at a time. Submitting locks the choice, updates mastery,
    appends to history, then reveals the correct answer and explanations.

Full test:
    awaiting_session_length -> ready -> in_progress -> submitted | timed_out
    -> reviewing

    All questions are navigable, answers can change freely until a single
    submission. The countdown auto-submits once if the learner does not.
    Mastery updates are written in one batch from the final snapshot.

Unanswered questions count as incorrect for scoring and lose mastery, but
never produce a history record.
"""

from __future__ import annotations

import random
import threading
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

from loguru import logger

from quizcore.config import get_settings
from quizcore.core.errors import InvalidTransitionError
from quizcore.core.mastery import update_mastery
from quizcore.core.question import AnswerRecord, Choice, Question
from quizcore.core.repository import QuizRepository
from quizcore.study.selector import WeightedSelector
from quizcore.study.timer import CountdownTimer

SESSION_LENGTHS: tuple[int, ...] = (10, 25, 50, 100)


class SessionMode(str, Enum):
    """Kind of quiz session."""

    PRACTICE = "practice"
    FULL_TEST = "full_test"


class SessionState(str, Enum):
    """Session lifecycle states."""

    AWAITING_SESSION_LENGTH = "awaiting_session_length"
    # Practice
    AWAITING_ANSWER = "awaiting_answer"
    SHOWING_FEEDBACK = "showing_feedback"
    COMPLETE = "complete"
    # Full test
    READY = "ready"
    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"
    TIMED_OUT = "timed_out"
    REVIEWING = "reviewing"
    # Either
    ABANDONED = "abandoned"


@dataclass(frozen=True)
class AnswerFeedback:
    """What the learner sees after submitting a practice answer."""

    question_id: str
    selected: Choice
    correct_choice: Choice
    is_correct: bool
    selected_explanation: str
    correct_explanation: str
    mastery_before: float
    mastery_after: float


@dataclass(frozen=True)
class QuestionOutcome:
    """Per-question result of a finished session."""

    question_id: str
    selected: Choice | None
    correct_choice: Choice
    is_correct: bool
    mastery_before: float
    mastery_after: float

    @property
    def answered(self) -> bool:
        return self.selected is not None


@dataclass
class SessionResult:
    """Summary of a finished session."""

    mode: SessionMode
    outcomes: list[QuestionOutcome] = field(default_factory=list)
    started_at: datetime | None = None
    ended_at: datetime | None = None
    timed_out: bool = False

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def correct(self) -> int:
        return sum(1 for o in self.outcomes if o.is_correct)

    @property
    def answered(self) -> int:
        return sum(1 for o in self.outcomes if o.answered)

    @property
    def unanswered(self) -> int:
        return self.total - self.answered

    @property
    def score_percent(self) -> float:
        """Correct answers as a percentage of all questions."""
        if self.total == 0:
            return 0.0
        return self.correct / self.total * 100


class QuizSession:
    """
    Shared plumbing for practice and full-test sessions.

    Owns the in-memory pool so mastery stays correct even if the
    repository silently drops writes. Callers read `pool` after the
    session to carry updated mastery forward.
    """

    mode: SessionMode

    def __init__(
        self,
        pool: Sequence[Question],
        repository: QuizRepository,
        rng: random.Random | None = None,
        session_lengths: Sequence[int] = SESSION_LENGTHS,
    ):
        """
        Initialize session.

        Args:
            pool: Candidate questions with current mastery
            repository: Persistence collaborator
            rng: Random source for selection and shuffling
            session_lengths: Allowed values for choose_length()
        """
        self.repository = repository
        self.selector = WeightedSelector(rng)
        self.session_lengths = tuple(session_lengths)

        self._pool: dict[str, Question] = {q.id: q for q in pool}
        self.questions: list[Question] = []
        self.state = SessionState.AWAITING_SESSION_LENGTH
        self.started_at: datetime | None = None
        self.ended_at: datetime | None = None

    @property
    def pool(self) -> list[Question]:
        """Pool with mastery as updated by this session."""
        return list(self._pool.values())

    @property
    def total(self) -> int:
        return len(self.questions)

    def _require(self, *states: SessionState) -> None:
        if self.state not in states:
            allowed = ", ".join(s.value for s in states)
            raise InvalidTransitionError(
                f"{self.mode.value} session is '{self.state.value}', expected one of: {allowed}"
            )

    def _select(self, length: int) -> list[Question]:
        """Weighted selection followed by a presentation shuffle."""
        if length not in self.session_lengths:
            allowed = ", ".join(str(n) for n in self.session_lengths)
            raise InvalidTransitionError(f"Session length {length} not allowed ({allowed})")

        selected = self.selector.select(list(self._pool.values()), length)
        self.questions = self.selector.shuffle(selected)
        self.started_at = datetime.now(UTC)

        logger.info(
            f"Started {self.mode.value} session: {len(self.questions)} questions "
            f"(requested {length}, pool {len(self._pool)})"
        )
        return self.questions

    def update_mastery(self, question_id: str, is_correct: bool) -> tuple[float, float] | None:
        """
        Apply the mastery rule to a pool question in memory.

        Persisting the new value is left to the caller.

        Args:
            question_id: Question to update
            is_correct: Whether the answer was correct

        Returns:
            (mastery_before, mastery_after), or None if the id is unknown
        """
        question = self._pool.get(question_id)
        if question is None:
            logger.debug(f"Mastery update skipped, unknown question {question_id}")
            return None

        before = question.mastery
        after = update_mastery(before, is_correct)
        self._pool[question_id] = question.with_mastery(after)
        return before, after

    def abandon(self) -> None:
        """Leave the session without further writes."""
        if self.state != SessionState.ABANDONED:
            logger.info(f"{self.mode.value} session abandoned in state '{self.state.value}'")
        self.state = SessionState.ABANDONED
        self.ended_at = self.ended_at or datetime.now(UTC)


class PracticeSession(QuizSession):
    """One question at a time with immediate feedback."""

    mode = SessionMode.PRACTICE

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.current_index = 0
        self._outcomes: list[QuestionOutcome] = []

    def choose_length(self, length: int) -> list[Question]:
        """
        Pick the session's questions.

        Args:
            length: One of the allowed session lengths

        Returns:
            Questions in presentation order
        """
        self._require(SessionState.AWAITING_SESSION_LENGTH)
        questions = self._select(length)
        self.current_index = 0
        if questions:
            self.state = SessionState.AWAITING_ANSWER
        else:
            self._complete()
        return questions

    @property
    def current_question(self) -> Question | None:
        if self.current_index < len(self.questions):
            return self.questions[self.current_index]
        return None

    @property
    def progress(self) -> tuple[int, int]:
        """(1-based position, total)."""
        return min(self.current_index + 1, self.total), self.total

    def submit_answer(self, choice: Choice | str) -> AnswerFeedback:
        """
        Lock in an answer for the current question.

        Updates and persists mastery, appends the answer to history, and
        moves to the feedback state.

        Args:
            choice: Selected choice

        Returns:
            AnswerFeedback for the reveal
        """
        self._require(SessionState.AWAITING_ANSWER)
        question = self.questions[self.current_index]
        selected = Choice(choice)
        is_correct = question.is_correct(selected)

        before, after = self.update_mastery(question.id, is_correct)
        self.repository.put_mastery(question.id, after)

        record = AnswerRecord.for_question(question, selected)
        self.repository.append_answer(record)

        self._outcomes.append(
            QuestionOutcome(
                question_id=question.id,
                selected=selected,
                correct_choice=question.correct,
                is_correct=is_correct,
                mastery_before=before,
                mastery_after=after,
            )
        )
        self.state = SessionState.SHOWING_FEEDBACK

        logger.debug(
            "Answered {}: {} ({} -> {})",
            question.id,
            "correct" if is_correct else "incorrect",
            before,
            after,
        )

        return AnswerFeedback(
            question_id=question.id,
            selected=selected,
            correct_choice=question.correct,
            is_correct=is_correct,
            selected_explanation=question.explanation_for(selected),
            correct_explanation=question.explanation_for(question.correct),
            mastery_before=before,
            mastery_after=after,
        )

    def advance(self) -> Question | None:
        """
        Move past the feedback to the next question.

        Returns:
            Next question, or None when the session is complete
        """
        self._require(SessionState.SHOWING_FEEDBACK)
        self.current_index += 1
        if self.current_index >= self.total:
            self._complete()
            return None
        self.state = SessionState.AWAITING_ANSWER
        return self.questions[self.current_index]

    def finish(self) -> SessionResult:
        """
        End the session (early or after the last question).

        Returns:
            SessionResult over every selected question; unanswered ones
            score as incorrect with mastery unchanged
        """
        self._require(
            SessionState.AWAITING_ANSWER,
            SessionState.SHOWING_FEEDBACK,
            SessionState.COMPLETE,
        )
        if self.state != SessionState.COMPLETE:
            self._complete()

        answered = {o.question_id for o in self._outcomes}
        skipped = [
            QuestionOutcome(
                question_id=q.id,
                selected=None,
                correct_choice=q.correct,
                is_correct=False,
                mastery_before=self._pool[q.id].mastery,
                mastery_after=self._pool[q.id].mastery,
            )
            for q in self.questions
            if q.id not in answered
        ]
        return SessionResult(
            mode=self.mode,
            outcomes=list(self._outcomes) + skipped,
            started_at=self.started_at,
            ended_at=self.ended_at,
        )

    def _complete(self) -> None:
        self.state = SessionState.COMPLETE
        self.ended_at = datetime.now(UTC)
        logger.info(f"Practice session complete: {len(self._outcomes)} answered")


class FullTestSession(QuizSession):
    """Timed test, free navigation, single submission."""

    mode = SessionMode.FULL_TEST

    def __init__(self, *args, duration_seconds: int | None = None, **kwargs):
        """
        Initialize a full test.

        Args:
            duration_seconds: Time limit (defaults to settings.full_test_minutes)
            *args, **kwargs: See QuizSession
        """
        super().__init__(*args, **kwargs)
        if duration_seconds is None:
            duration_seconds = get_settings().full_test_seconds
        self.duration_seconds = duration_seconds

        self.answers: list[Choice | None] = []
        self.current_index = 0
        self.timer: CountdownTimer | None = None
        self.result: SessionResult | None = None
        self._lock = threading.RLock()

    # =========================================================================
    # Setup
    # =========================================================================

    def choose_length(self, length: int) -> list[Question]:
        """Pick the test's questions; the timer does not start yet."""
        with self._lock:
            self._require(SessionState.AWAITING_SESSION_LENGTH)
            questions = self._select(length)
            self.answers = [None] * len(questions)
            self.current_index = 0
            self.state = SessionState.READY
            return questions

    def start(self, realtime: bool = False) -> CountdownTimer:
        """
        Start the countdown.

        Args:
            realtime: Drive the countdown from a background wall-clock timer

        Returns:
            The session's CountdownTimer
        """
        with self._lock:
            self._require(SessionState.READY)
            self.timer = CountdownTimer(self.duration_seconds, on_expire=self._on_timeout)
            self.state = SessionState.IN_PROGRESS
            self.started_at = datetime.now(UTC)
            if realtime:
                self.timer.start_realtime()
            return self.timer

    # =========================================================================
    # Answering and navigation
    # =========================================================================

    @property
    def current_question(self) -> Question | None:
        if self.current_index < len(self.questions):
            return self.questions[self.current_index]
        return None

    @property
    def answered_count(self) -> int:
        return sum(1 for a in self.answers if a is not None)

    @property
    def remaining_seconds(self) -> int:
        if self.timer is None:
            return self.duration_seconds
        return self.timer.remaining_seconds

    def select_answer(self, index: int, choice: Choice | str) -> None:
        """Set or change the answer for a question."""
        with self._lock:
            self._require(SessionState.IN_PROGRESS)
            self._check_index(index)
            self.answers[index] = Choice(choice)

    def clear_answer(self, index: int) -> None:
        """Remove the answer for a question."""
        with self._lock:
            self._require(SessionState.IN_PROGRESS)
            self._check_index(index)
            self.answers[index] = None

    def go_to(self, index: int) -> Question:
        with self._lock:
            self._require(SessionState.IN_PROGRESS)
            self._check_index(index)
            self.current_index = index
            return self.questions[index]

    def next(self) -> Question | None:
        if not self.total:
            return None
        return self.go_to(min(self.current_index + 1, self.total - 1))

    def previous(self) -> Question | None:
        if not self.total:
            return None
        return self.go_to(max(self.current_index - 1, 0))

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self.total:
            raise IndexError(f"Question index {index} out of range (0-{self.total - 1})")

    # =========================================================================
    # Submission
    # =========================================================================

    def tick(self, seconds: int = 1) -> bool:
        """
        Advance the countdown.

        Returns:
            True if this tick triggered the automatic submission
        """
        with self._lock:
            if self.state != SessionState.IN_PROGRESS or self.timer is None:
                return False
            return self.timer.tick(seconds)

    def submit(self) -> SessionResult:
        """Submit manually; cancels the countdown first."""
        with self._lock:
            self._require(SessionState.IN_PROGRESS)
            if self.timer is not None:
                self.timer.cancel()
            return self._finalize(timed_out=False)

    def _on_timeout(self) -> None:
        with self._lock:
            if self.state != SessionState.IN_PROGRESS:
                return
            logger.info("Full test timed out, submitting automatically")
            self._finalize(timed_out=True)

    def _finalize(self, timed_out: bool) -> SessionResult:
        """Score the final snapshot and write mastery/history in one batch."""
        snapshot = list(self.answers)
        outcomes: list[QuestionOutcome] = []
        mastery_updates: dict[str, float] = {}
        records: list[AnswerRecord] = []
        now = datetime.now(UTC)

        for question, selected in zip(self.questions, snapshot):
            is_correct = selected is not None and question.is_correct(selected)

            before, after = self.update_mastery(question.id, is_correct)
            mastery_updates[question.id] = after

            if selected is not None:
                records.append(AnswerRecord.for_question(question, selected, now=now))

            outcomes.append(
                QuestionOutcome(
                    question_id=question.id,
                    selected=selected,
                    correct_choice=question.correct,
                    is_correct=is_correct,
                    mastery_before=before,
                    mastery_after=after,
                )
            )

        self.repository.put_masteries(mastery_updates)
        for record in records:
            self.repository.append_answer(record)

        self.state = SessionState.TIMED_OUT if timed_out else SessionState.SUBMITTED
        self.ended_at = now
        self.result = SessionResult(
            mode=self.mode,
            outcomes=outcomes,
            started_at=self.started_at,
            ended_at=now,
            timed_out=timed_out,
        )

        logger.info(
            f"Full test {'timed out' if timed_out else 'submitted'}: "
            f"{self.result.correct}/{self.result.total} correct, "
            f"{self.result.unanswered} unanswered"
        )
        return self.result

    def review(self) -> list[QuestionOutcome]:
        """Enter review after submission."""
        with self._lock:
            self._require(
                SessionState.SUBMITTED,
                SessionState.TIMED_OUT,
                SessionState.REVIEWING,
            )
            self.state = SessionState.REVIEWING
            return list(self.result.outcomes)

    def abandon(self) -> None:
        """Leave the test; the countdown is cancelled and nothing is written."""
        with self._lock:
            if self.timer is not None:
                self.timer.cancel()
            super().abandon()
