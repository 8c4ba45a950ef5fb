"""
Starter Calibration.

One-time adjustment of initial mastery values based on the starter tier
the learner picks before any answers exist:

- beginner: easy content starts high, hard content starts low
- intermediate: balanced, small nudges per difficulty
- advanced: lower mastery across the board to challenge from the start
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from loguru import logger

from quizcore.core.mastery import clamp_mastery
from quizcore.core.question import Difficulty, Question


class StarterTier(str, Enum):
    """Initial calibration bucket."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

    @property
    def description(self) -> str:
        return {
            StarterTier.BEGINNER: "Start with easier questions. Good for new learners.",
            StarterTier.INTERMEDIATE: "Mix of easy and medium difficulty questions.",
            StarterTier.ADVANCED: "Challenging questions across all difficulty levels.",
        }[self]


def parse_starter_tier(raw: object) -> StarterTier | None:
    """
    Parse a stored starter tier.

    Malformed values are treated as absent so the caller falls back to
    the calibration flow.

    Args:
        raw: Stored value (enum, string, or anything else)

    Returns:
        StarterTier or None
    """
    if isinstance(raw, StarterTier):
        return raw
    if isinstance(raw, str):
        value = raw.strip().lower()
        try:
            return StarterTier(value)
        except ValueError:
            if value:
                logger.warning(f"Ignoring malformed starter tier: {raw!r}")
    return None


def calibrated_mastery(mastery: float, difficulty: Difficulty, tier: StarterTier) -> float:
    """
    Initial mastery for one question under a starter tier.

    Args:
        mastery: Current mastery (0-100)
        difficulty: Question difficulty
        tier: Chosen starter tier

    Returns:
        Adjusted mastery, clamped to [0, 100]
    """
    if tier == StarterTier.BEGINNER:
        if difficulty == Difficulty.EASY:
            adjusted = max(mastery, 60)
        elif difficulty == Difficulty.MEDIUM:
            adjusted = max(mastery - 5, 45)
        else:
            adjusted = min(mastery, 40)

    elif tier == StarterTier.INTERMEDIATE:
        if difficulty == Difficulty.EASY:
            adjusted = max(mastery - 5, 50)
        elif difficulty == Difficulty.MEDIUM:
            adjusted = mastery
        else:
            adjusted = min(mastery, 45)

    else:
        if difficulty == Difficulty.EASY:
            adjusted = min(mastery, 50)
        elif difficulty == Difficulty.MEDIUM:
            adjusted = min(mastery, 40)
        else:
            adjusted = min(mastery, 30)

    return clamp_mastery(adjusted)


def apply_starter_tier(
    questions: Iterable[Question],
    tier: StarterTier | str,
) -> list[Question]:
    """
    Apply starter calibration to a pool of questions.

    The input is not mutated. Callers must only invoke this once per
    learner, before any mastery state has been stored.

    Args:
        questions: Questions with their current mastery
        tier: StarterTier or its string value

    Returns:
        New list of questions with calibrated mastery

    Raises:
        ValueError: If tier is not a known starter tier
    """
    tier = StarterTier(tier)
    calibrated = [
        q.with_mastery(calibrated_mastery(q.mastery, q.difficulty, tier))
        for q in questions
    ]
    logger.info(f"Applied starter tier '{tier.value}' to {len(calibrated)} questions")
    return calibrated
