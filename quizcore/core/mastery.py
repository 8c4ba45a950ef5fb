"""
Core Mastery Module.

Per-question mastery scoring (0-100) and the selection weights derived
from it.

Design:
- update_mastery: bounded +10 / -15 update rule
- selection_weight: inverse-ish mapping used by the weighted selector
- MasteryLevel: Enum for categorizing mastery scores in the CLI
"""

from __future__ import annotations

from enum import Enum

MASTERY_INCREMENT = 10  # Points gained for a correct answer
MASTERY_DECREMENT = 15  # Points lost for an incorrect answer
MIN_MASTERY = 0
MAX_MASTERY = 100
MASTERY_THRESHOLD_HIGH = 80  # Questions above this rarely appear
MASTERY_THRESHOLD_MASTERED = 90  # Considered "mastered"

# Weight floors for the upper mastery bands
MASTERED_WEIGHT = 5
HIGH_MASTERY_WEIGHT = 10


class MasteryLevel(str, Enum):
    """
    Mastery level categorization for a 0-100 score.
    """

    NOT_STARTED = "not_started"  # 0
    NOVICE = "novice"  # 1-39
    DEVELOPING = "developing"  # 40-69
    PROFICIENT = "proficient"  # 70-89
    MASTERED = "mastered"  # 90-100

    @classmethod
    def from_score(cls, score: float) -> MasteryLevel:
        """
        Convert a 0-100 mastery score to a level.

        Args:
            score: Mastery score between 0 and 100

        Returns:
            Corresponding MasteryLevel
        """
        if score <= 0:
            return cls.NOT_STARTED
        elif score < 40:
            return cls.NOVICE
        elif score < 70:
            return cls.DEVELOPING
        elif score < MASTERY_THRESHOLD_MASTERED:
            return cls.PROFICIENT
        else:
            return cls.MASTERED

    @property
    def display_name(self) -> str:
        """Human-readable name."""
        return self.value.replace("_", " ").title()

    @property
    def color(self) -> str:
        """Rich color for CLI display."""
        return {
            MasteryLevel.NOT_STARTED: "dim",
            MasteryLevel.NOVICE: "red",
            MasteryLevel.DEVELOPING: "yellow",
            MasteryLevel.PROFICIENT: "cyan",
            MasteryLevel.MASTERED: "green",
        }[self]


def clamp_mastery(value: float) -> float:
    """Clamp a mastery value into [0, 100]."""
    return max(MIN_MASTERY, min(MAX_MASTERY, value))


def update_mastery(current: float, is_correct: bool) -> float:
    """
    Update a mastery score after answering a question.

    Args:
        current: Current mastery score (0-100)
        is_correct: Whether the answer was correct

    Returns:
        New mastery score, clamped between 0 and 100
    """
    if is_correct:
        new_mastery = current + MASTERY_INCREMENT
    else:
        new_mastery = current - MASTERY_DECREMENT

    return clamp_mastery(new_mastery)


def selection_weight(mastery: float) -> float:
    """
    Calculate the selection weight for a question.

    Lower mastery means a higher weight (appears more often). Every
    question keeps a nonzero weight so mastered topics still recur.

    Bands:
        mastery < 50:        ((100 - mastery) / 50) ^ 1.5 * 100
        50 <= mastery < 80:  100 - mastery
        80 <= mastery < 90:  10
        mastery >= 90:       5

    Args:
        mastery: Mastery score (0-100)

    Returns:
        Positive weight for the selection algorithm
    """
    inverted = MAX_MASTERY - mastery

    if mastery < 50:
        return (inverted / 50) ** 1.5 * 100

    if mastery >= MASTERY_THRESHOLD_MASTERED:
        return MASTERED_WEIGHT

    if mastery >= MASTERY_THRESHOLD_HIGH:
        return HIGH_MASTERY_WEIGHT

    return inverted


def is_mastered(mastery: float) -> bool:
    """Check if a question is considered mastered (90+)."""
    return mastery >= MASTERY_THRESHOLD_MASTERED


def is_high_mastery(mastery: float) -> bool:
    """Check if a question is considered high mastery (80+)."""
    return mastery >= MASTERY_THRESHOLD_HIGH


def format_progress_bar(score: float, width: int = 10) -> str:
    """
    Format a text progress bar.

    Args:
        score: Score 0-100
        width: Character width

    Returns:
        String like "████████░░"
    """
    filled = int(clamp_mastery(score) / 100 * width)
    empty = width - filled
    return "█" * filled + "░" * empty
