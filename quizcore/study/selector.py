"""
Weighted Question Selection.

Picks a session's questions with weighted random sampling without
replacement (lower mastery = higher weight), then shuffles the picked
subset so presentation order does not reveal the selection bias.

The random source is injectable so tests can seed it.
"""
from __future__ import annotations

import random
from collections.abc import Sequence
from typing import TypeVar

from loguru import logger

from quizcore.core.mastery import selection_weight
from quizcore.core.question import Question

T = TypeVar("T")

_default_rng = random.Random()


class WeightedSelector:
    """
    Weighted sampling without replacement over a question pool.

    The algorithm:
    1. If the request covers the whole pool, return the pool
    2. Otherwise compute a weight for every remaining candidate
    3. Draw r in [0, total) and walk the candidates subtracting weights
    4. Remove the chosen candidate and recompute weights from scratch
    """

    def __init__(self, rng: random.Random | None = None):
        """
        Initialize selector.

        Args:
            rng: Random source (module default if None)
        """
        self.rng = rng or _default_rng

    def select(self, pool: Sequence[Question], count: int) -> list[Question]:
        """
        Select up to `count` distinct questions from the pool.

        Args:
            pool: Candidate questions
            count: Number of questions wanted

        Returns:
            min(count, len(pool)) questions, no duplicates
        """
        if count <= 0 or not pool:
            return []

        if count >= len(pool):
            logger.info(f"Returning all {len(pool)} questions (requested: {count})")
            return list(pool)

        logger.info(f"Selecting {count} of {len(pool)} questions using weighted selection")

        selected: list[Question] = []
        available = list(pool)

        while len(selected) < count and available:
            index = self._draw_index(available)
            question = available.pop(index)
            logger.debug(
                "Selected {} (mastery: {}, difficulty: {})",
                question.id,
                question.mastery,
                question.difficulty.value,
            )
            selected.append(question)

        return selected

    def _draw_index(self, available: list[Question]) -> int:
        """Draw one candidate index proportional to its selection weight."""
        weights = [selection_weight(q.mastery) for q in available]
        total = sum(weights)

        r = self.rng.random() * total
        for i, weight in enumerate(weights):
            r -= weight
            if r <= 0:
                return i

        # Float rounding can leave a sliver of r after the last weight
        return len(available) - 1

    def shuffle(self, items: Sequence[T]) -> list[T]:
        """
        Fisher-Yates shuffle into a new list.

        Visits indices from last to first, swapping each with a uniformly
        chosen index in [0, i].

        Args:
            items: Items to permute (not mutated)

        Returns:
            Shuffled copy
        """
        shuffled = list(items)
        for i in range(len(shuffled) - 1, 0, -1):
            j = self.rng.randint(0, i)
            shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
        return shuffled


def select_questions(
    pool: Sequence[Question],
    count: int,
    rng: random.Random | None = None,
) -> list[Question]:
    """Select questions with the weighted policy (see WeightedSelector.select)."""
    return WeightedSelector(rng).select(pool, count)


def shuffle_questions(items: Sequence[T], rng: random.Random | None = None) -> list[T]:
    """Uniform random permutation (see WeightedSelector.shuffle)."""
    return WeightedSelector(rng).shuffle(items)
