"""
quizcore: adaptive multiple-choice quiz engine.

Tracks per-question mastery, picks the next questions with a weighted
random policy biased toward weak areas, and updates mastery after each
answer.
"""

__version__ = "1.0.0"
