"""
Question Bank: JSON question loader.

Bank file format:
    {
        "cluster": "Marketing",
        "version": "1.0",
        "questions": [
            {
                "id": "pricing-001",
                "question": "...",
                "options": {"A": "...", "B": "...", "C": "...", "D": "..."},
                "answer": "B",
                "explanation": "...",
                "topic": "Pricing",          # optional
                "difficulty": "medium",      # optional
                "mastery": 0                 # optional
            }
        ]
    }

Records without per-choice explanations give every choice the single
explanation text; no distinct wrong-answer rationale is invented.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import BaseModel, Field, ValidationError, field_validator

from quizcore.core.errors import QuestionBankError
from quizcore.core.mastery import clamp_mastery
from quizcore.core.question import Choice, Difficulty, Question

# =============================================================================
# Raw JSON records
# =============================================================================


class QuestionRecord(BaseModel):
    """One question as stored in a bank file."""

    id: str = Field(..., min_length=1)
    question: str
    options: dict[Choice, str]
    answer: Choice
    explanation: str | None = None
    explanations: dict[Choice, str] | None = None
    topic: str | None = None
    difficulty: str | None = None
    mastery: float | None = None

    @field_validator("options")
    @classmethod
    def _all_choices(cls, value: dict[Choice, str]) -> dict[Choice, str]:
        missing = [c.value for c in Choice if c not in value]
        if missing:
            raise ValueError(f"missing options: {', '.join(missing)}")
        return value

    @field_validator("answer", mode="before")
    @classmethod
    def _normalize_answer(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value


def transform_record(record: QuestionRecord) -> Question:
    """
    Convert a bank record into a Question.

    Defaults:
    - topic: id prefix before the first '-', else "General"
    - difficulty: medium (also for unknown values)
    - mastery: 0, clamped to [0, 100]

    Args:
        record: Validated bank record

    Returns:
        Question
    """
    fallback = record.explanation
    explanations = {}
    for choice in Choice:
        supplied = (record.explanations or {}).get(choice)
        explanations[choice] = supplied or fallback or f"Explanation for option {choice.value}"

    topic = record.topic or record.id.split("-")[0] or "General"

    difficulty = Difficulty.parse(record.difficulty)
    if difficulty is None:
        if record.difficulty:
            logger.warning(f"Question {record.id}: unknown difficulty {record.difficulty!r}, using medium")
        difficulty = Difficulty.MEDIUM

    return Question(
        id=record.id,
        prompt=record.question,
        choices={c: record.options[c] for c in Choice},
        correct=record.answer,
        explanations=explanations,
        topic=topic,
        difficulty=difficulty,
        mastery=clamp_mastery(record.mastery or 0),
    )


# =============================================================================
# Question Bank
# =============================================================================


@dataclass
class QuestionBank:
    """A named set of questions loaded from one JSON file."""

    cluster: str
    version: str = "1.0"
    questions: list[Question] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], default_cluster: str = "General") -> QuestionBank:
        """
        Build a bank from parsed JSON.

        Invalid question records are skipped with a warning.

        Args:
            data: Parsed bank JSON
            default_cluster: Cluster name when the file has none

        Returns:
            QuestionBank
        """
        questions: list[Question] = []
        seen: set[str] = set()

        for index, raw in enumerate(data.get("questions") or []):
            try:
                record = QuestionRecord.model_validate(raw)
            except ValidationError as e:
                logger.warning(f"Skipping invalid question #{index}: {e.error_count()} error(s)")
                continue

            if record.id in seen:
                logger.warning(f"Skipping duplicate question id {record.id}")
                continue
            seen.add(record.id)
            questions.append(transform_record(record))

        return cls(
            cluster=data.get("cluster") or default_cluster,
            version=str(data.get("version") or "1.0"),
            questions=questions,
        )

    @classmethod
    def load(cls, path: Path) -> QuestionBank:
        """
        Load a bank from a JSON file.

        Args:
            path: Bank file

        Returns:
            QuestionBank

        Raises:
            QuestionBankError: If the file cannot be read or is not a bank
        """
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise QuestionBankError(f"Cannot read question bank {path}: {e}") from e

        if not isinstance(data, dict):
            raise QuestionBankError(f"Question bank {path} must be a JSON object")

        bank = cls.from_dict(data, default_cluster=path.stem)
        logger.info(f"Loaded {len(bank.questions)} questions from {path.name} ({bank.cluster})")
        return bank


def load_bank_dir(bank_dir: Path) -> dict[str, QuestionBank]:
    """
    Load every *.json bank in a directory, keyed by cluster name.

    Unreadable files are logged and skipped.

    Args:
        bank_dir: Directory with bank files

    Returns:
        Banks keyed by cluster
    """
    banks: dict[str, QuestionBank] = {}
    if not bank_dir.is_dir():
        logger.warning(f"Question bank directory not found: {bank_dir}")
        return banks

    for path in sorted(bank_dir.glob("*.json")):
        try:
            bank = QuestionBank.load(path)
        except QuestionBankError as e:
            logger.error(str(e))
            continue
        banks[bank.cluster] = bank

    return banks

