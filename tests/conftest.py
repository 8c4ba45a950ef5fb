"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import random
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from quizcore.config import get_settings  # noqa: E402
from quizcore.core.question import Choice, Difficulty, Question  # noqa: E402
from quizcore.core.repository import InMemoryQuizRepository  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (SQLite state store)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point learner state at a temp dir and reset cached settings."""
    monkeypatch.setenv("QUIZCORE_DATA_DIR", str(tmp_path / "state"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


def build_question(
    qid: str,
    mastery: float = 0,
    difficulty: Difficulty = Difficulty.MEDIUM,
    correct: Choice = Choice.A,
    topic: str = "General",
) -> Question:
    """Build a question with placeholder content."""
    return Question(
        id=qid,
        prompt=f"Prompt for {qid}",
        choices={c: f"Option {c.value}" for c in Choice},
        correct=correct,
        explanations={c: f"Why {c.value} for {qid}" for c in Choice},
        topic=topic,
        difficulty=difficulty,
        mastery=mastery,
    )


@pytest.fixture
def question_factory():
    """Factory for questions with placeholder content."""
    return build_question


@pytest.fixture
def rng():
    """Seeded random source."""
    return random.Random(1234)


@pytest.fixture
def repository():
    """Empty in-memory repository."""
    return InMemoryQuizRepository()


@pytest.fixture
def question_pool():
    """Twenty questions spread over difficulties and topics."""
    difficulties = list(Difficulty)
    return [
        build_question(
            f"q{i:02d}",
            mastery=(i * 5) % 100,
            difficulty=difficulties[i % 3],
            topic=["Routing", "Switching"][i % 2],
        )
        for i in range(20)
    ]


@pytest.fixture
def sample_bank_dict():
    """Provide a sample question bank as parsed JSON."""
    return {
        "cluster": "Networking",
        "version": "2.1",
        "questions": [
            {
                "id": "osi-001",
                "question": "Which OSI layer handles routing?",
                "options": {
                    "A": "Data Link",
                    "B": "Network",
                    "C": "Transport",
                    "D": "Session",
                },
                "answer": "B",
                "explanation": "Routing happens at the network layer.",
                "topic": "OSI Model",
                "difficulty": "easy",
                "mastery": 20,
            },
            {
                "id": "ip-001",
                "question": "How many usable hosts in a /26?",
                "options": {"A": "30", "B": "62", "C": "64", "D": "126"},
                "answer": "b",
                "explanations": {
                    "A": "That is a /27.",
                    "B": "2^6 - 2 = 62.",
                    "C": "Network and broadcast are not usable.",
                    "D": "That is a /25.",
                },
            },
        ],
    }
