"""
Delivery: terminal front end and persistence for quizcore.

Components:
- QuestionBank: JSON loading and record validation
- StateStore: SQLite persistence for mastery, history and starter tier
- quiz_cli: Main terminal interface
"""

from .question_bank import QuestionBank, QuestionRecord, load_bank_dir, transform_record
from .state_store import StateStore

__all__ = [
    # Bank loading
    "QuestionBank",
    "QuestionRecord",
    "load_bank_dir",
    "transform_record",
    # Persistence
    "StateStore",
]
