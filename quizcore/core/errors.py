"""
Quiz engine exceptions.
"""


class QuizError(Exception):
    """Base class for quiz engine errors."""
    pass


class InvalidTransitionError(QuizError):
    """Raised when a session action is not allowed in the current state."""
    pass


class QuestionBankError(QuizError):
    """Raised when a question bank file cannot be read or parsed."""
    pass
