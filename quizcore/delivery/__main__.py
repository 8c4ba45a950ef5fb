"""
Entry point for running quizcore as a module.

Usage:
    python -m quizcore.delivery practice
    python -m quizcore.delivery stats
    python -m quizcore.delivery --help
"""
from .quiz_cli import main

if __name__ == "__main__":
    main()
