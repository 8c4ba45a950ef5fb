"""
Setup script for quizcore.

quizcore is a terminal quiz trainer for multiple-choice question banks.
It selects questions by weighted sampling that favors low-mastery items,
tracks per-question mastery, and offers two modes:

1. Practice - One question at a time with immediate feedback
2. Full test - Timed, freely navigable, single submission

The 'quizcore' command is the entry point.
"""

from setuptools import find_packages, setup

setup(
    name="quizcore",
    version="1.0.0",
    description="Adaptive multiple-choice quiz trainer for the terminal",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(include=["quizcore", "quizcore.*"]),
    python_requires=">=3.11",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "quizcore=quizcore.delivery.quiz_cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="quiz mastery adaptive cli education",
)
