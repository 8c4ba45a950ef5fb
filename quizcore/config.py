"""
Configuration settings for quizcore.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from QUIZCORE_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="QUIZCORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Storage
    # ========================================
    data_dir: Path = Field(
        default=Path.home() / ".quizcore",
        description="Directory for learner state",
    )
    state_db_path: Path | None = Field(
        default=None,
        description="SQLite state database (defaults to <data_dir>/state.db)",
    )

    # ========================================
    # Question banks
    # ========================================
    bank_dir: Path = Field(
        default=Path("data/banks"),
        description="Directory with question bank JSON files",
    )
    default_cluster: str | None = Field(
        default=None,
        description="Cluster to study when none is given (first bank if unset)",
    )

    # ========================================
    # Sessions
    # ========================================
    full_test_minutes: int = Field(
        default=60,
        ge=1,
        description="Time limit for full-test sessions",
    )
    session_lengths: tuple[int, ...] = Field(
        default=(10, 25, 50, 100),
        description="Allowed session lengths",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: str = Field(
        default="WARNING",
        description="Loguru level for the CLI stderr sink",
    )

    @field_validator("session_lengths")
    @classmethod
    def _positive_lengths(cls, value: tuple[int, ...]) -> tuple[int, ...]:
        if not value or any(n <= 0 for n in value):
            raise ValueError("session_lengths must be a non-empty list of positive integers")
        return tuple(sorted(set(value)))

    @property
    def resolved_db_path(self) -> Path:
        """State database location."""
        return self.state_db_path or self.data_dir / "state.db"

    @property
    def full_test_seconds(self) -> int:
        return self.full_test_minutes * 60


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
