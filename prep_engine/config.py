"""
Configuration settings for the prep-engine service.

Uses Pydantic Settings for environment variable management with .env file support.
Numeric rule tables (level thresholds, intervals, penalties) are not settings;
they live in prep_engine.core.thresholds as immutable values.
"""
from __future__ import annotations

from datetime import date
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Database
    # ========================================
    database_url: str = Field(
        default="sqlite+aiosqlite:///./prep_engine.db",
        description="Async SQLAlchemy connection string for mastery/energy storage",
    )
    persistence_timeout_seconds: float | None = Field(
        default=10.0,
        description="Timeout applied to each store call (None disables)",
    )

    # ========================================
    # Study Planner Defaults
    # ========================================
    default_daily_hours: float = Field(
        default=6.0,
        ge=0,
        le=16,
        description="Daily study hours used when the CLI is not given --hours",
    )
    exam_date: date | None = Field(
        default=None,
        description="Target exam date, used to derive days-to-exam",
    )
    target_exam: Literal["JEE", "NEET"] = Field(
        default="JEE",
        description="Exam whose candidate pool the rank projection uses",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    def days_to_exam(self, today: date) -> int | None:
        """Days remaining until the configured exam date, or None if unset."""
        if self.exam_date is None:
            return None
        return max(0, (self.exam_date - today).days)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
