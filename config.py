"""
Configuration settings for the spaced-repetition review scheduler.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
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
    # SM-2 Scheduling Policy
    # ========================================
    srs_initial_ease: float = Field(
        default=2.5,
        ge=1.3,
        description="Ease factor assigned to a card that has never been reviewed",
    )
    srs_minimum_ease: float = Field(
        default=1.3,
        gt=0.0,
        description="Floor applied to the ease factor after every review",
    )
    srs_first_interval: int = Field(
        default=1,
        ge=1,
        description="Days until the review after the first successful recall",
    )
    srs_second_interval: int = Field(
        default=6,
        ge=1,
        description="Days until the review after the second successful recall",
    )
    srs_lapse_interval: int = Field(
        default=1,
        ge=1,
        description="Days until the retry after a lapse (quality < 3)",
    )

    # ─── Mastery ────────────────────────────────────────────────────────────────
    srs_mastery_repetitions: int = Field(
        default=5,
        ge=1,
        description="Consecutive successful reviews required for mastery",
    )
    srs_mastery_min_interval: int = Field(
        default=21,
        ge=1,
        description="Minimum interval (days) required for mastery",
    )

    # ─── Queues ─────────────────────────────────────────────────────────────────
    srs_new_cards_first: bool = Field(
        default=True,
        description="Surface never-reviewed cards before overdue ones in the due queue",
    )
    srs_leaderboard_size: int = Field(
        default=10,
        ge=1,
        description="Default number of entries in the streak leaderboard",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    @model_validator(mode="after")
    def _check_ease_bounds(self) -> Settings:
        if self.srs_initial_ease < self.srs_minimum_ease:
            raise ValueError("srs_initial_ease must not be below srs_minimum_ease")
        return self

    def get_scheduling_config(self) -> dict[str, float | int | bool]:
        """Get the scheduling policy as a flat dictionary."""
        return {
            "initial_ease": self.srs_initial_ease,
            "minimum_ease": self.srs_minimum_ease,
            "first_interval": self.srs_first_interval,
            "second_interval": self.srs_second_interval,
            "lapse_interval": self.srs_lapse_interval,
            "mastery_repetitions": self.srs_mastery_repetitions,
            "mastery_min_interval": self.srs_mastery_min_interval,
            "new_cards_first": self.srs_new_cards_first,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
