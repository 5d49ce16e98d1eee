"""
Configuration settings for the MindVault planner.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from mindvault.core.modes import NarratorConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Storage
    # ========================================
    data_dir: Path = Field(
        default=Path.home() / ".mindvault",
        description="Directory holding the profile database and exports",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Log level for the CLI",
    )
    log_file: str | None = Field(
        default=None,
        description="Optional log file path (rotated at 10 MB)",
    )

    # ========================================
    # Scheduler defaults
    # ========================================
    planner_mode: Literal["base", "assisted", "power"] = Field(
        default="assisted",
        description="Slot policy: base leaves gaps, assisted/power fill them with reviews",
    )
    daily_max_hours: float = Field(
        default=4.0,
        description="Maximum study hours per day",
    )
    min_reviews: int = Field(
        default=20,
        description="Base card count for review blocks",
    )
    slot_minutes: int = Field(
        default=30,
        description="Full slot size in minutes (15-120)",
    )
    mini_slot_minutes: int = Field(
        default=15,
        description="Smallest trailing remainder kept as a mini slot",
    )
    day_start: str = Field(
        default="06:00",
        description="Working window start (HH:MM)",
    )
    day_end: str = Field(
        default="22:00",
        description="Working window end (HH:MM)",
    )
    date_dampener: Literal["log", "floor3", "implicit"] = Field(
        default="log",
        description="Deadline dampening policy when an exam date is known",
    )
    focus_weight: float = Field(
        default=0.7,
        description="Global multiplier on chapter priority",
    )

    # ─── Practice papers ────────────────────────────────────────────────────────
    practice_papers: bool = Field(
        default=True,
        description="Inject practice papers once the syllabus is nearly covered",
    )
    practice_paper_probability: float = Field(
        default=0.3,
        description="Per-subject, per-day chance of a practice paper",
    )
    practice_paper_priority: float = Field(
        default=2.0,
        description="Fixed priority of an injected practice paper",
    )
    practice_paper_threshold: float = Field(
        default=0.9,
        description="Syllabus progress above which papers are offered",
    )
    practice_paper_hours: float = Field(
        default=1.5,
        description="Daily effort budget of one practice paper",
    )

    # ========================================
    # Narration (OpenAI-compatible chat API)
    # ========================================
    narrator_api_key: str | None = Field(
        default=None,
        description="API key for schedule narration (Groq, OpenAI, ...)",
    )
    narrator_base_url: str = Field(
        default="https://api.groq.com/openai/v1",
        description="Chat completions base URL",
    )
    narrator_model: str = Field(
        default="llama-3.1-8b-instant",
        description="Model used for narration",
    )
    narrator_timeout_seconds: float = Field(
        default=15.0,
        description="Narration request timeout",
    )

    @property
    def database_path(self) -> Path:
        return self.data_dir / "planner.db"

    def get_scheduler_defaults(self) -> dict[str, Any]:
        """Scheduler options as a dict for SchedulerConfig.from_dict."""
        return {
            "mode": self.planner_mode,
            "daily_max_hours": self.daily_max_hours,
            "min_reviews": self.min_reviews,
            "slot_minutes": self.slot_minutes,
            "mini_slot_minutes": self.mini_slot_minutes,
            "day_start": self.day_start,
            "day_end": self.day_end,
            "date_dampener": self.date_dampener,
            "focus_weight": self.focus_weight,
            "practice_papers": self.practice_papers,
            "practice_paper_probability": self.practice_paper_probability,
            "practice_paper_priority": self.practice_paper_priority,
            "practice_paper_threshold": self.practice_paper_threshold,
            "practice_paper_hours": self.practice_paper_hours,
        }

    def get_narrator_config(self) -> NarratorConfig:
        return NarratorConfig(
            base_url=self.narrator_base_url,
            api_key=self.narrator_api_key,
            model=self.narrator_model,
            timeout_seconds=self.narrator_timeout_seconds,
        )

    def has_ai_configured(self) -> bool:
        return bool(self.narrator_api_key)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
