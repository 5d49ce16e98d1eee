"""
Planner Operating Modes

Defines the three scheduling modes:
1. Base Mode - study slots only; mini slots become breaks, gaps become buffers
2. Assisted Mode - mini slots and leftover slots are filled with reviews
3. Power Mode - same slot policy as assisted (reserved for heavier loads)

Also holds the deadline dampening policies and the narrator endpoint config.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class PlannerMode(str, Enum):
    """Scheduling mode for the planner."""

    BASE = "base"
    ASSISTED = "assisted"
    POWER = "power"

    @classmethod
    def coerce(cls, value: object, default: "PlannerMode | None" = None) -> "PlannerMode":
        """Parse a mode, falling back to `default` (BASE) for unknown values."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return default or cls.BASE

    @property
    def fills_reviews(self) -> bool:
        """Whether spare slots are turned into review blocks."""
        return self != PlannerMode.BASE


class DateDampener(str, Enum):
    """How priority decays as a deadline recedes."""

    LOG = "log"  # ln(d + 1) + 1
    FLOOR3 = "floor3"  # max(d, 3)
    IMPLICIT = "implicit"  # steep ramp inside 14 days, log beyond

    @classmethod
    def coerce(cls, value: object) -> "DateDampener":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.LOG


class NarratorConfig(BaseModel):
    """Configuration for the schedule narrator (OpenAI-compatible chat API)."""

    base_url: str = "https://api.groq.com/openai/v1"
    api_key: str | None = None
    model: str = "llama-3.1-8b-instant"
    timeout_seconds: float = 15.0
    max_tokens: int = 150
    temperature: float = 0.7

    # Endpoints
    completions_endpoint: str = "/chat/completions"

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)
