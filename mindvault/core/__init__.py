"""
Core Module - Shared helpers used across the planner.

Components:
- utils: numeric coercion, HH:MM parsing, epoch-day conversion
- errors: exception hierarchy (ConfigError, CapacityError, NarrationError)
- modes: planner mode / dampener enums and narrator configuration
"""

from mindvault.core.errors import (
    CapacityError,
    ConfigError,
    NarrationError,
    SchedulerError,
)
from mindvault.core.modes import DateDampener, NarratorConfig, PlannerMode

__all__ = [
    # Errors
    "SchedulerError",
    "ConfigError",
    "CapacityError",
    "NarrationError",
    # Modes
    "PlannerMode",
    "DateDampener",
    "NarratorConfig",
]
