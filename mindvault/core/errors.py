"""
Exception hierarchy for the planner.

ConfigError is recoverable (the affected day is emitted empty with a warning),
CapacityError is fatal and raised before any day is processed.
"""


class SchedulerError(Exception):
    """Base class for planner errors."""
    pass


class ConfigError(SchedulerError):
    """Raised when a day's working window is invalid (end <= start)."""
    pass


class CapacityError(SchedulerError):
    """Raised when the syllabus is too large to schedule."""
    pass


class NarrationError(SchedulerError):
    """Raised when the narration endpoint returns no usable commentary."""
    pass
