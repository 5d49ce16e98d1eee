"""
External integrations for the planner.

Provides:
- ScheduleNarrator: AI commentary for a day's plan (OpenAI-compatible chat API)
"""

from mindvault.integrations.narrator import ScheduleNarrator, attach_commentary

__all__ = ["ScheduleNarrator", "attach_commentary"]
