"""
Study Scheduler Module.

Provides the pure scheduling core:
- Time slot building around calendar blockers
- Chapter priority scoring and personal difficulty
- Friction model updates
- Adaptive interleaving and allocation
- The day-by-day schedule assembler
"""

from mindvault.study.friction import friction_notes, update_friction
from mindvault.study.interleaver import AdaptiveInterleaver, Candidate, InterleaveConfig
from mindvault.study.models import (
    Chapter,
    Exam,
    ScheduleDay,
    ScheduleResult,
    ScheduleSlot,
    ScheduleSummary,
    SchedulerConfig,
    SlotType,
    TaskOutcome,
    TimeBlocker,
    UserFriction,
)
from mindvault.study.priority import (
    compute_chapter_priority,
    compute_review_cards,
    personal_difficulty,
)
from mindvault.study.scheduler import AllocationState, generate_schedule, plan_day
from mindvault.study.time_slots import TimeSlot, build_time_slots, merge_intervals

__all__ = [
    # Models
    "Chapter",
    "Exam",
    "UserFriction",
    "TaskOutcome",
    "TimeBlocker",
    "SchedulerConfig",
    "SlotType",
    "ScheduleSlot",
    "ScheduleDay",
    "ScheduleSummary",
    "ScheduleResult",
    # Slots
    "TimeSlot",
    "build_time_slots",
    "merge_intervals",
    # Scoring
    "personal_difficulty",
    "compute_chapter_priority",
    "compute_review_cards",
    # Friction
    "update_friction",
    "friction_notes",
    # Allocation
    "AdaptiveInterleaver",
    "InterleaveConfig",
    "Candidate",
    # Assembler
    "AllocationState",
    "plan_day",
    "generate_schedule",
]
