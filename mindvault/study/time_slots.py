"""
Time Slot Builder.

Turns a day's working window plus the caller's calendar blockers into an
ordered list of study-sized slots:

1. Clip blockers for the target day to the window and merge overlaps
2. Take the complement inside the window as free intervals
3. Cut each free interval into full slots plus one trailing mini slot when
   the remainder is large enough; smaller remainders are dead time
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from mindvault.core.errors import ConfigError
from mindvault.core.utils import time_to_minutes, to_epoch_day
from mindvault.study.models import TimeBlocker


@dataclass(frozen=True)
class TimeSlot:
    """A contiguous block of working time, in minutes from midnight."""

    start: int
    end: int
    is_mini: bool = False

    @property
    def duration(self) -> int:
        return self.end - self.start


def merge_intervals(intervals: list[tuple[int, int]]) -> list[tuple[int, int]]:
    """Merge overlapping or touching intervals (result is sorted by start)."""
    if not intervals:
        return []

    ordered = sorted(intervals)
    merged = [ordered[0]]
    for start, end in ordered[1:]:
        last_start, last_end = merged[-1]
        if start <= last_end:
            merged[-1] = (last_start, max(last_end, end))
        else:
            merged.append((start, end))
    return merged


def blocked_intervals(
    day: int,
    blockers: list[TimeBlocker],
    window_start: int,
    window_end: int,
) -> list[tuple[int, int]]:
    """Blockers on `day`, clipped to the window and merged."""
    clipped = []
    for blocker in blockers:
        if to_epoch_day(blocker.date) != day:
            continue
        start = max(time_to_minutes(blocker.start), window_start)
        end = min(time_to_minutes(blocker.end), window_end)
        if end > start:
            clipped.append((start, end))
    return merge_intervals(clipped)


def free_intervals(
    window_start: int,
    window_end: int,
    blocked: list[tuple[int, int]],
) -> list[tuple[int, int]]:
    """Complement of merged `blocked` intervals inside the window."""
    free = []
    cursor = window_start
    for start, end in blocked:
        if start > cursor:
            free.append((cursor, start))
        cursor = max(cursor, end)
    if cursor < window_end:
        free.append((cursor, window_end))
    return free


def build_time_slots(
    day: int,
    blockers: list[TimeBlocker],
    day_start: str,
    day_end: str,
    slot_minutes: int,
    mini_slot_minutes: int,
) -> list[TimeSlot]:
    """
    Build the ordered slots for one day.

    Args:
        day: Target day as an epoch day
        blockers: All caller blockers (filtered to `day` here)
        day_start: Window start, HH:MM
        day_end: Window end, HH:MM
        slot_minutes: Full slot size
        mini_slot_minutes: Minimum size of a trailing mini slot

    Returns:
        Chronologically ordered TimeSlots

    Raises:
        ConfigError: If the window end is not after its start
    """
    window_start = time_to_minutes(day_start)
    window_end = time_to_minutes(day_end)
    if window_end <= window_start:
        raise ConfigError(f"day_end ({day_end}) must be after day_start ({day_start})")

    slot_minutes = max(int(slot_minutes), 1)
    blocked = blocked_intervals(day, blockers, window_start, window_end)

    slots: list[TimeSlot] = []
    for start, end in free_intervals(window_start, window_end, blocked):
        full_count, remainder = divmod(end - start, slot_minutes)
        cursor = start
        for _ in range(full_count):
            slots.append(TimeSlot(cursor, cursor + slot_minutes))
            cursor += slot_minutes
        if remainder and remainder >= mini_slot_minutes:
            slots.append(TimeSlot(cursor, cursor + remainder, is_mini=True))

    logger.debug(
        f"Built {len(slots)} slots ({len(blocked)} blocked intervals) "
        f"for window {day_start}-{day_end}"
    )
    return slots
