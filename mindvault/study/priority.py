"""
Chapter Priority Scoring.

A chapter's priority for one day blends:
- personal difficulty (static difficulty + learner friction)
- deadline proximity, dampened by the configured policy
- chapter and exam weights
- incompleteness and question density boosts
- a spacing penalty for chapters studied in the last couple of days

Also provides the review card-count heuristic used for review slots.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from mindvault.core.modes import DateDampener
from mindvault.core.utils import clamp, safe_float, safe_int, to_epoch_day
from mindvault.study.models import Chapter, Exam, SchedulerConfig, UserFriction

# Friction blend weights for personal difficulty
OVERRUN_WEIGHT = 0.3
QUIZ_ERROR_WEIGHT = 0.4
REVISION_WEIGHT = 0.3

MIN_CARDS = 6
MAX_CARDS = 50

# Days since last study -> multiplier
SPACING_PENALTIES = {0: 0.7, 1: 0.85, 2: 0.95}


@dataclass
class PriorityResult:
    """Score for one chapter on one day."""

    priority: float
    reason: str
    personal_difficulty: float
    days_to_deadline: int


def personal_difficulty(chapter: Chapter, friction: UserFriction) -> float:
    """
    Blend a chapter's base difficulty with the learner's friction.

    Returns:
        Value in [0, 1]
    """
    avg_overrun = safe_float(friction.avg_overrun, 0.0, 0.0, 1.0)
    quiz_error = safe_float(friction.quiz_error_rate, 0.0, 0.0, 1.0)
    revision = safe_float(friction.revision_frequency, 0.0, 0.0, 1.0)
    base = safe_float(chapter.default_difficulty, 0.5, 0.0, 1.0)

    pd = (
        base
        + avg_overrun * OVERRUN_WEIGHT
        + quiz_error * QUIZ_ERROR_WEIGHT
        + revision * REVISION_WEIGHT
    )
    return clamp(pd, 0.0, 1.0)


def compute_review_cards(
    personal_diff: float,
    min_reviews: int,
    duration_minutes: int,
    base_slot_minutes: int,
) -> int:
    """
    Card-count heuristic for a review block.

    Harder chapters get fewer cards per block; short blocks are scaled down
    (but never below a quarter of a full slot).

    Returns:
        Integer in [6, 50]
    """
    pd = max(safe_float(personal_diff, 1.0, 0.0, 1.0), 1e-6)
    reviews = safe_float(min_reviews, 20.0, 0.0, 500.0)
    scale = clamp(
        safe_float(duration_minutes, 0.0) / max(safe_float(base_slot_minutes, 1.0), 1.0),
        0.25,
        1.0,
    )
    return safe_int((1.0 / pd) * reviews * scale, 10, MIN_CARDS, MAX_CARDS)


def days_denominator(days_to_deadline: int, dampener: DateDampener | str) -> float:
    """Dampening denominator; larger means the deadline matters less today."""
    d = max(days_to_deadline, 1)
    policy = DateDampener.coerce(dampener)

    if policy == DateDampener.IMPLICIT and d < 14:
        return max(d * 0.5, 0.5)
    if policy == DateDampener.FLOOR3:
        return float(max(d, 3))
    return math.log(d + 1) + 1


def spacing_penalty(day: int, last_studied: int | None) -> float:
    if last_studied is None:
        return 1.0
    days_since = day - last_studied
    if days_since <= 0:
        return SPACING_PENALTIES[0]
    return SPACING_PENALTIES.get(days_since, 1.0)


def compute_chapter_priority(
    chapter: Chapter,
    exam: Exam | None,
    target_day: int,
    day: int,
    friction: UserFriction,
    config: SchedulerConfig,
    remaining_hours: float,
    last_studied: int | None = None,
) -> PriorityResult:
    """
    Score one chapter for one day.

    Args:
        chapter: Chapter to score
        exam: Nearest upcoming exam for the chapter's subject, or None
        target_day: Fallback deadline (epoch day) used when there is no exam
        day: Day being planned (epoch day)
        friction: Learner friction profile
        config: Run configuration (dampener, focus weight)
        remaining_hours: Chapter's remaining work in the run ledger
        last_studied: Epoch day the chapter was last studied, None if unknown

    Returns:
        PriorityResult with the score and a human-readable breakdown
    """
    focus_weight = safe_float(config.focus_weight, 0.7, 0.0, 5.0)
    pd = personal_difficulty(chapter, friction)

    deadline = to_epoch_day(exam.date) if exam else None
    if deadline is None:
        exam = None
        deadline = target_day
    days_to_deadline = max(deadline - day, 0)

    chapter_weight = safe_float(chapter.exam_weight, 1.0, 0.0, 5.0)
    exam_weight = safe_float(exam.weight, 1.0, 0.0, 5.0) if exam else 1.0

    # No hard exam date -> implicit pacing toward the fallback target
    dampener = config.date_dampener if exam else DateDampener.IMPLICIT
    denom = days_denominator(days_to_deadline, dampener)

    priority = (pd * chapter_weight * exam_weight) / denom * focus_weight

    close_boost = 1.0
    if days_to_deadline <= 3:
        close_boost = 1.5
    elif days_to_deadline <= 10 and exam is None:
        close_boost = 1.2
    priority *= close_boost

    estimated = max(safe_float(chapter.estimated_hours, 1.0, 0.0), 1e-6)
    completion = clamp(1.0 - safe_float(remaining_hours, 0.0, 0.0) / estimated, 0.0, 1.0)
    incompleteness_boost = 0.5 + (1.0 - completion)
    priority *= incompleteness_boost

    density = safe_float(chapter.question_density, 0.5, 0.0, 1.0)
    density_boost = 0.85 + 0.3 * density
    priority *= density_boost

    # Spacing is ignored close to the deadline
    history_penalty = 1.0
    if days_to_deadline > 3:
        history_penalty = spacing_penalty(day, last_studied)
        priority *= history_penalty

    reason = (
        f"priority={priority:.3f} (diff={pd:.2f}, days={days_to_deadline}, "
        f"denom={denom:.2f}, close={close_boost:g}, incomp={incompleteness_boost:.2f}, "
        f"qd={density_boost:.2f}, hist={history_penalty:g})"
    )
    return PriorityResult(
        priority=priority,
        reason=reason,
        personal_difficulty=pd,
        days_to_deadline=days_to_deadline,
    )
