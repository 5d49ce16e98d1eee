"""
Adaptive Study Scheduler.

Builds a day-by-day plan from "today" through the horizon (the later of the
last exam and the fallback target date). Each day is a pure step over an
explicit allocation state:

    plan_day(state, day, ctx) -> (state', ScheduleDay)

Per day:
1. Build time slots around the day's blockers and apply the daily cap
2. Score every chapter with remaining work
3. Optionally inject practice papers once the syllabus is nearly covered
4. Allocate minute budgets and fill slots with interleaving
5. Attach friction advisories

The run never mutates the caller's chapters or friction; the remaining-hours
ledger and suggested history live only in the allocation state.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field

from loguru import logger

from mindvault.core.errors import CapacityError, ConfigError
from mindvault.core.utils import (
    clamp,
    from_epoch_day,
    round_half_up,
    safe_float,
    to_epoch_day,
    today_epoch_day,
)
from mindvault.study.friction import friction_notes
from mindvault.study.interleaver import AdaptiveInterleaver, Candidate
from mindvault.study.models import (
    Chapter,
    Exam,
    ScheduleDay,
    ScheduleResult,
    ScheduleSummary,
    SchedulerConfig,
    TimeBlocker,
    UserFriction,
)
from mindvault.study.priority import compute_chapter_priority
from mindvault.study.time_slots import TimeSlot, build_time_slots

REMAINING_EPSILON = 1e-6
DEFAULT_TARGET_DAYS = 90

INVALID_WINDOW_WARNING = "Invalid time configuration"
NO_SLOTS_WARNING = "No slots; defer to tomorrow"


@dataclass(frozen=True)
class AllocationState:
    """Working state threaded through the day loop."""

    remaining_hours: dict[str, float]
    suggested_history: dict[str, int] = field(default_factory=dict)  # chapter_id -> epoch day
    planned_hours: float = 0.0


@dataclass
class PlanContext:
    """Read-only inputs shared by every day of one run."""

    chapters: list[Chapter]
    exams_by_subject: dict[str, list[tuple[int, Exam]]]  # sorted by exam day
    friction: UserFriction
    blockers: list[TimeBlocker]
    config: SchedulerConfig
    target_day: int
    history: dict[str, int | None]
    total_estimated: float
    rng: random.Random
    interleaver: AdaptiveInterleaver


def nearest_exam(exams: list[tuple[int, Exam]], day: int) -> Exam | None:
    """First exam on or after `day`, given exams sorted by day."""
    for exam_day, exam in exams:
        if exam_day >= day:
            return exam
    return None


def usable_slots(slots: list[TimeSlot], cap_minutes: int) -> tuple[list[TimeSlot], int]:
    """Accept slots in order until the next one would exceed the cap."""
    usable = []
    used = 0
    for ts in slots:
        if used + ts.duration > cap_minutes:
            break
        usable.append(ts)
        used += ts.duration
    return usable, used


def score_candidates(
    day: int,
    remaining: dict[str, float],
    ctx: PlanContext,
) -> list[Candidate]:
    candidates = []
    for chapter in ctx.chapters:
        rem = remaining.get(chapter.chapter_id, 0.0)
        if rem <= REMAINING_EPSILON:
            continue

        exam = nearest_exam(ctx.exams_by_subject.get(chapter.subject, []), day)
        result = compute_chapter_priority(
            chapter,
            exam,
            ctx.target_day,
            day,
            ctx.friction,
            ctx.config,
            rem,
            ctx.history.get(chapter.chapter_id),
        )
        if result.priority <= 0:
            continue

        candidates.append(Candidate(
            chapter=chapter,
            exam=exam,
            priority=result.priority,
            reason=result.reason,
            personal_difficulty=result.personal_difficulty,
            remaining_hours=rem,
        ))
    return candidates


def practice_paper_candidates(day: int, ctx: PlanContext) -> list[Candidate]:
    """Synthetic practice papers, one coin flip per subject with an upcoming exam."""
    config = ctx.config
    papers = []
    for subject, exams in ctx.exams_by_subject.items():
        exam = nearest_exam(exams, day)
        if exam is None:
            continue
        if ctx.rng.random() >= config.practice_paper_probability:
            continue
        paper = Chapter(
            chapter_id=f"PAPER_{subject}",
            subject=subject,
            estimated_hours=config.practice_paper_hours,
            default_difficulty=0.5,
            exam_weight=1.5,
            question_density=1.0,
        )
        papers.append(Candidate(
            chapter=paper,
            exam=exam,
            priority=config.practice_paper_priority,
            reason=f"Practice paper: syllabus > {config.practice_paper_threshold:.0%} completed",
            personal_difficulty=0.5,
            remaining_hours=config.practice_paper_hours,
            synthetic=True,
        ))
    return papers


def plan_day(
    state: AllocationState,
    day: int,
    ctx: PlanContext,
) -> tuple[AllocationState, ScheduleDay]:
    """
    Plan one calendar day.

    Args:
        state: Allocation state after the previous day (not modified)
        day: Day to plan, as an epoch day
        ctx: Run context

    Returns:
        (next state, the planned day)
    """
    config = ctx.config
    iso_day = from_epoch_day(day)

    try:
        slots = build_time_slots(
            day,
            ctx.blockers,
            config.day_start,
            config.day_end,
            config.slot_minutes,
            config.mini_slot_minutes,
        )
    except ConfigError as e:
        logger.warning(f"{iso_day}: {e}")
        return state, ScheduleDay(date=iso_day, warning=INVALID_WINDOW_WARNING)

    cap_minutes = round_half_up(config.daily_max_hours * 60)
    usable, used = usable_slots(slots, cap_minutes)
    if not usable:
        return state, ScheduleDay(date=iso_day, warning=NO_SLOTS_WARNING)

    remaining = dict(state.remaining_hours)
    candidates = score_candidates(day, remaining, ctx)

    if config.practice_papers and len(usable) >= 2:
        total_remaining = sum(remaining.get(ch.chapter_id, 0.0) for ch in ctx.chapters)
        progress = 1 - total_remaining / max(ctx.total_estimated, 1)
        if progress > config.practice_paper_threshold:
            papers = practice_paper_candidates(day, ctx)
            if papers:
                logger.debug(f"{iso_day}: injected {len(papers)} practice paper(s)")
            candidates.extend(papers)

    if not candidates:
        return state, ScheduleDay(
            date=iso_day,
            total_hours=used / 60,
            slots=ctx.interleaver.review_only_slots(
                usable, config.mode, config.min_reviews, config.slot_minutes
            ),
        )

    ranked = ctx.interleaver.allocate(
        candidates,
        cap_minutes,
        config.slot_minutes,
        has_main_slots=any(not ts.is_mini for ts in usable),
    )
    fill = ctx.interleaver.fill_slots(
        usable,
        ranked,
        remaining,
        config.mode,
        config.min_reviews,
        config.slot_minutes,
    )

    history = dict(state.suggested_history)
    for chapter_id in fill.studied_today:
        history[chapter_id] = day

    next_state = AllocationState(
        remaining_hours=remaining,
        suggested_history=history,
        planned_hours=state.planned_hours + fill.planned_hours,
    )
    schedule_day = ScheduleDay(
        date=iso_day,
        total_hours=used / 60,
        slots=fill.slots,
        friction_notes=friction_notes(ctx.friction),
    )
    logger.debug(
        f"{iso_day}: {len(usable)} slots, {len(ranked)} candidates, "
        f"{fill.planned_hours:.2f}h planned"
    )
    return next_state, schedule_day


def build_summary(
    today: int,
    state: AllocationState,
    ctx: PlanContext,
) -> ScheduleSummary:
    # First N in input order, not ranked by severity
    risk = [
        ch.chapter_id
        for ch in ctx.chapters
        if state.remaining_hours.get(ch.chapter_id, 0.0) > REMAINING_EPSILON
    ][: ctx.config.risk_chapter_limit]

    coverage = 0.0
    if ctx.total_estimated > REMAINING_EPSILON:
        coverage = clamp(state.planned_hours / ctx.total_estimated, 0.0, 1.0)

    return ScheduleSummary(
        today=from_epoch_day(today),
        total_coverage=round(coverage, 3),
        risk_chapters=risk,
        remaining_hours_total=round(sum(state.remaining_hours.values()), 2),
        mode=ctx.config.mode.value,
        history_suggestions={
            chapter_id: from_epoch_day(day)
            for chapter_id, day in state.suggested_history.items()
        },
    )


def generate_schedule(
    exams: list[Exam],
    chapters: list[Chapter],
    friction: UserFriction,
    blockers: list[TimeBlocker],
    config: SchedulerConfig | None = None,
    rng: random.Random | None = None,
    interleaver: AdaptiveInterleaver | None = None,
) -> ScheduleResult:
    """
    Generate an adaptive study schedule.

    Args:
        exams: Upcoming exams (invalid entries are dropped)
        chapters: Syllabus chapters
        friction: Learner friction profile
        blockers: Calendar blockers
        config: Run configuration (defaults if None)
        rng: Random source for practice-paper injection; seeded from
            `config.seed` when None
        interleaver: Allocation strategy (defaults if None)

    Returns:
        ScheduleResult with one ScheduleDay per calendar day and a summary

    Raises:
        CapacityError: If there are too many chapters to schedule
    """
    config = (config or SchedulerConfig()).normalized()

    if len(chapters) >= config.max_chapters:
        raise CapacityError(
            f"Too many chapters: {len(chapters)} (must be < {config.max_chapters})"
        )

    today = to_epoch_day(config.today) if config.today else None
    if today is None:
        if config.today:
            logger.warning(f"Unparseable today={config.today!r}; using the current date")
        today = today_epoch_day()

    target_day = to_epoch_day(config.target_completion_date) if config.target_completion_date else None
    if target_day is None:
        target_day = today + DEFAULT_TARGET_DAYS

    valid_exams = []
    for exam in exams:
        exam_day = to_epoch_day(exam.date)
        if exam.subject and exam_day is not None:
            valid_exams.append((exam_day, exam))
    valid_exams.sort(key=lambda item: item[0])

    exams_by_subject: dict[str, list[tuple[int, Exam]]] = {}
    for exam_day, exam in valid_exams:
        exams_by_subject.setdefault(exam.subject, []).append((exam_day, exam))

    last_exam_day = valid_exams[-1][0] if valid_exams else today
    horizon = max(target_day, last_exam_day)
    if horizon - today > config.max_horizon_days:
        logger.warning(
            f"Horizon {from_epoch_day(horizon)} is more than {config.max_horizon_days} days out; "
            f"capping at {from_epoch_day(today + config.max_horizon_days)}"
        )
        horizon = today + config.max_horizon_days

    if not chapters:
        return ScheduleResult(
            days=[],
            summary=ScheduleSummary(today=from_epoch_day(today), mode=config.mode.value),
        )

    remaining = {ch.chapter_id: safe_float(ch.estimated_hours, 1.0, 0.0) for ch in chapters}
    ctx = PlanContext(
        chapters=chapters,
        exams_by_subject=exams_by_subject,
        friction=friction.normalized(),
        blockers=blockers,
        config=config,
        target_day=target_day,
        history={cid: to_epoch_day(value) for cid, value in config.history.items()},
        total_estimated=sum(safe_float(ch.estimated_hours, 1.0, 0.0) for ch in chapters),
        rng=rng or random.Random(config.seed),
        interleaver=interleaver or AdaptiveInterleaver(),
    )

    logger.info(
        f"Scheduling {len(chapters)} chapters, {len(valid_exams)} exams "
        f"from {from_epoch_day(today)} to {from_epoch_day(horizon)} ({config.mode.value} mode)"
    )

    state = AllocationState(remaining_hours=remaining)
    days = []
    for day in range(today, horizon + 1):
        state, schedule_day = plan_day(state, day, ctx)
        days.append(schedule_day)

    summary = build_summary(today, state, ctx)
    logger.info(
        f"Planned {state.planned_hours:.1f}h over {len(days)} days; "
        f"coverage {summary.total_coverage:.1%}, {len(summary.risk_chapters)} chapters at risk"
    )
    return ScheduleResult(days=days, summary=summary)
