"""
Unit tests for the schedule assembler.
"""

import random
from dataclasses import replace

import pytest

from mindvault.core.errors import CapacityError
from mindvault.core.modes import PlannerMode
from mindvault.core.utils import to_epoch_day
from mindvault.study.interleaver import AdaptiveInterleaver
from mindvault.study.models import (
    Chapter,
    Exam,
    SchedulerConfig,
    SlotType,
    TimeBlocker,
    UserFriction,
)
from mindvault.study.scheduler import (
    INVALID_WINDOW_WARNING,
    NO_SLOTS_WARNING,
    AllocationState,
    PlanContext,
    generate_schedule,
    nearest_exam,
    plan_day,
    usable_slots,
)
from mindvault.study.time_slots import TimeSlot

TODAY = to_epoch_day("2025-01-06")


def make_context(chapters, config, exams=(), blockers=(), friction=None):
    exams_by_subject = {}
    for exam in sorted(exams, key=lambda e: e.date):
        exams_by_subject.setdefault(exam.subject, []).append((to_epoch_day(exam.date), exam))
    return PlanContext(
        chapters=list(chapters),
        exams_by_subject=exams_by_subject,
        friction=friction or UserFriction(),
        blockers=list(blockers),
        config=config.normalized(),
        target_day=TODAY + 90,
        history={},
        total_estimated=sum(c.estimated_hours for c in chapters),
        rng=random.Random(0),
        interleaver=AdaptiveInterleaver(),
    )


def slot_minutes(slot):
    sh, sm = map(int, slot.start.split(":"))
    eh, em = map(int, slot.end.split(":"))
    return (eh * 60 + em) - (sh * 60 + sm)


class TestHelpers:
    def test_nearest_exam_on_or_after_day(self):
        early = Exam("Math", "2025-01-05")
        late = Exam("Math", "2025-01-10")
        exams = [(to_epoch_day(e.date), e) for e in (early, late)]

        assert nearest_exam(exams, TODAY) is late
        assert nearest_exam(exams, TODAY + 10) is None

    def test_usable_slots_stop_at_cap(self):
        slots = [TimeSlot(0, 60), TimeSlot(60, 120), TimeSlot(120, 150, is_mini=True)]
        usable, used = usable_slots(slots, 100)
        assert usable == slots[:1]
        assert used == 60


class TestPlanDay:
    """Single-day planning step."""

    def test_does_not_mutate_state(self, sample_chapters, sample_config):
        ctx = make_context(sample_chapters, sample_config)
        ledger = {c.chapter_id: c.estimated_hours for c in sample_chapters}
        state = AllocationState(remaining_hours=dict(ledger))

        next_state, day = plan_day(state, TODAY, ctx)

        assert state.remaining_hours == ledger
        assert state.planned_hours == 0.0
        assert next_state.planned_hours > 0
        assert day.date == "2025-01-06"

    def test_ledger_never_increases(self, sample_chapters, sample_config, sample_exams):
        ctx = make_context(sample_chapters, sample_config, sample_exams)
        state = AllocationState(remaining_hours={c.chapter_id: c.estimated_hours for c in sample_chapters})

        for day in range(TODAY, TODAY + 10):
            next_state, _ = plan_day(state, day, ctx)
            for chapter_id, hours in next_state.remaining_hours.items():
                assert 0.0 <= hours <= state.remaining_hours[chapter_id]
            state = next_state

    def test_history_records_studied_chapters(self, sample_chapters, sample_config):
        ctx = make_context(sample_chapters, sample_config)
        state = AllocationState(remaining_hours={c.chapter_id: c.estimated_hours for c in sample_chapters})

        next_state, day = plan_day(state, TODAY, ctx)

        studied = {s.chapter_id for s in day.slots if s.type == SlotType.STUDY}
        assert studied
        assert all(next_state.suggested_history[cid] == TODAY for cid in studied)

    def test_invalid_window_is_reported_not_raised(self, sample_chapters, sample_config):
        config = replace(sample_config, day_start="18:00", day_end="09:00")
        ctx = make_context(sample_chapters, config)
        state = AllocationState(remaining_hours={"phy1": 3.0})

        next_state, day = plan_day(state, TODAY, ctx)

        assert next_state is state
        assert day.warning == INVALID_WINDOW_WARNING
        assert day.slots == []

    def test_fully_blocked_day_defers(self, sample_chapters, sample_config):
        blockers = [TimeBlocker(date="2025-01-06", start="08:00", end="14:00")]
        ctx = make_context(sample_chapters, sample_config, blockers=blockers)
        state = AllocationState(remaining_hours={"phy1": 3.0})

        _, day = plan_day(state, TODAY, ctx)
        assert day.warning == NO_SLOTS_WARNING

    def test_friction_notes_attached(self, sample_chapters, sample_config):
        ctx = make_context(sample_chapters, sample_config, friction=UserFriction(avg_overrun=0.5))
        state = AllocationState(remaining_hours={c.chapter_id: c.estimated_hours for c in sample_chapters})

        _, day = plan_day(state, TODAY, ctx)
        assert day.friction_notes == ["High overrun: keep buffers, reduce context switching"]


class TestGenerateSchedule:
    """Full scheduling runs."""

    def test_covers_today_through_last_exam(self, sample_chapters, sample_exams, sample_config):
        config = replace(sample_config, target_completion_date="2025-01-10")
        result = generate_schedule(sample_exams, sample_chapters, UserFriction(), [], config)

        assert result.days[0].date == "2025-01-06"
        assert result.days[-1].date == "2025-01-27"
        assert result.summary.today == "2025-01-06"
        assert result.summary.mode == "assisted"

    def test_daily_cap_respected(self, sample_chapters, sample_exams, sample_config):
        result = generate_schedule(sample_exams, sample_chapters, UserFriction(), [], sample_config)

        for day in result.days:
            assert sum(slot_minutes(s) for s in day.slots) <= sample_config.daily_max_hours * 60

    def test_everything_fits(self, sample_chapters, sample_exams, sample_config):
        result = generate_schedule(sample_exams, sample_chapters, UserFriction(), [], sample_config)

        assert result.summary.total_coverage == pytest.approx(1.0)
        assert result.summary.risk_chapters == []
        assert result.summary.remaining_hours_total == 0.0
        assert set(result.summary.history_suggestions) == {"phy1", "phy2", "chem1"}

    def test_risk_chapters_when_time_runs_out(self, sample_config):
        chapters = [Chapter(chapter_id=f"c{i}", subject="Math", estimated_hours=50.0) for i in range(3)]
        config = replace(sample_config, target_completion_date="2025-01-07", practice_papers=False)
        result = generate_schedule([], chapters, UserFriction(), [], config)

        assert len(result.days) == 2
        assert result.summary.risk_chapters == ["c0", "c1", "c2"]
        assert 0.0 < result.summary.total_coverage < 1.0

    def test_single_chapter_far_exam(self, sample_config):
        chapter = Chapter(chapter_id="only", subject="Math", estimated_hours=20.0, question_density=1.0)
        result = generate_schedule(
            [Exam("Math", "2025-06-01")], [chapter], UserFriction(), [], sample_config
        )

        first = result.days[0]
        assert [s.type for s in first.slots] == [SlotType.STUDY] * 3
        assert all(s.chapter_id == "only" for s in first.slots)

    def test_empty_chapters(self, sample_exams, sample_config):
        result = generate_schedule(sample_exams, [], UserFriction(), [], sample_config)

        assert result.days == []
        assert result.summary.total_coverage == 0.0

    def test_capacity_error(self, sample_config):
        chapters = [Chapter(chapter_id=f"c{i}", subject="Math") for i in range(500)]
        with pytest.raises(CapacityError):
            generate_schedule([], chapters, UserFriction(), [], sample_config)

    def test_capacity_limit_cannot_be_raised_by_config(self):
        config = SchedulerConfig.from_dict({"max_chapters": 100000, "today": "2025-01-06"})
        chapters = [Chapter(chapter_id=f"c{i}", subject="Math") for i in range(600)]

        assert config.max_chapters == 500
        with pytest.raises(CapacityError):
            generate_schedule([], chapters, UserFriction(), [], config)

    def test_capacity_limit_on_directly_built_config(self, sample_config):
        config = replace(sample_config, max_chapters=100000)
        chapters = [Chapter(chapter_id=f"c{i}", subject="Math") for i in range(500)]
        with pytest.raises(CapacityError):
            generate_schedule([], chapters, UserFriction(), [], config)

    def test_capacity_limit_can_be_lowered(self, sample_chapters, sample_config):
        config = replace(sample_config, max_chapters=3)
        with pytest.raises(CapacityError):
            generate_schedule([], sample_chapters, UserFriction(), [], config)

    def test_invalid_window_does_not_abort_run(self, sample_chapters, sample_config):
        config = replace(sample_config, day_start="20:00", day_end="08:00", target_completion_date="2025-01-08")
        result = generate_schedule([], sample_chapters, UserFriction(), [], config)

        assert len(result.days) == 3
        assert all(d.warning == INVALID_WINDOW_WARNING for d in result.days)
        assert result.summary.risk_chapters == ["phy1", "phy2", "chem1"]

    def test_horizon_is_capped(self, sample_chapters, sample_config):
        config = replace(sample_config, max_horizon_days=30)
        result = generate_schedule(
            [Exam("Physics", "2027-01-01")], sample_chapters, UserFriction(), [], config
        )
        assert len(result.days) == 31

    def test_inputs_not_mutated(self, sample_chapters, sample_exams, sample_config):
        before = [c.to_dict() for c in sample_chapters]
        friction = UserFriction(avg_overrun=0.3)

        generate_schedule(sample_exams, sample_chapters, friction, [], sample_config)

        assert [c.to_dict() for c in sample_chapters] == before
        assert friction == UserFriction(avg_overrun=0.3)

    def test_base_mode_turns_mini_slots_into_breaks(self, sample_chapters, sample_config):
        config = replace(sample_config, mode=PlannerMode.BASE, day_end="12:30", daily_max_hours=6.0)
        result = generate_schedule([], sample_chapters, UserFriction(), [], config)

        assert result.days[0].slots[-1].type == SlotType.BREAK


class TestPracticePapers:
    """Practice-paper injection near the end of the syllabus."""

    @pytest.fixture
    def nearly_done(self, sample_config):
        return replace(
            sample_config,
            practice_paper_probability=1.0,
            target_completion_date="2025-01-08",
        )

    def test_injected_once_syllabus_covered(self, nearly_done):
        chapter = Chapter(chapter_id="m1", subject="Math", estimated_hours=1.0)
        result = generate_schedule([Exam("Math", "2025-01-08")], [chapter], UserFriction(), [], nearly_done)

        paper_slots = [s for d in result.days[1:] for s in d.slots if s.chapter_id == "PAPER_Math"]
        assert paper_slots
        assert paper_slots[0].reason.startswith("Interleaved; Practice paper")
        assert "PAPER_Math" not in result.summary.history_suggestions
        assert result.summary.total_coverage == pytest.approx(1.0)

    def test_disabled(self, nearly_done):
        config = replace(nearly_done, practice_papers=False)
        chapter = Chapter(chapter_id="m1", subject="Math", estimated_hours=1.0)
        result = generate_schedule([Exam("Math", "2025-01-08")], [chapter], UserFriction(), [], config)

        assert not any(s.chapter_id == "PAPER_Math" for d in result.days for s in d.slots)

    def test_seeded_runs_are_reproducible(self, sample_chapters, sample_exams, sample_config):
        config = replace(sample_config, practice_paper_probability=0.5)
        first = generate_schedule(sample_exams, sample_chapters, UserFriction(), [], config)
        second = generate_schedule(sample_exams, sample_chapters, UserFriction(), [], config)

        assert first.to_records() == second.to_records()
