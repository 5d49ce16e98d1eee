"""
Unit tests for the friction model.
"""

import pytest

from mindvault.study.friction import friction_notes, update_friction
from mindvault.study.models import TaskOutcome, UserFriction


class TestUpdateFriction:
    """Folding task outcomes into friction."""

    def test_empty_outcomes_is_noop(self):
        friction = UserFriction(avg_overrun=0.3, quiz_error_rate=0.2, revision_frequency=0.1)
        assert update_friction(friction, []) == friction

    def test_overrun_raises_avg_overrun(self):
        outcomes = [TaskOutcome(predicted_hours=1.0, actual_hours=2.0, revision_done=True)]
        updated = update_friction(UserFriction(), outcomes)

        assert updated.avg_overrun == pytest.approx(0.08)
        assert updated.revision_frequency == pytest.approx(0.03)

    def test_small_overrun_ignored(self):
        # 1.0 -> 1.2 is not more than 20% over
        outcomes = [TaskOutcome(predicted_hours=1.0, actual_hours=1.2, revision_done=True)]
        assert update_friction(UserFriction(), outcomes).avg_overrun == 0.0

    def test_underrun_lowers_avg_overrun(self):
        friction = UserFriction(avg_overrun=0.5)
        outcomes = [TaskOutcome(predicted_hours=2.0, actual_hours=1.0, revision_done=True)]
        assert update_friction(friction, outcomes).avg_overrun == pytest.approx(0.45)

    def test_postponed_counts_as_overrun(self):
        outcomes = [TaskOutcome(postponed=True), TaskOutcome()]
        assert update_friction(UserFriction(), outcomes).avg_overrun == pytest.approx(0.025)

    def test_quiz_error_moving_average(self):
        outcomes = [
            TaskOutcome(quiz_error_rate=0.5),
            TaskOutcome(quiz_error_rate=None),
            TaskOutcome(quiz_error_rate=0.3),
        ]
        updated = update_friction(UserFriction(quiz_error_rate=0.2), outcomes)
        assert updated.quiz_error_rate == pytest.approx(0.8 * 0.2 + 0.2 * 0.4)

    def test_missed_revisions_lower_frequency(self):
        friction = UserFriction(revision_frequency=0.5)
        outcomes = [TaskOutcome(revision_done=False), TaskOutcome(revision_done=True, revision_early=True)]
        updated = update_friction(friction, outcomes)
        assert updated.revision_frequency == pytest.approx(0.5 + 0.03 + 0.015 - 0.01)

    def test_stays_in_unit_interval(self):
        friction = UserFriction(avg_overrun=0.99, quiz_error_rate=1.0, revision_frequency=0.0)
        outcomes = [TaskOutcome(predicted_hours=1.0, actual_hours=5.0, postponed=True, quiz_error_rate=1.0)] * 10
        updated = update_friction(friction, outcomes)

        for value in (updated.avg_overrun, updated.quiz_error_rate, updated.revision_frequency):
            assert 0.0 <= value <= 1.0

    def test_input_not_modified(self):
        friction = UserFriction(avg_overrun=0.1)
        update_friction(friction, [TaskOutcome(predicted_hours=1.0, actual_hours=3.0)])
        assert friction.avg_overrun == 0.1


class TestFrictionNotes:
    def test_no_notes_for_low_friction(self):
        assert friction_notes(UserFriction()) == []

    def test_thresholds(self):
        notes = friction_notes(UserFriction(avg_overrun=0.2, quiz_error_rate=0.25))
        assert notes == [
            "High overrun: keep buffers, reduce context switching",
            "High quiz error: add more worked examples",
        ]
