"""
Friction Model.

Maintains the three behavioral scalars (time overrun, quiz error rate,
revision frequency) that carry past performance into future personal
difficulty. Updates are small and slow-moving; every scalar stays in [0, 1].
"""

from __future__ import annotations

from loguru import logger

from mindvault.core.utils import clamp, safe_float
from mindvault.study.models import TaskOutcome, UserFriction

OVERRUN_RATIO = 1.2
UNDERRUN_RATIO = 0.8
MIN_GAP_HOURS = 0.25

OVERRUN_NOTE_THRESHOLD = 0.2
QUIZ_ERROR_NOTE_THRESHOLD = 0.25


def update_friction(friction: UserFriction, outcomes: list[TaskOutcome]) -> UserFriction:
    """
    Fold a batch of task outcomes into the friction profile.

    Args:
        friction: Current profile (not modified)
        outcomes: Observed outcomes since the last update

    Returns:
        New UserFriction
    """
    current = friction.normalized()
    if not outcomes:
        return current

    overrun_hits = underrun_hits = postponed_hits = 0
    revisions_done = revisions_early = 0
    quiz_samples: list[float] = []

    for outcome in outcomes:
        predicted = safe_float(outcome.predicted_hours, 0.0, 0.0)
        actual = safe_float(outcome.actual_hours, 0.0, 0.0)

        if predicted > 1e-6:
            if actual > predicted * OVERRUN_RATIO and actual - predicted > MIN_GAP_HOURS:
                overrun_hits += 1
            elif actual < predicted * UNDERRUN_RATIO and predicted - actual > MIN_GAP_HOURS:
                underrun_hits += 1

        if outcome.postponed:
            postponed_hits += 1
        if outcome.quiz_error_rate is not None:
            quiz_samples.append(safe_float(outcome.quiz_error_rate, 0.0, 0.0, 1.0))
        if outcome.revision_done:
            revisions_done += 1
        if outcome.revision_early:
            revisions_early += 1

    n = len(outcomes)
    revisions_missed = n - revisions_done

    avg_overrun = current.avg_overrun
    avg_overrun += 0.08 * overrun_hits / n
    avg_overrun -= 0.05 * underrun_hits / n
    avg_overrun += 0.05 * postponed_hits / n

    quiz_error = current.quiz_error_rate
    if quiz_samples:
        observed = sum(quiz_samples) / len(quiz_samples)
        quiz_error = 0.8 * quiz_error + 0.2 * observed

    revision = current.revision_frequency
    revision += 0.06 * revisions_early / n
    revision += 0.03 * revisions_done / n
    revision -= 0.02 * revisions_missed / n

    updated = UserFriction(
        avg_overrun=clamp(avg_overrun, 0.0, 1.0),
        quiz_error_rate=clamp(quiz_error, 0.0, 1.0),
        revision_frequency=clamp(revision, 0.0, 1.0),
    )
    logger.info(
        f"Friction updated from {n} outcomes: overrun {current.avg_overrun:.3f}->{updated.avg_overrun:.3f}, "
        f"quiz {current.quiz_error_rate:.3f}->{updated.quiz_error_rate:.3f}, "
        f"revision {current.revision_frequency:.3f}->{updated.revision_frequency:.3f}"
    )
    return updated


def friction_notes(friction: UserFriction) -> list[str]:
    """Advisory notes for a day, based on friction thresholds."""
    notes = []
    if safe_float(friction.avg_overrun, 0.0, 0.0, 1.0) >= OVERRUN_NOTE_THRESHOLD:
        notes.append("High overrun: keep buffers, reduce context switching")
    if safe_float(friction.quiz_error_rate, 0.0, 0.0, 1.0) >= QUIZ_ERROR_NOTE_THRESHOLD:
        notes.append("High quiz error: add more worked examples")
    return notes
