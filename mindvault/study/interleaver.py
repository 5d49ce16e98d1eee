"""
Adaptive Interleaver for the Study Scheduler.

Implements the per-day allocation and interleaving algorithm:
- Minute budgets proportional to each candidate's share of total priority,
  bounded by remaining work and a per-chapter density ceiling
- Starvation guard: the top five candidates always get at least one slot
- Slot filling that alternates chapters and subjects to avoid monotony

Pick order for a main slot (highest priority within each tier):
1. Different chapter AND different subject than the previous pick
2. Different chapter
3. Anything with allocation left
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from loguru import logger

from mindvault.core.modes import PlannerMode
from mindvault.core.utils import minutes_to_time, round_half_up, safe_float, safe_int
from mindvault.study.models import Chapter, Exam, ScheduleSlot, SlotType
from mindvault.study.priority import compute_review_cards
from mindvault.study.time_slots import TimeSlot


@dataclass
class Candidate:
    """A chapter's priority and allocation counter for one day."""
    chapter: Chapter
    exam: Optional[Exam]
    priority: float
    reason: str
    personal_difficulty: float
    remaining_hours: float
    alloc_minutes: int = 0
    synthetic: bool = False  # practice paper, not part of the chapter ledger

    @property
    def chapter_id(self) -> str:
        return self.chapter.chapter_id

    @property
    def subject(self) -> str:
        return self.chapter.subject


@dataclass
class InterleaveConfig:
    """Configuration for allocation and interleaving."""
    guaranteed_candidates: int = 5
    remaining_epsilon: float = 1e-6


@dataclass
class DayFill:
    """Result of filling one day's slots."""
    slots: list[ScheduleSlot] = field(default_factory=list)
    studied_today: list[str] = field(default_factory=list)
    planned_hours: float = 0.0


class AdaptiveInterleaver:
    """
    Allocates a day's study minutes across candidates and fills slots.

    The algorithm:
    1. Sort candidates by priority
    2. Give each a proportional minute budget, bounded by remaining work
       and a density-based ceiling
    3. Guarantee a slot to the top candidates that would otherwise starve
    4. Walk the slots chronologically, interleaving chapters and subjects
    """

    def __init__(self, config: Optional[InterleaveConfig] = None):
        """
        Initialize interleaver with configuration.

        Args:
            config: InterleaveConfig or None for defaults
        """
        self.config = config or InterleaveConfig()

    def allocate(
        self,
        candidates: list[Candidate],
        cap_minutes: int,
        slot_minutes: int,
        has_main_slots: bool,
    ) -> list[Candidate]:
        """
        Assign `alloc_minutes` to every candidate.

        Args:
            candidates: Scored candidates for the day
            cap_minutes: Daily cap in minutes
            slot_minutes: Full slot size
            has_main_slots: Whether the day has at least one full-size slot

        Returns:
            Candidates sorted by priority (highest first), allocations set
        """
        ranked = sorted(candidates, key=lambda c: c.priority, reverse=True)
        total_priority = sum(c.priority for c in ranked) or 1.0

        for c in ranked:
            share_minutes = round_half_up(c.priority / total_priority * cap_minutes)
            remaining_minutes = round_half_up(c.remaining_hours * 60)
            ceiling_minutes = max(
                round_half_up(
                    safe_float(c.chapter.estimated_hours, 1.0, 0.0)
                    * safe_float(c.chapter.question_density, 0.5, 0.0, 1.0)
                    * 60
                ),
                slot_minutes,
            )
            c.alloc_minutes = max(0, min(share_minutes, remaining_minutes, ceiling_minutes))

        if has_main_slots:
            for c in ranked[: self.config.guaranteed_candidates]:
                if c.alloc_minutes <= 0 and c.remaining_hours > self.config.remaining_epsilon:
                    c.alloc_minutes = slot_minutes

        logger.debug(
            "Allocated "
            + ", ".join(f"{c.chapter_id}={c.alloc_minutes}m" for c in ranked[:10])
            + (" ..." if len(ranked) > 10 else "")
        )
        return ranked

    @staticmethod
    def pick_next_candidate(
        candidates: list[Candidate],
        last_subject: Optional[str],
        last_chapter_id: Optional[str],
    ) -> Optional[Candidate]:
        """
        Pick the candidate for the next main slot.

        Args:
            candidates: Candidates with allocations
            last_subject: Subject of the previous main-slot pick
            last_chapter_id: Chapter of the previous main-slot pick

        Returns:
            The best candidate with allocation left, or None
        """
        def best(accept) -> Optional[Candidate]:
            pick = None
            for c in candidates:
                if c.alloc_minutes <= 0 or not accept(c):
                    continue
                if pick is None or c.priority > pick.priority:
                    pick = c
            return pick

        tiers = (
            lambda c: c.chapter_id != last_chapter_id
            and (last_subject is None or c.subject != last_subject),
            lambda c: c.chapter_id != last_chapter_id,
            lambda c: True,
        )
        for accept in tiers:
            pick = best(accept)
            if pick is not None:
                return pick
        return None

    def fill_slots(
        self,
        slots: list[TimeSlot],
        candidates: list[Candidate],
        remaining_hours: dict[str, float],
        mode: PlannerMode,
        min_reviews: int,
        slot_minutes: int,
    ) -> DayFill:
        """
        Fill the day's usable slots chronologically.

        `remaining_hours` is the run ledger and is updated in place for every
        study pick of a real chapter.

        Args:
            slots: Usable slots for the day
            candidates: Allocated candidates, highest priority first
            remaining_hours: Chapter ledger (chapter_id -> hours)
            mode: Planner mode
            min_reviews: Base card count for reviews
            slot_minutes: Full slot size

        Returns:
            DayFill with schedule slots, chapters studied and hours planned
        """
        fill = DayFill()
        last_subject: Optional[str] = None
        last_chapter: Optional[str] = None
        top = candidates[0] if candidates else None

        for ts in slots:
            if ts.is_mini:
                fill.slots.append(self._mini_slot(ts, candidates, fill.studied_today, mode, min_reviews, slot_minutes))
                continue

            pick = self.pick_next_candidate(candidates, last_subject, last_chapter)
            if pick is None:
                if mode.fills_reviews and top is not None:
                    fill.slots.append(self._slot(
                        ts,
                        SlotType.REVIEW,
                        f"Fallback review; {top.reason}",
                        top,
                        compute_review_cards(top.personal_difficulty, min_reviews, ts.duration, slot_minutes),
                    ))
                else:
                    fill.slots.append(self._slot(ts, SlotType.BUFFER, "Buffer (no alloc remaining)"))
                continue

            hours = ts.duration / 60
            pick.alloc_minutes = max(0, pick.alloc_minutes - ts.duration)
            pick.remaining_hours = max(0.0, pick.remaining_hours - hours)
            if not pick.synthetic:
                before = remaining_hours.get(pick.chapter_id, 0.0)
                after = max(0.0, before - hours)
                remaining_hours[pick.chapter_id] = after
                fill.planned_hours += before - after
                if pick.chapter_id not in fill.studied_today:
                    fill.studied_today.append(pick.chapter_id)

            fill.slots.append(self._slot(ts, SlotType.STUDY, f"Interleaved; {pick.reason}", pick))
            last_subject = pick.subject
            last_chapter = pick.chapter_id

        return fill

    def review_only_slots(
        self,
        slots: list[TimeSlot],
        mode: PlannerMode,
        min_reviews: int,
        slot_minutes: int,
    ) -> list[ScheduleSlot]:
        """Generic reviews for a day with nothing left to study (none in base mode)."""
        if not mode.fills_reviews:
            return []
        out = []
        for ts in slots:
            cards = safe_int(min_reviews * (ts.duration / max(slot_minutes, 1)), 10, 6, 50)
            out.append(self._slot(
                ts,
                SlotType.MINI_REVIEW if ts.is_mini else SlotType.REVIEW,
                "Light review (no remaining chapters)",
                cards=cards,
            ))
        return out

    def _mini_slot(
        self,
        ts: TimeSlot,
        candidates: list[Candidate],
        studied_today: list[str],
        mode: PlannerMode,
        min_reviews: int,
        slot_minutes: int,
    ) -> ScheduleSlot:
        if not mode.fills_reviews:
            return self._slot(ts, SlotType.BREAK, "Dead-air gap (base mode)")

        target = None
        if studied_today:
            target = next((c for c in candidates if c.chapter_id == studied_today[-1]), None)
        if target is None:
            target = next((c for c in candidates if not c.synthetic), candidates[0])

        cards = compute_review_cards(target.personal_difficulty, min_reviews, ts.duration, slot_minutes)
        return self._slot(ts, SlotType.MINI_REVIEW, f"Mini review; {target.reason}", target, cards)

    @staticmethod
    def _slot(
        ts: TimeSlot,
        slot_type: SlotType,
        reason: str,
        candidate: Optional[Candidate] = None,
        cards: Optional[int] = None,
    ) -> ScheduleSlot:
        return ScheduleSlot(
            start=minutes_to_time(ts.start),
            end=minutes_to_time(ts.end),
            type=slot_type,
            reason=reason,
            chapter_id=candidate.chapter_id if candidate else None,
            subject=candidate.subject if candidate else None,
            note_id=candidate.chapter.note_id if candidate else None,
            cards=cards,
        )
