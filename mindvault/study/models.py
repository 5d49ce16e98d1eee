"""
Data model for the adaptive study scheduler.

Every record that crosses the boundary has a `from_dict` that coerces
malformed numbers and dates to safe defaults (never raising) and a `to_dict`
that produces the JSON wire shape.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from mindvault.core.modes import DateDampener, PlannerMode
from mindvault.core.utils import safe_float, safe_int


# Hard ceiling on syllabus size; bounds per-day scoring cost
MAX_CHAPTERS = 500


def _opt_str(value: Any) -> str | None:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


# =============================================================================
# Inputs
# =============================================================================


@dataclass
class Chapter:
    """A syllabus unit."""

    chapter_id: str
    subject: str
    estimated_hours: float = 1.0
    default_difficulty: float = 0.5  # 0-1
    exam_weight: float = 1.0
    question_density: float = 0.5  # 0-1
    note_id: str | None = None  # Link to the source note

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Chapter:
        return cls(
            chapter_id=str(data.get("chapter_id", "")).strip(),
            subject=str(data.get("subject", "")).strip(),
            estimated_hours=safe_float(data.get("estimated_hours"), 1.0, 0.0),
            default_difficulty=safe_float(data.get("default_difficulty"), 0.5, 0.0, 1.0),
            exam_weight=safe_float(data.get("exam_weight"), 1.0, 0.0, 5.0),
            question_density=safe_float(data.get("question_density"), 0.5, 0.0, 1.0),
            note_id=_opt_str(data.get("note_id", data.get("noteId"))),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Exam:
    """An exam for one subject."""

    subject: str
    date: str  # ISO date
    weight: float = 1.0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Exam:
        return cls(
            subject=str(data.get("subject", "")).strip(),
            date=str(data.get("date", "")).strip(),
            weight=safe_float(data.get("weight"), 1.0, 0.0, 5.0),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class UserFriction:
    """Behavioral friction profile; every scalar lives in [0, 1]."""

    avg_overrun: float = 0.0
    quiz_error_rate: float = 0.0
    revision_frequency: float = 0.0

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> UserFriction:
        data = data or {}
        return cls(
            avg_overrun=safe_float(data.get("avg_overrun"), 0.0, 0.0, 1.0),
            quiz_error_rate=safe_float(data.get("quiz_error_rate"), 0.0, 0.0, 1.0),
            revision_frequency=safe_float(data.get("revision_frequency"), 0.0, 0.0, 1.0),
        )

    def normalized(self) -> UserFriction:
        return UserFriction.from_dict(asdict(self))

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class TaskOutcome:
    """Observed result of one planned task, fed into the friction model."""

    predicted_hours: float = 0.0
    actual_hours: float = 0.0
    postponed: bool = False
    quiz_error_rate: float | None = None
    revision_done: bool = False
    revision_early: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TaskOutcome:
        quiz = data.get("quiz_error_rate")
        return cls(
            predicted_hours=safe_float(data.get("predicted_hours"), 0.0, 0.0),
            actual_hours=safe_float(data.get("actual_hours"), 0.0, 0.0),
            postponed=bool(data.get("postponed", False)),
            quiz_error_rate=None if quiz is None else safe_float(quiz, 0.0, 0.0, 1.0),
            revision_done=bool(data.get("revision_done", False)),
            revision_early=bool(data.get("revision_early", False)),
        )


@dataclass
class TimeBlocker:
    """Calendar unavailability on one specific day."""

    date: str  # ISO date
    start: str  # HH:MM
    end: str  # HH:MM
    reason: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TimeBlocker:
        return cls(
            date=str(data.get("date", "")).strip(),
            start=str(data.get("start", "")).strip(),
            end=str(data.get("end", "")).strip(),
            reason=str(data.get("reason") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class SchedulerConfig:
    """Options for one scheduler run."""

    mode: PlannerMode = PlannerMode.BASE
    daily_max_hours: float = 4.0
    min_reviews: int = 20
    slot_minutes: int = 30
    mini_slot_minutes: int = 15
    day_start: str = "06:00"
    day_end: str = "22:00"
    target_completion_date: str | None = None  # fallback deadline; today + 90 when unset
    date_dampener: DateDampener = DateDampener.LOG
    focus_weight: float = 0.7
    today: str | None = None  # simulated "today"; defaults to the current date
    history: dict[str, str] = field(default_factory=dict)  # chapter_id -> last studied

    # Practice paper injection
    practice_papers: bool = True
    practice_paper_threshold: float = 0.9
    practice_paper_probability: float = 0.3
    practice_paper_priority: float = 2.0
    practice_paper_hours: float = 1.5
    seed: int | None = None

    # Limits
    max_chapters: int = MAX_CHAPTERS  # lowering only; never above MAX_CHAPTERS
    risk_chapter_limit: int = 50
    max_horizon_days: int = 366

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> SchedulerConfig:
        data = data or {}
        slot_minutes = safe_int(data.get("slot_minutes"), 30, 15, 120)
        history = data.get("history") or {}
        seed = data.get("seed")
        return cls(
            mode=PlannerMode.coerce(data.get("mode", PlannerMode.BASE)),
            daily_max_hours=safe_float(data.get("daily_max_hours"), 4.0, 0.0, 24.0),
            min_reviews=safe_int(data.get("min_reviews"), 20, 0, 500),
            slot_minutes=slot_minutes,
            mini_slot_minutes=safe_int(data.get("mini_slot_minutes"), 15, 10, slot_minutes),
            day_start=str(data.get("day_start") or "06:00"),
            day_end=str(data.get("day_end") or "22:00"),
            target_completion_date=_opt_str(data.get("target_completion_date")),
            date_dampener=DateDampener.coerce(data.get("date_dampener", DateDampener.LOG)),
            focus_weight=safe_float(data.get("focus_weight"), 0.7, 0.0, 5.0),
            today=_opt_str(data.get("today")),
            history={str(k): str(v) for k, v in history.items()} if isinstance(history, dict) else {},
            practice_papers=bool(data.get("practice_papers", True)),
            practice_paper_threshold=safe_float(data.get("practice_paper_threshold"), 0.9, 0.0, 1.0),
            practice_paper_probability=safe_float(data.get("practice_paper_probability"), 0.3, 0.0, 1.0),
            practice_paper_priority=safe_float(data.get("practice_paper_priority"), 2.0, 0.0),
            practice_paper_hours=safe_float(data.get("practice_paper_hours"), 1.5, 0.0, 24.0),
            seed=None if seed is None else safe_int(seed, 0),
            max_chapters=safe_int(data.get("max_chapters"), MAX_CHAPTERS, 1, MAX_CHAPTERS),
            risk_chapter_limit=safe_int(data.get("risk_chapter_limit"), 50, 0),
            max_horizon_days=safe_int(data.get("max_horizon_days"), 366, 0),
        )

    def normalized(self) -> SchedulerConfig:
        """Re-run coercion over fields that may have been set directly."""
        return SchedulerConfig.from_dict(self.to_dict())

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["mode"] = PlannerMode.coerce(self.mode).value
        data["date_dampener"] = DateDampener.coerce(self.date_dampener).value
        return data


# =============================================================================
# Outputs
# =============================================================================


class SlotType(str, Enum):
    """Activity type of a schedule slot."""

    STUDY = "study"
    REVIEW = "review"
    MINI_REVIEW = "mini_review"
    BREAK = "break"
    BUFFER = "buffer"


@dataclass
class ScheduleSlot:
    """One time-boxed activity within a day."""

    start: str  # HH:MM
    end: str  # HH:MM
    type: SlotType
    reason: str
    chapter_id: str | None = None
    subject: str | None = None
    note_id: str | None = None
    cards: int | None = None
    completed: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScheduleSlot:
        cards = data.get("cards")
        return cls(
            start=str(data.get("start", "")),
            end=str(data.get("end", "")),
            type=SlotType(data.get("type", SlotType.BUFFER.value)),
            reason=str(data.get("reason") or ""),
            chapter_id=data.get("chapter_id"),
            subject=data.get("subject"),
            note_id=data.get("note_id"),
            cards=None if cards is None else safe_int(cards, 0),
            completed=bool(data.get("completed", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "start": self.start,
            "end": self.end,
            "chapter_id": self.chapter_id,
            "subject": self.subject,
            "note_id": self.note_id,
            "type": self.type.value,
            "cards": self.cards,
            "reason": self.reason,
            "completed": self.completed,
        }


@dataclass
class ScheduleDay:
    """The plan for one calendar day."""

    date: str
    total_hours: float = 0.0
    slots: list[ScheduleSlot] = field(default_factory=list)
    friction_notes: list[str] = field(default_factory=list)
    ai_commentary: str | None = None
    warning: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScheduleDay:
        return cls(
            date=str(data.get("date", "")),
            total_hours=safe_float(data.get("total_hours"), 0.0, 0.0),
            slots=[ScheduleSlot.from_dict(s) for s in data.get("slots") or []],
            friction_notes=[str(n) for n in data.get("friction_notes") or []],
            ai_commentary=data.get("ai_commentary"),
            warning=data.get("warning"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "total_hours": self.total_hours,
            "slots": [s.to_dict() for s in self.slots],
            "friction_notes": list(self.friction_notes),
            "ai_commentary": self.ai_commentary,
            "warning": self.warning,
        }


@dataclass
class ScheduleSummary:
    """Run-level rollup returned after the last day."""

    today: str
    total_coverage: float = 0.0
    risk_chapters: list[str] = field(default_factory=list)
    remaining_hours_total: float = 0.0
    mode: str = PlannerMode.BASE.value
    history_suggestions: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScheduleSummary:
        return cls(
            today=str(data.get("today", "")),
            total_coverage=safe_float(data.get("total_coverage"), 0.0, 0.0, 1.0),
            risk_chapters=[str(c) for c in data.get("risk_chapters") or []],
            remaining_hours_total=safe_float(data.get("remaining_hours_total"), 0.0, 0.0),
            mode=str(data.get("mode", PlannerMode.BASE.value)),
            history_suggestions={
                str(k): str(v) for k, v in (data.get("history_suggestions") or {}).items()
            },
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ScheduleResult:
    """Ordered schedule days plus the trailing summary."""

    days: list[ScheduleDay]
    summary: ScheduleSummary

    def to_records(self) -> list[dict[str, Any]]:
        """Wire shape: day records followed by one {"summary": ...} record."""
        records: list[dict[str, Any]] = [d.to_dict() for d in self.days]
        records.append({"summary": self.summary.to_dict()})
        return records

    @classmethod
    def from_records(cls, records: list[dict[str, Any]]) -> ScheduleResult:
        days: list[ScheduleDay] = []
        summary: ScheduleSummary | None = None
        for record in records:
            if "summary" in record:
                summary = ScheduleSummary.from_dict(record["summary"])
            else:
                days.append(ScheduleDay.from_dict(record))
        if summary is None:
            summary = ScheduleSummary(today=days[0].date if days else "")
        return cls(days=days, summary=summary)

    def get_day(self, iso_date: str) -> ScheduleDay | None:
        for day in self.days:
            if day.date == iso_date:
                return day
        return None
