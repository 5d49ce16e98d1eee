"""
Schedule exporters.

- JSON: the day records followed by one trailing {"summary": ...} record;
  lossless and re-parseable with `schedule_from_json`.
- iCalendar: one VEVENT per scheduled, non-break slot that has a subject.
  UIDs carry a random suffix, so two exports of the same schedule differ
  unless a seeded random source is passed in.
"""

from __future__ import annotations

import json
import random
from datetime import datetime

from mindvault.study.models import ScheduleDay, ScheduleResult, SlotType

PRODID = "-//MindVault//Study Planner//EN"


def schedule_to_json(result: ScheduleResult, indent: int = 2) -> str:
    return json.dumps(result.to_records(), indent=indent)


def schedule_from_json(text: str) -> ScheduleResult:
    records = json.loads(text)
    if not isinstance(records, list):
        raise ValueError("Schedule JSON must be a list of day records plus a summary")
    return ScheduleResult.from_records(records)


def _escape(value: str) -> str:
    """Escape a TEXT value (RFC 5545 section 3.3.11)."""
    return (
        value.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\r\n", "\\n")
        .replace("\n", "\\n")
    )


def _ics_time(hhmm: str) -> str:
    return hhmm.replace(":", "") + "00"


def schedule_to_ics(
    days: list[ScheduleDay],
    calendar_name: str = "Study Planner",
    rng: random.Random | None = None,
    now: datetime | None = None,
) -> str:
    """
    Render schedule days as an iCalendar document.

    Args:
        days: Schedule days to export
        calendar_name: X-WR-CALNAME value
        rng: Random source for UID suffixes (fresh one if None)
        now: DTSTAMP value (current time if None)

    Returns:
        The calendar text with CRLF line endings
    """
    rng = rng or random.Random()
    stamp = (now or datetime.now()).strftime("%Y%m%dT%H%M%S")

    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{PRODID}",
        "CALSCALE:GREGORIAN",
        f"X-WR-CALNAME:{_escape(calendar_name)}",
    ]

    for day in days:
        date_str = day.date.replace("-", "")
        for slot in day.slots:
            if slot.type == SlotType.BREAK or not slot.subject:
                continue

            start = _ics_time(slot.start)
            end = _ics_time(slot.end)
            label = slot.type.value.replace("_", " ").capitalize()
            summary = f"{label}: {slot.subject} {slot.chapter_id or ''}".strip()
            uid = f"{date_str}-{start}-{rng.getrandbits(48):012x}"

            lines.extend([
                "BEGIN:VEVENT",
                f"UID:{uid}",
                f"DTSTAMP:{stamp}",
                f"DTSTART:{date_str}T{start}",
                f"DTEND:{date_str}T{end}",
                f"SUMMARY:{_escape(summary)}",
                f"DESCRIPTION:{_escape(slot.reason)}",
                "END:VEVENT",
            ])

    lines.append("END:VCALENDAR")
    return "\r\n".join(lines) + "\r\n"
