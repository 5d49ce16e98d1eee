"""
Unit tests for JSON and iCalendar export.
"""

import json
import random
from datetime import datetime

import pytest

from mindvault.delivery.export import schedule_from_json, schedule_to_ics, schedule_to_json
from mindvault.study.models import (
    ScheduleDay,
    ScheduleResult,
    ScheduleSlot,
    ScheduleSummary,
    SlotType,
    UserFriction,
)
from mindvault.study.scheduler import generate_schedule


@pytest.fixture
def small_result():
    day = ScheduleDay(
        date="2025-01-06",
        total_hours=1.75,
        slots=[
            ScheduleSlot("09:00", "10:00", SlotType.STUDY, "Interleaved; x", "phy1", "Physics", "n-1"),
            ScheduleSlot("10:00", "11:00", SlotType.BUFFER, "Buffer (no alloc remaining)"),
            ScheduleSlot("11:00", "11:30", SlotType.BREAK, "Dead-air gap (base mode)"),
            ScheduleSlot("11:30", "11:45", SlotType.MINI_REVIEW, "Mini review; a, b", "phy1", "Physics", cards=12),
        ],
        friction_notes=["High quiz error: add more worked examples"],
    )
    summary = ScheduleSummary(today="2025-01-06", total_coverage=0.5, risk_chapters=["chem1"], mode="base")
    return ScheduleResult(days=[day], summary=summary)


class TestJsonExport:
    """JSON wire format."""

    def test_trailing_summary_record(self, small_result):
        records = json.loads(schedule_to_json(small_result))

        assert len(records) == 2
        assert records[0]["date"] == "2025-01-06"
        assert records[0]["slots"][0]["type"] == "study"
        assert records[-1]["summary"]["risk_chapters"] == ["chem1"]

    def test_roundtrip_generated_schedule(self, sample_chapters, sample_exams, sample_config):
        result = generate_schedule(sample_exams, sample_chapters, UserFriction(), [], sample_config)
        parsed = schedule_from_json(schedule_to_json(result))

        assert parsed.to_records() == result.to_records()

    def test_rejects_non_list(self):
        with pytest.raises(ValueError):
            schedule_from_json('{"date": "2025-01-06"}')


class TestIcsExport:
    """iCalendar export."""

    def test_structure_and_line_endings(self, small_result):
        ics = schedule_to_ics(small_result.days, rng=random.Random(1), now=datetime(2025, 1, 1))

        assert ics.startswith("BEGIN:VCALENDAR\r\n")
        assert ics.endswith("END:VCALENDAR\r\n")
        assert "\n" not in ics.replace("\r\n", "")

    def test_skips_breaks_and_subjectless_slots(self, small_result):
        ics = schedule_to_ics(small_result.days, rng=random.Random(1))

        assert ics.count("BEGIN:VEVENT") == 2
        assert "DTSTART:20250106T090000" in ics
        assert "DTEND:20250106T114500" in ics
        assert "SUMMARY:Study: Physics phy1" in ics
        assert "SUMMARY:Mini review: Physics phy1" in ics

    def test_escapes_text(self, small_result):
        ics = schedule_to_ics(small_result.days, rng=random.Random(1))
        assert "DESCRIPTION:Mini review\\; a\\, b" in ics

    def test_seeded_uids_are_stable(self, small_result):
        now = datetime(2025, 1, 1, 8, 0)
        first = schedule_to_ics(small_result.days, rng=random.Random(7), now=now)
        second = schedule_to_ics(small_result.days, rng=random.Random(7), now=now)

        assert first == second
        assert "DTSTAMP:20250101T080000" in first

    def test_uids_differ_between_events(self, small_result):
        ics = schedule_to_ics(small_result.days, rng=random.Random(3))
        uids = [line for line in ics.split("\r\n") if line.startswith("UID:")]
        assert len(set(uids)) == len(uids)
