"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import pytest
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from mindvault.core.modes import PlannerMode
from mindvault.study.models import Chapter, Exam, SchedulerConfig, UserFriction


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (local SQLite store)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def sample_chapters():
    """Two subjects, three chapters."""
    return [
        Chapter(chapter_id="phy1", subject="Physics", estimated_hours=3.0,
                default_difficulty=0.6, exam_weight=1.0, question_density=0.8, note_id="n-phy1"),
        Chapter(chapter_id="phy2", subject="Physics", estimated_hours=2.0,
                default_difficulty=0.4, exam_weight=1.2, question_density=0.5),
        Chapter(chapter_id="chem1", subject="Chemistry", estimated_hours=4.0,
                default_difficulty=0.7, exam_weight=1.0, question_density=0.6),
    ]


@pytest.fixture
def sample_exams():
    """Exams two and three weeks after 2025-01-06."""
    return [
        Exam(subject="Physics", date="2025-01-20", weight=1.0),
        Exam(subject="Chemistry", date="2025-01-27", weight=1.5),
    ]


@pytest.fixture
def zero_friction():
    return UserFriction()


@pytest.fixture
def sample_config():
    """Assisted mode, fixed 'today', one-hour slots in a 09:00-13:00 window."""
    return SchedulerConfig(
        mode=PlannerMode.ASSISTED,
        today="2025-01-06",
        daily_max_hours=3.0,
        slot_minutes=60,
        mini_slot_minutes=15,
        day_start="09:00",
        day_end="13:00",
        seed=42,
    )


@pytest.fixture
def sample_profile(sample_chapters, sample_exams):
    """Profile JSON as read by the CLI."""
    return {
        "chapters": [c.to_dict() for c in sample_chapters],
        "exams": [e.to_dict() for e in sample_exams],
        "config": {
            "today": "2025-01-06",
            "slot_minutes": 60,
            "day_start": "09:00",
            "day_end": "12:00",
            "daily_max_hours": 3,
        },
    }
