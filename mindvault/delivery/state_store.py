"""
SQLite Profile Store for the planner.

Provides portable persistence for the caller-owned state that the scheduler
core never touches:
- Friction profile (single row)
- Study history (chapter -> last studied date), merged from run suggestions
- Calendar blockers
- The last generated schedule, with client-set completion flags

Database location: ~/.mindvault/planner.db

Each update runs in one transaction, but concurrent processes writing the
same profile are still last-writer-wins; callers serialize runs themselves.
"""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime
from pathlib import Path

from loguru import logger

from mindvault.study.models import ScheduleResult, TimeBlocker, UserFriction


class ProfileStore:
    """
    SQLite-backed persistence for one learner profile.

    Handles:
    - Friction scalars read and written around every friction update
    - History suggestions persisted after each scheduler run
    - Blocker CRUD
    - Schedule snapshot and slot completion
    """

    DEFAULT_DB_PATH = Path.home() / ".mindvault" / "planner.db"

    def __init__(self, db_path: Path | None = None):
        """
        Initialize the profile store.

        Args:
            db_path: Custom database path (defaults to ~/.mindvault/planner.db)
        """
        self.db_path = db_path or self.DEFAULT_DB_PATH
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn: sqlite3.Connection | None = None
        self._init_schema()

        logger.debug(f"ProfileStore initialized at {self.db_path}")

    @property
    def conn(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._conn is None:
            self._conn = sqlite3.connect(str(self.db_path))
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> ProfileStore:
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def _init_schema(self) -> None:
        """Initialize database schema."""
        with self.conn:
            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS friction (
                    id INTEGER PRIMARY KEY CHECK (id = 1),
                    avg_overrun REAL DEFAULT 0.0,
                    quiz_error_rate REAL DEFAULT 0.0,
                    revision_frequency REAL DEFAULT 0.0,
                    updated_at TIMESTAMP
                )
            """)

            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS study_history (
                    chapter_id TEXT PRIMARY KEY,
                    last_studied TEXT NOT NULL
                )
            """)

            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS blockers (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    date TEXT NOT NULL,
                    start TEXT NOT NULL,
                    "end" TEXT NOT NULL,
                    reason TEXT DEFAULT ''
                )
            """)

            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS schedule (
                    id INTEGER PRIMARY KEY CHECK (id = 1),
                    payload TEXT NOT NULL,
                    generated_at TIMESTAMP NOT NULL
                )
            """)

            self.conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_blockers_date
                ON blockers(date)
            """)

    # =========================================================================
    # Friction
    # =========================================================================

    def get_friction(self) -> UserFriction:
        """Stored friction profile (all zeros if never saved)."""
        row = self.conn.execute(
            "SELECT avg_overrun, quiz_error_rate, revision_frequency FROM friction WHERE id = 1"
        ).fetchone()
        if row is None:
            return UserFriction()
        return UserFriction.from_dict(dict(row))

    def save_friction(self, friction: UserFriction) -> None:
        f = friction.normalized()
        with self.conn:
            self.conn.execute(
                """
                INSERT INTO friction (id, avg_overrun, quiz_error_rate, revision_frequency, updated_at)
                VALUES (1, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    avg_overrun = excluded.avg_overrun,
                    quiz_error_rate = excluded.quiz_error_rate,
                    revision_frequency = excluded.revision_frequency,
                    updated_at = excluded.updated_at
            """,
                (f.avg_overrun, f.quiz_error_rate, f.revision_frequency, datetime.now().isoformat()),
            )

    # =========================================================================
    # History
    # =========================================================================

    def get_history(self) -> dict[str, str]:
        rows = self.conn.execute("SELECT chapter_id, last_studied FROM study_history").fetchall()
        return {row["chapter_id"]: row["last_studied"] for row in rows}

    def merge_history(self, suggestions: dict[str, str]) -> int:
        """
        Persist a run's history suggestions.

        Returns:
            Number of chapters written
        """
        if not suggestions:
            return 0
        with self.conn:
            self.conn.executemany(
                """
                INSERT INTO study_history (chapter_id, last_studied) VALUES (?, ?)
                ON CONFLICT(chapter_id) DO UPDATE SET last_studied = excluded.last_studied
            """,
                list(suggestions.items()),
            )
        return len(suggestions)

    # =========================================================================
    # Blockers
    # =========================================================================

    def get_blockers(self) -> list[TimeBlocker]:
        rows = self.conn.execute(
            'SELECT date, start, "end", reason FROM blockers ORDER BY date, start'
        ).fetchall()
        return [TimeBlocker.from_dict(dict(row)) for row in rows]

    def add_blocker(self, blocker: TimeBlocker) -> None:
        with self.conn:
            self.conn.execute(
                'INSERT INTO blockers (date, start, "end", reason) VALUES (?, ?, ?, ?)',
                (blocker.date, blocker.start, blocker.end, blocker.reason),
            )

    def remove_blocker(self, date: str, start: str) -> int:
        """Remove blockers on `date` starting at `start`; returns rows removed."""
        with self.conn:
            cursor = self.conn.execute(
                "DELETE FROM blockers WHERE date = ? AND start = ?",
                (date, start),
            )
        return cursor.rowcount

    # =========================================================================
    # Schedule
    # =========================================================================

    def save_schedule(self, result: ScheduleResult) -> None:
        with self.conn:
            self.conn.execute(
                """
                INSERT INTO schedule (id, payload, generated_at) VALUES (1, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    payload = excluded.payload,
                    generated_at = excluded.generated_at
            """,
                (json.dumps(result.to_records()), datetime.now().isoformat(timespec="minutes")),
            )

    def get_schedule(self) -> ScheduleResult | None:
        row = self.conn.execute("SELECT payload FROM schedule WHERE id = 1").fetchone()
        if row is None:
            return None
        return ScheduleResult.from_records(json.loads(row["payload"]))

    def get_generated_at(self) -> str | None:
        row = self.conn.execute("SELECT generated_at FROM schedule WHERE id = 1").fetchone()
        return row["generated_at"] if row else None

    def mark_slot_completed(self, date: str, slot_index: int, completed: bool = True) -> bool:
        """
        Set the completed flag of one stored slot.

        Returns:
            False if there is no such day or slot
        """
        result = self.get_schedule()
        if result is None:
            return False
        day = result.get_day(date)
        if day is None or not 0 <= slot_index < len(day.slots):
            return False

        day.slots[slot_index].completed = completed
        with self.conn:
            self.conn.execute(
                "UPDATE schedule SET payload = ? WHERE id = 1",
                (json.dumps(result.to_records()),),
            )
        return True

    def clear_schedule(self) -> None:
        with self.conn:
            self.conn.execute("DELETE FROM schedule")
