"""
Coercion and date helpers shared by the planner.

Inputs come from JSON profiles and persisted state, so every numeric field is
coerced to a safe default and clamped rather than raising. Dates are carried
internally as epoch days (days since 1970-01-01) and only formatted at the
input/output boundaries.
"""

from __future__ import annotations

import math
from datetime import date, timedelta

EPOCH = date(1970, 1, 1)


def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def safe_float(
    value: object,
    default: float = 0.0,
    lo: float | None = None,
    hi: float | None = None,
) -> float:
    """
    Coerce a value to a finite float.

    None, empty strings, unparseable strings, NaN and infinities all become
    `default`. Booleans are treated as malformed. The result is then clamped
    to [lo, hi] where given.
    """
    if value is None or isinstance(value, bool):
        x = default
    elif isinstance(value, (int, float)):
        x = float(value)
    elif isinstance(value, str):
        s = value.strip()
        try:
            x = float(s) if s else default
        except ValueError:
            x = default
    else:
        x = default

    if not math.isfinite(x):
        x = default
    if lo is not None:
        x = max(lo, x)
    if hi is not None:
        x = min(hi, x)
    return x


def round_half_up(x: float) -> int:
    """Round to the nearest int with halves going up (2.5 -> 3, not 2)."""
    return int(math.floor(x + 0.5))


def safe_int(
    value: object,
    default: int = 0,
    lo: int | None = None,
    hi: int | None = None,
) -> int:
    """Coerce to float with `safe_float`, then round half up to an int."""
    return round_half_up(safe_float(value, default, lo, hi))


# =============================================================================
# Time of day
# =============================================================================


def parse_time_str(value: object) -> tuple[int, int]:
    """Parse 'HH:MM' into (hour, minute); malformed parts become 0."""
    parts = str(value or "").strip().split(":")
    hh = parts[0] if parts else ""
    mm = parts[1] if len(parts) > 1 else ""
    return safe_int(hh, 0, 0, 23), safe_int(mm, 0, 0, 59)


def time_to_minutes(value: object) -> int:
    hour, minute = parse_time_str(value)
    return hour * 60 + minute


def minutes_to_time(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


# =============================================================================
# Epoch days
# =============================================================================


def to_epoch_day(value: object) -> int | None:
    """
    Convert an ISO date (or date/datetime) to an epoch day.

    Returns None for anything that does not parse.
    """
    if isinstance(value, date):
        return value.toordinal() - EPOCH.toordinal()
    if not isinstance(value, str):
        return None
    s = value.strip()[:10]
    try:
        return date.fromisoformat(s).toordinal() - EPOCH.toordinal()
    except ValueError:
        return None


def from_epoch_day(day: int) -> str:
    return (EPOCH + timedelta(days=day)).isoformat()


def today_epoch_day() -> int:
    return date.today().toordinal() - EPOCH.toordinal()
