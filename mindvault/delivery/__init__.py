"""
Delivery Module - getting a schedule out of the core and back in.

Components:
- export: JSON and iCalendar serialization
- state_store: SQLite persistence of friction, history, blockers and schedule
"""

from mindvault.delivery.export import schedule_from_json, schedule_to_ics, schedule_to_json
from mindvault.delivery.state_store import ProfileStore

__all__ = [
    "ProfileStore",
    "schedule_to_json",
    "schedule_from_json",
    "schedule_to_ics",
]
