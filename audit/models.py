"""
audit/models.py -- Domain dataclass for activity log entries.

Activity rows are immutable once written. The store never updates or
deletes them.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Activity:
    """One user-attributed action, for display only (not security decisions)."""

    id: int
    user_id: int
    action: str
    timestamp: str  # ISO 8601 UTC, set by store on insert
