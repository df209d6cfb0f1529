"""
audit/store.py -- SQLAlchemy Core persistence for the activity log.

Pattern: Repository + Data Mapper (same as auth/store.py). ActivityStore is
append-only: it exposes append() and recent_for_user() and nothing that
updates or deletes rows.

activity_log.user_id is a foreign key into users.id. With SQLite, enforcement
depends on PRAGMA foreign_keys=ON, which core.db.create_db_engine() sets on
every connection.

Usage:
    store = ActivityStore(engine)
    store.append(user_id, "user logged in")
    recent = store.recent_for_user(user_id)
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from audit.models import Activity
from core.db import activity_log, now_iso

# Dashboard page size. recent_for_user() never returns more than this.
PAGE_SIZE = 20


class UnknownUserError(Exception):
    """Raised by append() when user_id does not reference an existing user."""


class ActivityStore:
    """Repository for Activity records."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def append(self, user_id: int, action: str) -> int:
        """Insert an activity row and return its ID.

        Raises UnknownUserError on a foreign-key violation. Other database
        errors propagate unchanged.
        """
        try:
            with self.engine.connect() as conn:
                result = conn.execute(
                    activity_log.insert().values(user_id=user_id, action=action, timestamp=now_iso())
                )
                conn.commit()
                return result.inserted_primary_key[0]
        except IntegrityError as exc:
            raise UnknownUserError(user_id) from exc

    def recent_for_user(self, user_id: int, limit: int = PAGE_SIZE) -> list[Activity]:
        """Return up to `limit` (max PAGE_SIZE) entries, newest first.

        Ordered by timestamp descending; rows written in the same microsecond
        fall back to id descending.
        """
        limit = max(0, min(limit, PAGE_SIZE))
        query = (
            select(activity_log)
            .where(activity_log.c.user_id == user_id)
            .order_by(activity_log.c.timestamp.desc(), activity_log.c.id.desc())
            .limit(limit)
        )
        with self.engine.connect() as conn:
            rows = conn.execute(query).fetchall()
        return [_row_to_activity(r) for r in rows]


def _row_to_activity(row) -> Activity:
    return Activity(id=row.id, user_id=row.user_id, action=row.action, timestamp=row.timestamp)
