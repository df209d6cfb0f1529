"""
audit/recorder.py -- Best-effort activity recording.

Callers follow a two-step contract:
  1. Perform the primary effect (create the account, issue the token).
  2. Call ActivityRecorder.record(). It never raises.

The primary action is authoritative and the audit row is not. If the append
fails, the failure is logged here and the caller's response is unchanged.
An endpoint whose primary effect IS the append (POST /api/user/activity)
calls ActivityStore.append() directly instead, so its errors surface.
"""

from __future__ import annotations

import logging

from audit.store import ActivityStore

logger = logging.getLogger("isrs.audit")


class ActivityRecorder:
    def __init__(self, store: ActivityStore) -> None:
        self.store = store

    def record(self, user_id: int, action: str) -> int | None:
        """Append an audit row. Returns its ID, or None if recording failed."""
        try:
            return self.store.append(user_id, action)
        except Exception:
            logger.exception("Failed to record activity %r for user %s", action, user_id)
            return None
