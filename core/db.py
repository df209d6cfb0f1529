"""
core/db.py -- Shared SQLAlchemy Core schema and engine factory.

Both stores (auth/store.py for users, audit/store.py for the activity log)
live in one database because activity_log.user_id is a foreign key into
users.id. The schema is declared once here; each store receives the same
Engine and owns only its queries.

Uses SQLAlchemy Core (not ORM) so the domain dataclasses remain the
authoritative representation. Swapping SQLite for PostgreSQL is a connection
string change.

Security: all queries in the stores use bound parameters. No f-strings in SQL.

Layer rule: core/ is the kernel. No imports from api/, auth/, or audit/.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, ForeignKey, Index, Integer, MetaData, String, Table, Text, create_engine, event
from sqlalchemy.engine import Engine

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    # Case-sensitive exact match; the UNIQUE index is the only duplicate guard.
    Column("email", String(320), nullable=False, unique=True),
    Column("password_hash", Text, nullable=False),
    Column("created_at", String(40), nullable=False),
)

activity_log = Table(
    "activity_log",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, ForeignKey("users.id"), nullable=False),
    Column("action", Text, nullable=False),
    Column("timestamp", String(40), nullable=False),
    Index("ix_activity_log_user_recent", "user_id", "timestamp", "id"),
)


# ---------------------------------------------------------------------------
# SQLite connection pragmas
# ---------------------------------------------------------------------------


def _set_sqlite_pragmas(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode and foreign-key enforcement.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool. foreign_keys is OFF by default in SQLite, so
    without it an activity row could reference a user that does not exist.
    """
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(db_url: str) -> Engine:
    """Create an Engine for db_url and make sure both tables exist."""
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _set_sqlite_pragmas)
    metadata.create_all(engine)
    return engine


def now_iso() -> str:
    # Fixed microsecond precision keeps lexical order equal to time order.
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")
