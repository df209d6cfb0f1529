"""
auth/store.py -- SQLAlchemy Core persistence layer for user accounts.

Pattern: Repository + Data Mapper. UserStore is the repository; _row_to_user
is the mapper. Service and route code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

  Email uniqueness is enforced by the UNIQUE index on users.email, not by a
  lookup before insert. Two concurrent registrations for the same address
  race at the database; the loser gets IntegrityError, which create_user()
  turns into EmailAlreadyExists.

Layer rule: no imports from api/ or audit/. Import from core/ is allowed.
"""

from __future__ import annotations

from sqlalchemy import func, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from auth.models import User, UserProfile
from core.db import now_iso, users


class EmailAlreadyExists(Exception):
    """Raised by create_user() when the email is already registered."""


class UserStore:
    """Repository for User records.

    Usage:
        engine = create_db_engine("sqlite:///isrs.sqlite")
        store = UserStore(engine)
        uid = store.create_user("Ada", "ada@x.com", hash_password("secret1"))
        profile = store.get_profile(uid)
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def create_user(self, name: str, email: str, password_hash: str) -> int:
        """Insert a new user and return its assigned database ID.

        Raises EmailAlreadyExists on the unique-email constraint. Any other
        database error propagates unchanged so the caller reports a server
        fault rather than a conflict.
        """
        try:
            with self.engine.connect() as conn:
                result = conn.execute(
                    users.insert().values(
                        name=name,
                        email=email,
                        password_hash=password_hash,
                        created_at=now_iso(),
                    )
                )
                conn.commit()
                return result.inserted_primary_key[0]
        except IntegrityError as exc:
            # users.email is the only constraint an insert can violate.
            raise EmailAlreadyExists(email) from exc

    def get_by_email(self, email: str) -> User | None:
        """Look up a user by exact email (case-sensitive). Includes the hash."""
        with self.engine.connect() as conn:
            row = conn.execute(users.select().where(users.c.email == email)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_profile(self, user_id: int) -> UserProfile | None:
        """Look up a user by primary key, without the password hash.

        The hash column is not even selected, so it cannot leak through this path.
        """
        query = select(users.c.id, users.c.name, users.c.email, users.c.created_at).where(users.c.id == user_id)
        with self.engine.connect() as conn:
            row = conn.execute(query).fetchone()
        if row is None:
            return None
        return UserProfile(id=row.id, name=row.name, email=row.email, created_at=row.created_at)

    def count_by_email(self, email: str) -> int:
        with self.engine.connect() as conn:
            result = conn.execute(select(func.count()).select_from(users).where(users.c.email == email)).scalar()
        return result or 0

    def ping(self) -> bool:
        """Return True if the database answers a trivial query. Used by /api/health."""
        with self.engine.connect() as conn:
            return conn.execute(text("SELECT 1")).scalar() == 1


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        name=row.name,
        email=row.email,
        password_hash=row.password_hash,
        created_at=row.created_at,
    )
