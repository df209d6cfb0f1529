"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic beyond projection).
Dataclasses own domain shape; stores and the service do the work.

Layer rule: no imports from api/ or audit/.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class User:
    """A registered account as stored in the users table.

    password_hash is the bcrypt hash. It must never leave the service layer --
    anything returned to a client goes through profile() first.
    """

    id: int
    name: str
    email: str
    password_hash: str
    created_at: str

    def profile(self) -> UserProfile:
        """Return a hash-free copy. The User record itself is never modified."""
        return UserProfile(id=self.id, name=self.name, email=self.email, created_at=self.created_at)


@dataclass(frozen=True)
class UserProfile:
    """Profile-safe projection of a User. Has no password_hash field at all."""

    id: int
    name: str
    email: str
    created_at: str


@dataclass(frozen=True)
class TokenClaims:
    """Identity carried inside a verified session token."""

    user_id: int
    email: str
    name: str
    issued_at: datetime
    expires_at: datetime
