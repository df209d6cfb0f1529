"""
auth/passwords.py -- bcrypt password hashing.

Bcrypt is the right choice for low-entropy secrets (passwords) because its
cost factor makes offline brute-force expensive. Every hash gets a fresh salt
from bcrypt.gensalt(); the cost factor comes from Settings.bcrypt_rounds.

Using bcrypt directly rather than passlib[bcrypt] because passlib's internal
wrap-bug detection creates a password longer than 72 bytes, which bcrypt 4.x
rejects with an explicit error.

Plaintext passwords are never logged, stored, or returned by anything here.

Layer rule: no imports from api/ or audit/. Import from core/ is allowed.
"""

from __future__ import annotations

import bcrypt

from core.config import get_settings

_settings = get_settings()


def hash_password(plain: str) -> str:
    """Return a salted bcrypt hash of the given plaintext password.

    Passwords longer than 72 bytes are truncated by bcrypt. The API layer caps
    password length at 72 characters, and AuthService rejects anything that
    still encodes to more than 72 bytes.
    """
    salt = bcrypt.gensalt(rounds=_settings.bcrypt_rounds)
    return bcrypt.hashpw(plain.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    A malformed stored hash verifies as False rather than raising.
    """
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


# Timing equalization dummy hash.
# Computed once at module load with the configured cost, so a login for an
# unknown email spends the same bcrypt work as a wrong password and response
# time does not reveal whether the account exists.
DUMMY_HASH: str = hash_password("isrs_timing_dummy")
