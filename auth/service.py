"""
auth/service.py -- The auth gateway: registration, login, and gated reads.

This is the only module with business logic. Route handlers in api/routes/
parse HTTP, call one AuthService method, and serialize the result. Failures
are raised as auth.errors.GatewayError subclasses; anything else is a server
fault and becomes an opaque 500 at the API boundary.

Audit recording follows the two-step contract in audit/recorder.py: the
primary effect happens first, then recorder.record() runs and cannot fail
the request.

Security:
  login() always runs bcrypt, against DUMMY_HASH when the email is
  unknown, so response time does not reveal account existence.
  Unknown email and wrong password raise the same AuthenticationFailed
  with no custom message, so the response bodies are byte-identical.
  Duplicate emails are caught by the database unique constraint only. There
  is no lookup-then-insert check to race against.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from audit.models import Activity
from audit.recorder import ActivityRecorder
from audit.store import PAGE_SIZE, ActivityStore, UnknownUserError
from auth.errors import AuthenticationFailed, Conflict, InvalidInput, NotFound
from auth.models import TokenClaims, UserProfile
from auth.passwords import DUMMY_HASH, hash_password, verify_password
from auth.store import EmailAlreadyExists, UserStore
from auth.tokens import create_access_token

logger = logging.getLogger("isrs.auth.service")

ACTION_REGISTERED = "account registered"
ACTION_LOGGED_IN = "user logged in"

MAX_ACTION_LENGTH = 500
# bcrypt only looks at the first 72 bytes; longer secrets are refused outright.
MAX_PASSWORD_BYTES = 72


@dataclass(frozen=True)
class LoginResult:
    token: str
    user: UserProfile


@dataclass(frozen=True)
class Dashboard:
    user: UserProfile
    activities: list[Activity]


class AuthService:
    def __init__(self, users: UserStore, activities: ActivityStore, recorder: ActivityRecorder | None = None) -> None:
        self.users = users
        self.activities = activities
        self.recorder = recorder or ActivityRecorder(activities)

    def register(self, name: str | None, email: str | None, password: str | None) -> int:
        """Create an account and return the new user ID.

        Raises InvalidInput if any field is missing or blank, Conflict if the
        email is already registered.
        """
        name = (name or "").strip()
        email = email or ""
        if not name or not email or not password:
            raise InvalidInput("All fields are required.")
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise InvalidInput(f"Password must be at most {MAX_PASSWORD_BYTES} bytes.")

        password_hash = hash_password(password)
        try:
            user_id = self.users.create_user(name, email, password_hash)
        except EmailAlreadyExists as exc:
            raise Conflict() from exc

        logger.info("Registered user %s", user_id)
        self.recorder.record(user_id, ACTION_REGISTERED)
        return user_id

    def login(self, email: str | None, password: str | None) -> LoginResult:
        """Verify credentials and issue a session token.

        Raises InvalidInput if a field is missing, AuthenticationFailed on
        unknown email or wrong password.
        """
        email = email or ""
        if not email or not password:
            raise InvalidInput("Email and password are required.")

        user = self.users.get_by_email(email)
        if user is None:
            # Equalize timing -- do NOT return before running bcrypt
            verify_password(password, DUMMY_HASH)
            raise AuthenticationFailed()
        if not verify_password(password, user.password_hash):
            raise AuthenticationFailed()

        token = create_access_token(user.id, user.email, user.name)
        self.recorder.record(user.id, ACTION_LOGGED_IN)
        return LoginResult(token=token, user=user.profile())

    def dashboard(self, claims: TokenClaims) -> Dashboard:
        """Return the caller's profile and up to PAGE_SIZE recent activities.

        Read-only; records nothing. Raises NotFound if the account no longer
        exists even though the token is still valid.
        """
        profile = self.users.get_profile(claims.user_id)
        if profile is None:
            raise NotFound()
        return Dashboard(user=profile, activities=self.activities.recent_for_user(claims.user_id, PAGE_SIZE))

    def log_activity(self, claims: TokenClaims, action: str | None) -> int:
        """Append an action for the calling user and return the row ID.

        The append is the primary effect here, so storage errors propagate.
        """
        action = (action or "").strip()
        if not action:
            raise InvalidInput("Action is required.")
        if len(action) > MAX_ACTION_LENGTH:
            raise InvalidInput(f"Action must be at most {MAX_ACTION_LENGTH} characters.")
        try:
            return self.activities.append(claims.user_id, action)
        except UnknownUserError as exc:
            raise NotFound() from exc
