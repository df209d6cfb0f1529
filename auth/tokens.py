"""
auth/tokens.py -- JWT session token issue and verification.

Security design decisions:
  python-jose with HS256. Tokens are signed with SECRET_KEY and carry
  user_id, email, name, iat, and exp. Verification returns None on any
  failure -- the gating dependency turns that into a 403.

  Expiry is fixed at issue time (Settings.token_expire_seconds, 2 hours by
  default). A token is valid strictly before exp; at exp it is rejected.
  The exp check is done here rather than by jose so the boundary is exact
  and the clock can be supplied by callers. jose verifies neither exp nor
  iat, so presence of both claims is checked here too.

  JWT times are whole seconds. The issue time is truncated first and exp is
  iat + window, so exp - iat is always exactly the configured window.

  Tokens are stateless. There is no revocation list: logout is client-side
  and a token stays valid for its full window. Rotating SECRET_KEY
  invalidates every outstanding token at once.

  SECRET_KEY: sourced from core.config.get_settings(), read once at module load.

Layer rule: no imports from api/ or audit/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from auth.models import TokenClaims
from core.config import get_settings

logger = logging.getLogger("isrs.auth.tokens")

_settings = get_settings()

_ALGORITHM = "HS256"

# iat and exp are checked by decode_access_token() itself.
_DECODE_OPTIONS = {"verify_exp": False, "verify_iat": False}


def create_access_token(user_id: int, email: str, name: str, issued_at: datetime | None = None) -> str:
    """Encode a signed JWT carrying the user's identity.

    Args:
        user_id:   Numeric user ID stored in the DB.
        email:     Account email.
        name:      Display name.
        issued_at: Issue time. Defaults to now (UTC).
    """
    iat = (issued_at or datetime.now(timezone.utc)).replace(microsecond=0)
    expire = iat + timedelta(seconds=_settings.token_expire_seconds)
    payload = {
        "sub": str(user_id),
        "user_id": user_id,
        "email": email,
        "name": name,
        "iat": int(iat.timestamp()),
        "exp": int(expire.timestamp()),
    }
    return jwt.encode(payload, _settings.secret_key, algorithm=_ALGORITHM)


def decode_access_token(token: str, now: datetime | None = None) -> TokenClaims | None:
    """Decode and verify a JWT. Returns TokenClaims, or None on any failure.

    Failure covers a bad signature, a malformed structure, missing identity
    claims, and now >= exp.
    """
    try:
        payload = jwt.decode(token, _settings.secret_key, algorithms=[_ALGORITHM], options=_DECODE_OPTIONS)
    except JWTError:
        return None

    user_id = payload.get("user_id")
    email = payload.get("email")
    name = payload.get("name")
    if not isinstance(user_id, int) or not isinstance(email, str) or not isinstance(name, str):
        logger.debug("Rejected token with incomplete identity claims")
        return None

    try:
        issued_at = datetime.fromtimestamp(payload["iat"], tz=timezone.utc)
        expires_at = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
    except (KeyError, TypeError, ValueError, OverflowError):
        return None

    current = now or datetime.now(timezone.utc)
    if current >= expires_at:
        return None

    return TokenClaims(
        user_id=user_id,
        email=email,
        name=name,
        issued_at=issued_at,
        expires_at=expires_at,
    )
