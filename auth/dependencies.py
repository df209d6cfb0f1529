"""
auth/dependencies.py -- FastAPI Depends() helpers for bearer-token gating.

Only one auth method exists: the Authorization: Bearer <token> header.

Two distinct failures:
  - No credential supplied (no header, or "Bearer" with nothing after it)
    -> MissingCredential (401).
  - Credential present but unusable (other scheme, malformed, expired, bad
    signature) -> CredentialRejected (403). The response does not say which.

On success the verified TokenClaims are the acting identity for the rest of
the request. No store lookup happens here -- the signed token is the source
of truth for identity until it expires.

Layer rule: auth/dependencies.py may import from fastapi because this module
is part of the FastAPI dependency injection system. No imports from api/.
"""

from __future__ import annotations

from fastapi import Request

from auth.errors import CredentialRejected, MissingCredential
from auth.models import TokenClaims
from auth.tokens import decode_access_token


def get_current_claims(request: Request) -> TokenClaims:
    """Require a valid bearer token.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(claims: TokenClaims = Depends(get_current_claims)): ...
    """
    auth_header = request.headers.get("Authorization", "").strip()
    if not auth_header:
        raise MissingCredential()

    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer":
        raise CredentialRejected()
    token = token.strip()
    if not token:
        raise MissingCredential()

    claims = decode_access_token(token)
    if claims is None:
        raise CredentialRejected()
    return claims
