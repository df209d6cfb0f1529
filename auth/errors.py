"""
auth/errors.py -- Failure taxonomy for the auth gateway.

Every failure a client can see is one of these. The API layer maps them to
HTTP responses with a single exception handler (see api/main.py), so
AuthService never imports FastAPI.

  InvalidInput          400  missing or malformed fields
  AuthenticationFailed  401  bad credentials
  MissingCredential     401  no bearer token supplied
  CredentialRejected    403  token malformed, expired, or badly signed
  NotFound              404  referenced account no longer exists
  Conflict              409  email already registered

Anything else is a server fault and is rendered as an opaque 500.
"""

from __future__ import annotations


class GatewayError(Exception):
    status_code: int = 500
    code: str = "internal_error"
    message: str = "An unexpected error occurred."

    def __init__(self, message: str | None = None, code: str | None = None) -> None:
        if message is not None:
            self.message = message
        if code is not None:
            self.code = code
        super().__init__(self.message)


class InvalidInput(GatewayError):
    status_code = 400
    code = "invalid_input"
    message = "Invalid request."


class AuthenticationFailed(GatewayError):
    """Raised for both unknown email and wrong password.

    The message is a class constant so both branches produce identical
    response bodies. Do not pass a custom message for login failures.
    """

    status_code = 401
    code = "invalid_credentials"
    message = "Invalid email or password."


class MissingCredential(GatewayError):
    status_code = 401
    code = "missing_token"
    message = "Authentication required."


class CredentialRejected(GatewayError):
    status_code = 403
    code = "invalid_token"
    message = "Invalid or expired token."


class NotFound(GatewayError):
    status_code = 404
    code = "not_found"
    message = "User not found."


class Conflict(GatewayError):
    status_code = 409
    code = "conflict"
    message = "User already exists with this email."
