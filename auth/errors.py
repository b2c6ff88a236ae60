"""
Error taxonomy for the authentication core.

Every failure the core can produce is an ``AuthError`` subclass.  The HTTP
layer maps them to status codes via ``status_code`` and shows callers only
``public_message``; errors flagged ``internal`` keep their detail in the
logs and are reported generically.
"""

from __future__ import annotations

from typing import Optional

from fastapi import status


class AuthError(Exception):
    """Base class for all authentication-core failures."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    internal: bool = False
    default_message: str = "Authentication failed"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def public_message(self) -> str:
        """Message that is safe to return to an external caller."""
        if self.internal:
            return "Internal server error"
        return self.message


# ── Input ──────────────────────────────────────────────────────────────


class ValidationError(AuthError):
    default_message = "Invalid request"


class InvalidCodeError(ValidationError):
    default_message = "Missing 'code' parameter"


class InvalidStateError(ValidationError):
    default_message = "Invalid or expired OAuth state"


# ── Upstream provider ──────────────────────────────────────────────────


class ExchangeError(AuthError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Error exchanging authorization code, try again"


class ProfileFetchError(AuthError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Error fetching provider profile, try again"


# ── Persistence ────────────────────────────────────────────────────────


class AccountNotFoundError(AuthError):
    """Typed *no such record* result from the account repository."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Account not found"


class DuplicateAccountError(AuthError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Email already registered"


class AccountLookupError(AuthError):
    """Repository failure other than not-found."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    internal = True
    default_message = "Account storage failure"


# ── Credentials ────────────────────────────────────────────────────────


class CredentialMismatchError(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Credentials do not match"


class PasswordMismatchError(CredentialMismatchError):
    default_message = "Password incorrect"


# ── Crypto primitives ──────────────────────────────────────────────────


class HashingError(AuthError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    internal = True
    default_message = "Failed in hashing password"


class SigningError(AuthError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    internal = True
    default_message = "Failed to generate token"


class TokenError(AuthError):
    """Token could not be issued for an otherwise authenticated account."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    internal = True
    default_message = "Failed to generate token"


class InvalidTokenError(TokenError):
    status_code = status.HTTP_401_UNAUTHORIZED
    internal = False
    default_message = "Invalid or expired token"
