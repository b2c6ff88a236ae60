"""
Password hashing and verification.

Uses bcrypt for password hashing with automatic
salting and configurable work factor.
"""

from __future__ import annotations

import logging

import bcrypt

from auth.errors import HashingError, PasswordMismatchError, ValidationError
from auth.schemas import BCRYPT_MAX_BYTES

logger = logging.getLogger(__name__)


class PasswordHasher:
    """bcrypt hasher; the same path serves native passwords and provider ids."""

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds

    def hash(self, secret: str) -> str:
        """Hash a secret with bcrypt (auto-salted)."""
        if not secret:
            raise ValidationError("Password must not be empty")
        if len(secret.encode()) > BCRYPT_MAX_BYTES:
            # Older bcrypt truncates silently, newer raises; refuse either way.
            raise ValidationError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes")
        try:
            return bcrypt.hashpw(
                secret.encode(), bcrypt.gensalt(rounds=self.rounds)
            ).decode()
        except (ValueError, TypeError) as exc:
            logger.error("bcrypt hashing failed: %s", exc)
            raise HashingError() from exc

    def verify(self, stored_hash: str, candidate: str) -> None:
        """
        Constant-time comparison against a bcrypt hash.

        Raises ``PasswordMismatchError`` when the candidate does not match,
        including when ``stored_hash`` is not a bcrypt hash at all.
        """
        try:
            ok = bcrypt.checkpw(candidate.encode(), stored_hash.encode())
        except (ValueError, TypeError) as exc:
            logger.debug("bcrypt verify rejected stored hash: %s", exc)
            ok = False
        if not ok:
            raise PasswordMismatchError()
