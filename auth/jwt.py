"""
JWT-style token creation and verification.

Tokens are base64-encoded JSON payloads signed with HMAC-SHA256.
The secret is handed in by the caller (``Settings.jwt_secret``,
env var: ``SECRET`` / ``JWT_SECRET``).
"""

from __future__ import annotations

import hashlib
import hmac
import json
import time
from base64 import urlsafe_b64decode, urlsafe_b64encode
from typing import Callable

from auth.errors import InvalidTokenError, SigningError
from auth.schemas import SignedToken

TOKEN_VALIDITY_SECONDS = 240 * 60 * 60


def _b64encode(raw: bytes) -> str:
    return urlsafe_b64encode(raw).rstrip(b"=").decode()


def _b64decode(encoded: str) -> bytes:
    return urlsafe_b64decode(encoded + "=" * (-len(encoded) % 4))


class TokenIssuer:
    """Signs and verifies stateless identity assertions."""

    def __init__(
        self,
        secret: str,
        validity_seconds: int = TOKEN_VALIDITY_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._secret = secret
        self.validity_seconds = validity_seconds
        self._clock = clock

    def _sign(self, raw: bytes) -> str:
        return hmac.new(self._secret.encode(), raw, hashlib.sha256).hexdigest()

    def issue(self, account_id: str) -> SignedToken:
        """Create a signed token with ``sub`` = *account_id* and expiry."""
        if not self._secret:
            raise SigningError("Token signing secret is not configured")
        if not account_id:
            raise SigningError("Cannot sign a token without a subject")

        issued_at = int(self._clock())
        payload = {
            "sub": account_id,
            "iat": issued_at,
            "exp": issued_at + self.validity_seconds,
        }
        try:
            raw = json.dumps(payload, separators=(",", ":")).encode()
            token = _b64encode(raw) + "." + self._sign(raw)
        except (TypeError, ValueError) as exc:
            raise SigningError(f"Token signing failed: {exc}") from exc

        return SignedToken(
            token=token,
            subject=account_id,
            issued_at=issued_at,
            expires_at=payload["exp"],
        )

    def decode(self, token: str) -> dict:
        """
        Verify signature and expiry, returning the payload.

        Raises ``InvalidTokenError`` on malformed, forged or expired tokens.
        """
        try:
            encoded, sig = token.split(".", 1)
            raw = _b64decode(encoded)
        except (ValueError, UnicodeError) as exc:
            raise InvalidTokenError() from exc

        # compare_digest rejects non-ASCII str, so compare bytes.
        presented = sig.encode("utf-8", "replace")
        expected = self._sign(raw).encode()
        if not self._secret or not hmac.compare_digest(presented, expected):
            raise InvalidTokenError()

        try:
            payload = json.loads(raw)
        except ValueError as exc:
            raise InvalidTokenError() from exc

        if not isinstance(payload, dict) or not payload.get("sub"):
            raise InvalidTokenError()
        if payload.get("exp", 0) < self._clock():
            raise InvalidTokenError("Token expired")
        return payload

    def verify(self, token: str) -> str:
        """Verify *token* and return its subject (the account id)."""
        return self.decode(token)["sub"]
