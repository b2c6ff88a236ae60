"""
Signed, expiring OAuth ``state`` values.

The state handed to Discord is ``base64(json{nonce, exp}).hmac`` so the
callback can prove it was minted here and recently.  The nonce is also
set as a cookie on the browser that asked for the URL; the callback
requires both to agree.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import secrets
import time
from base64 import urlsafe_b64decode, urlsafe_b64encode
from typing import Callable

from auth.errors import InvalidStateError

STATE_TTL_SECONDS = 600


class OAuthStateSigner:
    def __init__(
        self,
        secret: str,
        ttl_seconds: int = STATE_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._secret = secret
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    def _sign(self, raw: bytes) -> bytes:
        return hmac.new(self._secret.encode(), raw, hashlib.sha256).hexdigest()[:32].encode()

    def create(self, nonce: str = "") -> str:
        """Mint a state for *nonce* (a fresh random one when omitted)."""
        nonce = nonce or secrets.token_urlsafe(16)
        payload = {"nonce": nonce, "exp": int(self._clock()) + self.ttl_seconds}
        raw = json.dumps(payload, separators=(",", ":")).encode()
        return urlsafe_b64encode(raw).rstrip(b"=").decode() + "." + self._sign(raw).decode()

    def verify(self, state: str) -> str:
        """Return the nonce of a valid *state*; raise ``InvalidStateError`` otherwise."""
        if not state or not self._secret:
            raise InvalidStateError()
        try:
            encoded, sig = state.split(".", 1)
            raw = urlsafe_b64decode(encoded + "=" * (-len(encoded) % 4))
            presented = sig.encode("utf-8", "replace")
        except (ValueError, UnicodeError) as exc:
            raise InvalidStateError() from exc

        if not hmac.compare_digest(presented, self._sign(raw)):
            raise InvalidStateError()
        try:
            payload = json.loads(raw)
        except ValueError as exc:
            raise InvalidStateError() from exc
        if not isinstance(payload, dict) or not isinstance(payload.get("nonce"), str):
            raise InvalidStateError()
        if not isinstance(payload.get("exp"), int) or payload["exp"] < self._clock():
            raise InvalidStateError()
        return payload["nonce"]
