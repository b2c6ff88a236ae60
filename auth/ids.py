"""
Account identifier generation.

Ids are 30 characters drawn uniformly from a fixed charset.  They are not
secrets; the ``users`` primary key is the uniqueness guard.
"""

from __future__ import annotations

import itertools
import random
import time

USER_ID_CHARSET = (
    "abcdefghijklmnopqrstuvwxyz"
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    "0123456789"
    "~!@#$%^&*"
)
USER_ID_LENGTH = 30

_sequence = itertools.count()


def generate_user_id() -> str:
    """Return a fresh 30-character account id, seeded from the ns clock."""
    # Two calls inside one clock tick still get distinct seeds.
    rng = random.Random(f"{time.time_ns()}:{next(_sequence)}")
    return "".join(rng.choice(USER_ID_CHARSET) for _ in range(USER_ID_LENGTH))
