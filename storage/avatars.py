"""
Avatar file store — writes uploaded images under ``Settings.avatar_dir``.
"""

from __future__ import annotations

import logging
import pathlib

logger = logging.getLogger(__name__)


class AvatarStore:
    def __init__(self, root: str | pathlib.Path) -> None:
        self.root = pathlib.Path(root)

    def ensure_root(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def save(self, user_id: str, filename: str, content: bytes) -> str:
        """
        Store *content* as ``<user_id>_<basename>`` and return the stored name.

        Only the basename of *filename* is kept, so a client cannot write
        outside the avatar directory.
        """
        basename = pathlib.PurePath(filename.replace("\\", "/")).name or "avatar"
        stored_name = f"{user_id}_{basename}"
        self.ensure_root()
        (self.root / stored_name).write_bytes(content)
        logger.info("Stored avatar %s (%d bytes)", stored_name, len(content))
        return stored_name
