"""
AuthContext — the explicit dependency container for the auth core.

Built once at startup from ``Settings`` and handed to every service; the
only per-request collaborator is the account repository.
"""

from __future__ import annotations

from dataclasses import dataclass

from auth.jwt import TokenIssuer
from auth.oauth_state import OAuthStateSigner
from auth.password import PasswordHasher
from config.settings import Settings
from connectors.base import BaseConnector
from connectors.discord import DiscordConnector
from storage.avatars import AvatarStore


@dataclass(frozen=True)
class AuthContext:
    settings: Settings
    hasher: PasswordHasher
    tokens: TokenIssuer
    provider: BaseConnector
    avatars: AvatarStore
    states: OAuthStateSigner

    @classmethod
    def from_settings(cls, settings: Settings) -> "AuthContext":
        return cls(
            settings=settings,
            hasher=PasswordHasher(rounds=settings.bcrypt_rounds),
            tokens=TokenIssuer(
                secret=settings.jwt_secret,
                validity_seconds=settings.jwt_expiry_seconds,
            ),
            provider=DiscordConnector(settings),
            avatars=AvatarStore(settings.avatar_dir),
            states=OAuthStateSigner(
                secret=settings.oauth_state_secret or settings.jwt_secret,
                ttl_seconds=settings.oauth_state_ttl_seconds,
            ),
        )
