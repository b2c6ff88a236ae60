"""
Shared fixtures: fast hasher, in-memory account repository, fake provider.
"""

from __future__ import annotations

from typing import Dict, List, Optional

import pytest

from auth.context import AuthContext
from auth.errors import (
    AccountNotFoundError,
    DuplicateAccountError,
    InvalidCodeError,
)
from auth.jwt import TokenIssuer
from auth.oauth_state import OAuthStateSigner
from auth.password import PasswordHasher
from auth.schemas import Account, AvatarOut, ExternalIdentity, UserDetailsIn, UserDetailsOut
from config.settings import Settings
from connectors.base import BaseConnector
from database.repository import AccountRepository
from storage.avatars import AvatarStore

TEST_SECRET = "test-signing-secret"


class InMemoryAccountRepository(AccountRepository):
    def __init__(self) -> None:
        self.accounts: Dict[str, Account] = {}
        self.details: Dict[str, UserDetailsOut] = {}
        self.avatars: Dict[str, str] = {}
        self.create_calls = 0

    async def find_by_email(self, email: str) -> Account:
        for account in self.accounts.values():
            if account.email == email:
                return account
        raise AccountNotFoundError()

    async def find_by_id(self, user_id: str) -> Account:
        try:
            return self.accounts[user_id]
        except KeyError:
            raise AccountNotFoundError() from None

    async def create(self, account: Account) -> Account:
        self.create_calls += 1
        if any(a.email == account.email for a in self.accounts.values()):
            raise DuplicateAccountError()
        self.accounts[account.user_id] = account
        return account

    async def update(self, account: Account) -> Account:
        await self.find_by_id(account.user_id)
        self.accounts[account.user_id] = account
        return account

    async def save_details(self, user_id: str, details: UserDetailsIn) -> UserDetailsOut:
        await self.find_by_id(user_id)
        saved = UserDetailsOut(
            user_id=user_id,
            avatar=self.avatars.get(user_id, ""),
            **details.model_dump(),
        )
        self.details[user_id] = saved
        return saved

    async def find_details(self, user_id: str) -> UserDetailsOut:
        try:
            return self.details[user_id]
        except KeyError:
            raise AccountNotFoundError("User details not found") from None

    async def set_avatar(self, user_id: str, filename: str) -> AvatarOut:
        await self.find_by_id(user_id)
        self.avatars[user_id] = filename
        return AvatarOut(user_id=user_id, filename=filename)


class FakeConnector(BaseConnector):
    """Provider double that returns a canned identity for any valid code."""

    def __init__(self, identity: Optional[ExternalIdentity] = None) -> None:
        self.identity = identity or discord_identity()
        self.exchange_error: Optional[Exception] = None
        self.profile_error: Optional[Exception] = None
        self.exchanged_codes: List[str] = []

    @property
    def provider_name(self) -> str:
        return "discord"

    @property
    def display_name(self) -> str:
        return "Discord"

    @property
    def scopes(self) -> List[str]:
        return ["identify", "email"]

    def get_auth_url(self, state: str) -> str:
        return f"https://discord.test/authorize?state={state}"

    async def exchange_code(self, code: str) -> str:
        if not code or not code.strip():
            raise InvalidCodeError()
        self.exchanged_codes.append(code)
        if self.exchange_error:
            raise self.exchange_error
        return f"access-{code}"

    async def fetch_profile(self, access_token: str) -> ExternalIdentity:
        if self.profile_error:
            raise self.profile_error
        return self.identity


def discord_identity(**overrides) -> ExternalIdentity:
    data = {
        "provider": "discord",
        "provider_user_id": "80351110224678912",
        "email": "nelly@discord.com",
        "username": "Nelly",
        "verified": True,
    }
    data.update(overrides)
    return ExternalIdentity(**data)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        jwt_secret=TEST_SECRET,
        bcrypt_rounds=4,
        discord_client_id="client-id",
        discord_client_secret="client-secret",
        discord_redirect_uri="http://localhost:9000/api/auth/discord/redirect",
        database_url="sqlite+aiosqlite:///:memory:",
        avatar_dir=str(tmp_path / "avatars"),
    )


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def provider() -> FakeConnector:
    return FakeConnector()


@pytest.fixture
def context(settings, hasher, provider) -> AuthContext:
    return AuthContext(
        settings=settings,
        hasher=hasher,
        tokens=TokenIssuer(TEST_SECRET),
        provider=provider,
        avatars=AvatarStore(settings.avatar_dir),
        states=OAuthStateSigner(TEST_SECRET),
    )


@pytest.fixture
def repo() -> InMemoryAccountRepository:
    return InMemoryAccountRepository()

