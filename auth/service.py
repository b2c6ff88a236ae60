"""
Native account flows — signup, login, profile details and avatar upload.
"""

from __future__ import annotations

import logging

from auth.context import AuthContext
from auth.errors import (
    AccountNotFoundError,
    DuplicateAccountError,
    SigningError,
    TokenError,
    ValidationError,
)
from auth.ids import generate_user_id
from auth.schemas import (
    ACCOUNT_NATIVE,
    Account,
    AuthResult,
    AvatarOut,
    LoginRequest,
    SignupRequest,
    UserDetailsIn,
    UserDetailsOut,
)
from database.repository import AccountRepository

logger = logging.getLogger(__name__)

_IMAGE_TYPES = {"image/png", "image/jpeg", "image/gif", "image/webp"}


class AuthService:
    def __init__(self, context: AuthContext, accounts: AccountRepository) -> None:
        self.context = context
        self.accounts = accounts

    def _issue(self, account: Account, created: bool = False) -> AuthResult:
        try:
            token = self.context.tokens.issue(account.user_id)
        except SigningError as exc:
            logger.exception("Token issue failed for %s", account.user_id)
            raise TokenError() from exc
        return AuthResult(account=account.public(), token=token, created=created)

    async def signup(self, req: SignupRequest) -> AuthResult:
        """Register a new email/password account and log it in."""
        email = str(req.email)
        try:
            await self.accounts.find_by_email(email)
        except AccountNotFoundError:
            pass
        else:
            raise DuplicateAccountError()

        account = await self.accounts.create(
            Account(
                user_id=generate_user_id(),
                email=email,
                password_hash=self.context.hasher.hash(req.password),
                username=req.username,
                account_type=ACCOUNT_NATIVE,
            )
        )
        logger.info("Registered user %s", account.user_id)
        return self._issue(account, created=True)

    async def login(self, req: LoginRequest) -> AuthResult:
        """Login with email + password."""
        account = await self.accounts.find_by_email(str(req.email))
        self.context.hasher.verify(account.password_hash, req.password)
        logger.info("Login: %s", account.user_id)
        return self._issue(account)

    async def set_details(self, user_id: str, details: UserDetailsIn) -> UserDetailsOut:
        saved = await self.accounts.save_details(user_id, details)
        logger.info("Saved profile details for %s", user_id)
        return saved

    async def get_details(self, user_id: str) -> UserDetailsOut:
        return await self.accounts.find_details(user_id)

    async def upload_avatar(
        self,
        user_id: str,
        filename: str,
        content: bytes,
        content_type: str | None,
    ) -> AvatarOut:
        """Validate and store an avatar image, then record it on the account."""
        if not filename:
            raise ValidationError("Error retrieving the file")
        if content_type not in _IMAGE_TYPES:
            raise ValidationError("Avatar must be a PNG, JPEG, GIF or WebP image")
        if not content:
            raise ValidationError("Uploaded file is empty")
        if len(content) > self.context.settings.avatar_max_bytes:
            raise ValidationError("Avatar exceeds the upload size limit")

        # Unknown users are rejected before anything touches the disk.
        await self.accounts.find_by_id(user_id)
        stored_name = self.context.avatars.save(user_id, filename, content)
        return await self.accounts.set_avatar(user_id, stored_name)
