"""
Identity reconciliation for Discord login.

Links an external identity to a local account:

  START → EXCHANGED → PROFILE_FETCHED → MATCHED | CREATED → done

The Discord user id acts as the password-equivalent of accounts created
through Discord, so matching reuses the bcrypt verify path.  An email that
belongs to an account with a different credential (e.g. a native signup)
is rejected, never auto-linked and never duplicated.
"""

from __future__ import annotations

import logging
from enum import Enum

from auth.context import AuthContext
from auth.errors import (
    AccountNotFoundError,
    CredentialMismatchError,
    DuplicateAccountError,
    SigningError,
    TokenError,
)
from auth.ids import generate_user_id
from auth.schemas import ACCOUNT_DISCORD, Account, AuthResult, ExternalIdentity
from database.repository import AccountRepository

logger = logging.getLogger(__name__)

_USERNAME_MAX = 30


class ReconcileStage(str, Enum):
    START = "start"
    EXCHANGED = "exchanged"
    PROFILE_FETCHED = "profile_fetched"
    MATCHED = "matched"
    CREATED = "created"


class IdentityReconciler:
    def __init__(self, context: AuthContext, accounts: AccountRepository) -> None:
        self.context = context
        self.accounts = accounts

    def authorization_url(self, state: str) -> str:
        return self.context.provider.get_auth_url(state)

    async def reconcile(self, code: str) -> AuthResult:
        """Run the full OAuth login for an authorization *code*."""
        provider = self.context.provider
        logger.debug("OAuth %s: %s", provider.provider_name, ReconcileStage.START.value)

        access_token = await provider.exchange_code(code)
        logger.debug("OAuth %s: %s", provider.provider_name, ReconcileStage.EXCHANGED.value)

        identity = await provider.fetch_profile(access_token)
        logger.debug("OAuth %s: %s", provider.provider_name, ReconcileStage.PROFILE_FETCHED.value)

        return await self.link_identity(identity)

    async def link_identity(self, identity: ExternalIdentity) -> AuthResult:
        """Find-or-create the local account for *identity* and issue a token."""
        try:
            account = await self.accounts.find_by_email(identity.email)
        except AccountNotFoundError:
            account = await self._create(identity)
            stage = ReconcileStage.CREATED
        else:
            self._check_credential(account, identity)
            stage = ReconcileStage.MATCHED

        try:
            token = self.context.tokens.issue(account.user_id)
        except SigningError as exc:
            logger.exception("Token issue failed for %s after %s", account.user_id, stage.value)
            raise TokenError() from exc

        logger.info(
            "OAuth login %s: user=%s provider=%s",
            stage.value,
            account.user_id,
            identity.provider,
        )
        return AuthResult(
            account=account.public(),
            token=token,
            created=stage is ReconcileStage.CREATED,
        )

    def _check_credential(self, account: Account, identity: ExternalIdentity) -> None:
        try:
            self.context.hasher.verify(account.password_hash, identity.provider_user_id)
        except CredentialMismatchError as exc:
            logger.warning(
                "OAuth login rejected for %s: stored credential is not derived "
                "from this %s identity (account_type=%s)",
                account.user_id,
                identity.provider,
                account.account_type,
            )
            if account.account_type != identity.provider:
                raise CredentialMismatchError(
                    "This email is registered with a password; log in with email and password"
                ) from exc
            raise CredentialMismatchError(
                f"This email is linked to a different {identity.provider} account"
            ) from exc

    async def _create(self, identity: ExternalIdentity) -> Account:
        candidate = Account(
            user_id=generate_user_id(),
            email=identity.email,
            password_hash=self.context.hasher.hash(identity.provider_user_id),
            username=identity.username[:_USERNAME_MAX],
            account_type=identity.provider or ACCOUNT_DISCORD,
            is_verified=identity.verified,
        )
        try:
            return await self.accounts.create(candidate)
        except DuplicateAccountError as exc:
            # Email was claimed between lookup and insert.
            raise CredentialMismatchError(
                "This email is already registered"
            ) from exc
