"""
Account repository — the persistence boundary of the auth core.

``AccountRepository`` is the interface the core depends on;
``SQLAlchemyAccountRepository`` implements it on an ``AsyncSession``.
Writes are flushed, never committed: the request-scoped session decides.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from auth.errors import AccountLookupError, AccountNotFoundError, DuplicateAccountError
from auth.schemas import Account, AvatarOut, UserDetailsIn, UserDetailsOut
from database.models import Avatar, User, UserDetails

logger = logging.getLogger(__name__)


class AccountRepository(ABC):
    """Abstract account store keyed by email and user id."""

    @abstractmethod
    async def find_by_email(self, email: str) -> Account:
        """Return the account or raise ``AccountNotFoundError``."""
        ...

    @abstractmethod
    async def find_by_id(self, user_id: str) -> Account:
        ...

    @abstractmethod
    async def create(self, account: Account) -> Account:
        """Insert *account*; raise ``DuplicateAccountError`` if the email is taken."""
        ...

    @abstractmethod
    async def update(self, account: Account) -> Account:
        ...

    @abstractmethod
    async def save_details(self, user_id: str, details: UserDetailsIn) -> UserDetailsOut:
        ...

    @abstractmethod
    async def find_details(self, user_id: str) -> UserDetailsOut:
        ...

    @abstractmethod
    async def set_avatar(self, user_id: str, filename: str) -> AvatarOut:
        """Create or replace the avatar reference for *user_id*."""
        ...


class SQLAlchemyAccountRepository(AccountRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _get_user(self, **criteria) -> User:
        try:
            result = await self.session.execute(select(User).filter_by(**criteria))
            row = result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            logger.exception("Account lookup failed for %s", criteria)
            raise AccountLookupError() from exc
        if row is None:
            raise AccountNotFoundError()
        return row

    async def find_by_email(self, email: str) -> Account:
        return Account.model_validate(await self._get_user(email=email))

    async def find_by_id(self, user_id: str) -> Account:
        return Account.model_validate(await self._get_user(user_id=user_id))

    async def create(self, account: Account) -> Account:
        row = User(
            user_id=account.user_id,
            email=account.email,
            username=account.username,
            password_hash=account.password_hash,
            account_type=account.account_type,
            is_verified=account.is_verified,
        )
        self.session.add(row)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            logger.info("Duplicate account rejected for %s", account.email)
            raise DuplicateAccountError() from exc
        except SQLAlchemyError as exc:
            logger.exception("Account create failed for %s", account.email)
            raise AccountLookupError() from exc
        return Account.model_validate(row)

    async def update(self, account: Account) -> Account:
        row = await self._get_user(user_id=account.user_id)
        row.email = account.email
        row.username = account.username
        row.password_hash = account.password_hash
        row.account_type = account.account_type
        row.is_verified = account.is_verified
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise DuplicateAccountError() from exc
        except SQLAlchemyError as exc:
            logger.exception("Account update failed for %s", account.user_id)
            raise AccountLookupError() from exc
        return Account.model_validate(row)

    async def save_details(self, user_id: str, details: UserDetailsIn) -> UserDetailsOut:
        await self._get_user(user_id=user_id)
        try:
            row = await self.session.get(UserDetails, user_id)
            if row is None:
                row = UserDetails(user_id=user_id)
                self.session.add(row)
            for field, value in details.model_dump().items():
                setattr(row, field, value)
            await self.session.flush()
        except SQLAlchemyError as exc:
            logger.exception("Saving details failed for %s", user_id)
            raise AccountLookupError() from exc
        return UserDetailsOut.model_validate(row)

    async def find_details(self, user_id: str) -> UserDetailsOut:
        try:
            row = await self.session.get(UserDetails, user_id)
        except SQLAlchemyError as exc:
            logger.exception("Details lookup failed for %s", user_id)
            raise AccountLookupError() from exc
        if row is None:
            raise AccountNotFoundError("User details not found")
        return UserDetailsOut.model_validate(row)

    async def set_avatar(self, user_id: str, filename: str) -> AvatarOut:
        await self._get_user(user_id=user_id)
        try:
            row = await self.session.get(Avatar, user_id)
            if row is None:
                row = Avatar(user_id=user_id, filename=filename)
                self.session.add(row)
            else:
                row.filename = filename
            details = await self.session.get(UserDetails, user_id)
            if details is not None:
                details.avatar = filename
            await self.session.flush()
        except SQLAlchemyError as exc:
            logger.exception("Avatar update failed for %s", user_id)
            raise AccountLookupError() from exc
        return AvatarOut.model_validate(row)
