"""
Pydantic schemas for the authentication core and its HTTP boundary.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

ACCOUNT_NATIVE = "native"
ACCOUNT_DISCORD = "discord"
BCRYPT_MAX_BYTES = 72


# ═══════════════════════════════════════════════════════════════════════════════
# Domain records
# ═══════════════════════════════════════════════════════════════════════════════


class Account(BaseModel):
    """Local user identity record, including the stored credential hash."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    email: str
    password_hash: str
    username: str = ""
    account_type: str = ACCOUNT_NATIVE
    is_verified: bool = False
    created_at: Optional[datetime] = None

    def public(self) -> "PublicAccount":
        """Return the account with the credential field scrubbed."""
        return PublicAccount.model_validate(self.model_dump(exclude={"password_hash"}))


class PublicAccount(BaseModel):
    user_id: str
    email: str
    username: str = ""
    account_type: str = ACCOUNT_NATIVE
    is_verified: bool = False


class ExternalIdentity(BaseModel):
    """
    Profile data obtained from the OAuth provider.

    Lives only for the duration of one OAuth exchange; never stored as-is.
    """

    provider: str = ACCOUNT_DISCORD
    provider_user_id: str
    email: str
    username: str = ""
    avatar: Optional[str] = None
    verified: bool = False


class SignedToken(BaseModel):
    token: str
    subject: str
    issued_at: int
    expires_at: int

    @property
    def max_age(self) -> int:
        return self.expires_at - self.issued_at


class AuthResult(BaseModel):
    """Outcome of a successful signup, login or OAuth reconciliation."""

    account: PublicAccount
    token: SignedToken
    created: bool = False


# ═══════════════════════════════════════════════════════════════════════════════
# Request / response contracts
# ═══════════════════════════════════════════════════════════════════════════════


class _PasswordRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=5, max_length=BCRYPT_MAX_BYTES)

    @field_validator("password")
    @classmethod
    def _fits_bcrypt(cls, value: str) -> str:
        # bcrypt counts bytes, not characters.
        if len(value.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise ValueError(f"password must be at most {BCRYPT_MAX_BYTES} bytes")
        return value


class SignupRequest(_PasswordRequest):
    username: str = Field(default="", max_length=30)


class LoginRequest(_PasswordRequest):
    pass


class AuthResponse(BaseModel):
    user_id: str
    email: str
    username: str
    account_type: str
    token: str
    expires_at: int

    @classmethod
    def from_result(cls, result: AuthResult) -> "AuthResponse":
        return cls(
            user_id=result.account.user_id,
            email=result.account.email,
            username=result.account.username,
            account_type=result.account.account_type,
            token=result.token.token,
            expires_at=result.token.expires_at,
        )


class UserDetailsIn(BaseModel):
    username: str = Field(default="", max_length=30)
    phone: Optional[int] = None
    twitter: str = Field(default="", max_length=128)
    discord: str = Field(default="", max_length=128)
    google: str = Field(default="", max_length=128)


class UserDetailsOut(UserDetailsIn):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    avatar: str = ""


class AvatarOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    filename: str
